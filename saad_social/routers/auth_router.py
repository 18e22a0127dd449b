from fastapi import APIRouter, Depends

from ..errors import AuthProviderError
from ..models import User
from ..schemas import TokenResponse, UserCreate, UserLogin, UserPublic
from ..security import get_current_user, get_db
from ..services.auth_service import AuthProvider
from ..services.database_service import DatabaseService
from ..utils.map_to_dict import map_user

router = APIRouter(tags=["Auth"])


@router.post("/register", response_model=UserPublic, status_code=201)
async def register_user(user_data: UserCreate, db: DatabaseService = Depends(get_db)):
    """
    Endpoint để đăng ký người dùng mới.
    - Số điện thoại hoặc email trùng trả về 409, mật khẩu yếu trả về 400.
    - Thông báo lỗi được dịch theo Accept-Language.
    """
    new_user = await db.register(
        name=user_data.name,
        email=user_data.email,
        phone=user_data.phone,
        password=user_data.password,
    )
    return map_user(new_user, viewer=new_user)


@router.post("/login", response_model=TokenResponse)
async def login_for_access_token(login_data: UserLogin, db: DatabaseService = Depends(get_db)):
    """Đăng nhập và nhận token truy cập kèm hồ sơ tài khoản."""
    user = await db.login(login_data.email, login_data.password)
    if user is None:
        # Có thông tin đăng nhập nhưng không có hồ sơ
        raise AuthProviderError("auth/user-not-found")

    return {
        "access_token": AuthProvider.issue_token(str(user.id)),
        "token_type": "bearer",
        "user": map_user(user, viewer=user),
    }


@router.post("/logout", status_code=204)
async def logout(current_user: User = Depends(get_current_user)):
    """JWT không trạng thái: server không giữ phiên, client chỉ cần bỏ token."""
    return None
