import logging
from datetime import timedelta
from typing import Callable, List, Optional

from beanie import PydanticObjectId
from passlib.context import CryptContext

from .. import configs
from ..errors import AuthProviderError
from ..models import Credential
from . import jwt_service
from .live import Unsubscribe, deliver

logger = logging.getLogger(__name__)

# Thiết lập ngữ cảnh băm mật khẩu
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

MIN_PASSWORD_LENGTH = 6


class AuthProvider:
    """
    Dịch vụ thông tin đăng nhập: tạo tài khoản đăng nhập, đăng nhập/đăng xuất,
    thông báo thay đổi trạng thái đăng nhập và cấp/xác minh JWT.
    Mỗi instance giữ một phiên (giống một tab trình duyệt).
    """

    def __init__(self):
        self.current_uid: Optional[str] = None
        self._listeners: List[Callable] = []

    @staticmethod
    def verify_password(plain_password, hashed_password):
        """Xác minh mật khẩu thuần túy với mật khẩu đã được băm."""
        return pwd_context.verify(plain_password, hashed_password)

    @staticmethod
    def get_password_hash(password):
        """Băm một mật khẩu thuần túy."""
        return pwd_context.hash(password)

    async def create_user(self, email: str, password: str) -> Credential:
        """
        Tạo thông tin đăng nhập mới. Không tự đăng nhập; bên gọi quyết định
        khi nào mở phiên (sau khi hồ sơ đã được ghi).
        """
        email = email.strip().lower()
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise AuthProviderError("auth/weak-password")
        if await Credential.find_one(Credential.email == email):
            raise AuthProviderError("auth/email-already-in-use")

        credential = Credential(email=email, hashedPassword=self.get_password_hash(password))
        await credential.insert()
        logger.info("Created credential %s", credential.id)
        return credential

    async def sign_in(self, email: str, password: str) -> Credential:
        """Đăng nhập bằng email/mật khẩu; sai thông tin ném AuthProviderError."""
        email = (email or "").strip().lower()
        credential = await Credential.find_one(Credential.email == email)
        if not credential or not self.verify_password(password, credential.hashedPassword):
            raise AuthProviderError("auth/invalid-credential")
        await self.start_session(str(credential.id))
        return credential

    async def sign_out(self):
        if self.current_uid is None:
            return
        self.current_uid = None
        await self._notify()

    async def start_session(self, uid: str):
        self.current_uid = uid
        await self._notify()

    async def on_auth_state_changed(self, callback: Callable) -> Unsubscribe:
        """Đăng ký listener; gọi ngay với trạng thái hiện tại rồi mỗi lần đăng nhập/đăng xuất."""
        self._listeners.append(callback)
        await deliver(callback, self.current_uid)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    async def _notify(self):
        for callback in list(self._listeners):
            await deliver(callback, self.current_uid)

    @staticmethod
    def issue_token(uid: str) -> str:
        return jwt_service.create_access_token(
            data={"sub": uid},
            expires_delta=timedelta(minutes=configs.ACCESS_TOKEN_EXPIRE_MINUTES),
        )

    @staticmethod
    async def verify_token(token: str) -> str:
        """Trả về ID tài khoản trong token; token hỏng hoặc không có credential tương ứng bị từ chối."""
        token_data = jwt_service.decode_access_token(token)
        if not token_data or not token_data.user_id:
            raise AuthProviderError("auth/invalid-token")
        if not PydanticObjectId.is_valid(token_data.user_id):
            raise AuthProviderError("auth/invalid-token")
        if not await Credential.get(token_data.user_id):
            raise AuthProviderError("auth/invalid-token")
        return token_data.user_id
