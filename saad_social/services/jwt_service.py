from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
from pydantic import BaseModel

from .. import configs


class TokenData(BaseModel):
    """Mô hình dữ liệu cho payload được giải mã từ token."""
    user_id: Optional[str] = None


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Tạo một token truy cập JWT mới.

    Args:
        data (dict): Dữ liệu (payload) để mã hóa vào token, 'sub' là ID tài khoản.
        expires_delta (Optional[timedelta]): Thời gian tồn tại của token.

    Returns:
        str: Token JWT đã được mã hóa.
    """
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=configs.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})

    return jwt.encode(to_encode, configs.SECRET_KEY, algorithm=configs.ALGORITHM)


def decode_access_token(token: str) -> Optional[TokenData]:
    """
    Giải mã một token truy cập JWT.

    Returns:
        Optional[TokenData]: Payload nếu token hợp lệ, ngược lại None (hết hạn, sai chữ ký...).
    """
    try:
        payload = jwt.decode(token, configs.SECRET_KEY, algorithms=[configs.ALGORITHM])
        user_id: str = payload.get("sub")
        if user_id is None:
            return None
        return TokenData(user_id=user_id)
    except JWTError:
        return None
