from beanie import Document
from pydantic import Field, EmailStr
from datetime import datetime


class Credential(Document):
    """
    Thông tin đăng nhập trong collection 'credentials'.
    Tách biệt với hồ sơ người dùng, chỉ liên kết qua ID dùng chung.
    """
    email: EmailStr = Field(..., description="Email đăng nhập duy nhất.")
    hashedPassword: str = Field(..., description="Mật khẩu đã được băm.")
    createdAt: datetime = Field(default_factory=datetime.utcnow, description="Thời điểm tạo.")

    class Settings:
        name = "credentials"
        indexes = [
            "email",
        ]
