from beanie import Document
from enum import Enum
from pydantic import Field, EmailStr
from typing import List, Literal

DEFAULT_BIO = "Hello, I am using Saad Social App!"
AVATAR_SEED_URL = "https://api.dicebear.com/7.x/avataaars/svg?seed={seed}"


class FriendStatus(str, Enum):
    """Trạng thái quan hệ giữa tài khoản hiện tại và một người khác."""
    UNRELATED = "unrelated"
    PENDING_SENT = "pending_sent"
    PENDING_RECEIVED = "pending_received"
    FRIENDS = "friends"


def default_avatar(seed: str) -> str:
    """Ảnh đại diện mặc định, sinh cố định theo ID tài khoản."""
    return AVATAR_SEED_URL.format(seed=seed)


class User(Document):
    """
    Đại diện cho một tài khoản trong collection 'users'.
    ID của document trùng với ID của thông tin đăng nhập (Credential).
    """
    name: str = Field(..., description="Tên hiển thị của người dùng.")
    email: EmailStr = Field(..., description="Địa chỉ email của người dùng.")
    phone: str = Field(..., description="Số điện thoại (kiểm tra trùng khi đăng ký).")
    showPhone: bool = Field(default=True, description="Có hiển thị số điện thoại cho người khác hay không.")
    avatar: str = Field(default="", description="URL hoặc data URL của ảnh đại diện.")
    bio: str = Field(default=DEFAULT_BIO, description="Tiểu sử ngắn của người dùng.")
    language: Literal["en", "ar"] = Field(default="en", description="Ngôn ngữ hiển thị.")

    # Ba tập ID tạo nên máy trạng thái kết bạn
    friends: List[str] = Field(default_factory=list, description="Danh sách ID của bạn bè.")
    sentRequests: List[str] = Field(default_factory=list, description="ID những người đã được gửi lời mời.")
    receivedRequests: List[str] = Field(default_factory=list, description="ID những người đã gửi lời mời đến.")

    class Settings:
        name = "users"
        indexes = [
            "email",
            "phone",
        ]
