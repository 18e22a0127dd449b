from pydantic import BaseModel
from typing import Literal, Optional


class FriendRequestCreate(BaseModel):
    to_user_id: str


class UserUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    showPhone: Optional[bool] = None
    avatar: Optional[str] = None  # data URL hoặc base64
    bio: Optional[str] = None
    language: Optional[Literal["en", "ar"]] = None
