from beanie import Document
from pydantic import Field
from typing import Optional


class Message(Document):
    """
    Tin nhắn trực tiếp giữa hai người dùng.
    Chỉ trường 'read' được thay đổi sau khi gửi (False -> True).
    """
    senderId: str = Field(..., description="ID của người gửi.")
    receiverId: str = Field(..., description="ID của người nhận.")
    text: Optional[str] = Field(default=None, description="Nội dung văn bản.")
    image: Optional[str] = Field(default=None, description="Ảnh dạng data URL.")
    audio: Optional[str] = Field(default=None, description="Ghi âm dạng data URL.")
    timestamp: int = Field(..., description="Thời điểm gửi (epoch milliseconds).")
    read: bool = Field(default=False, description="Người nhận đã đọc hay chưa.")

    class Settings:
        name = "messages"
        indexes = [
            "senderId",
            "receiverId",
            "timestamp",
        ]
