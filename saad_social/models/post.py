from beanie import Document
from pydantic import Field, BaseModel
from typing import Optional, List

REACTION_KINDS = ("like", "love", "haha")


class Reactions(BaseModel):
    """Ba tập ID người dùng độc lập, mỗi loại là một công tắc bật/tắt riêng."""
    like: List[str] = Field(default_factory=list)
    love: List[str] = Field(default_factory=list)
    haha: List[str] = Field(default_factory=list)


class Comment(BaseModel):
    """Bình luận nhúng trong bài đăng, không thay đổi sau khi thêm."""
    id: str
    authorId: str
    authorName: str
    authorAvatar: str = ""
    text: str
    timestamp: int


class Post(Document):
    """
    Đại diện cho một bài đăng trong collection 'posts'.
    Tên và ảnh tác giả được phi chuẩn hóa tại thời điểm tạo.
    """
    authorId: str = Field(..., description="ID của tác giả bài đăng.")
    authorName: str = Field(..., description="Tên tác giả lúc đăng.")
    authorAvatar: str = Field(default="", description="Ảnh tác giả lúc đăng.")
    text: str = Field(default="", description="Nội dung văn bản.")
    image: Optional[str] = Field(default=None, description="Ảnh dạng data URL (base64).")
    timestamp: int = Field(..., description="Thời điểm tạo (epoch milliseconds).")
    reactions: Reactions = Field(default_factory=Reactions, description="Các phản ứng.")
    comments: List[Comment] = Field(default_factory=list, description="Danh sách bình luận theo thứ tự.")

    class Settings:
        name = "posts"
        indexes = [
            "authorId",
            "timestamp",
        ]
