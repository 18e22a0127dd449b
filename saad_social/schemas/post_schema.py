from pydantic import BaseModel, Field, field_validator
from typing import List, Literal, Optional


class PostCreate(BaseModel):
    text: str = Field(default="", description="Nội dung bài đăng")
    image: Optional[str] = Field(default=None, description="Ảnh dạng data URL hoặc base64")

    @field_validator('text')
    @classmethod
    def text_validation(cls, v: str) -> str:
        return v.strip() if v else ""


class ReactionCreate(BaseModel):
    kind: Literal["like", "love", "haha"]


class ReactionResult(BaseModel):
    active: bool


class CommentCreate(BaseModel):
    text: str = Field(..., min_length=1, description="Nội dung bình luận")


class CommentPublic(BaseModel):
    id: str
    authorId: str
    authorName: str
    authorAvatar: str
    text: str
    timestamp: int


class PostPublic(BaseModel):
    id: str
    authorId: str
    authorName: str
    authorAvatar: str
    text: str
    image: Optional[str] = None
    timestamp: int
    reactions: dict
    reactionCounts: dict
    comments: List[CommentPublic]
