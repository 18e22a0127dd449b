from pydantic import BaseModel
from typing import List, Optional


class MessageCreate(BaseModel):
    text: Optional[str] = None
    image: Optional[str] = None
    audio: Optional[str] = None


class MessagePublic(BaseModel):
    id: str
    senderId: str
    receiverId: str
    text: Optional[str] = None
    image: Optional[str] = None
    audio: Optional[str] = None
    timestamp: int
    read: bool


class MarkReadResult(BaseModel):
    updated: int


class SuggestionList(BaseModel):
    suggestions: List[str]


class SummaryResponse(BaseModel):
    summary: str
