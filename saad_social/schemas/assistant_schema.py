from pydantic import BaseModel, Field
from typing import List, Literal, Optional


class ChatTurn(BaseModel):
    role: Literal["user", "model"]
    text: str


class AssistantChatRequest(BaseModel):
    prompt: str = Field(..., min_length=1)
    history: List[ChatTurn] = Field(default_factory=list)


class AssistantChatResponse(BaseModel):
    reply: str


class CaptionRequest(BaseModel):
    draft: str = ""
    image: Optional[str] = None
