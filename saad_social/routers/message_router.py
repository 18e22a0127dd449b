from fastapi import APIRouter, Depends
from typing import Dict, List

from ..errors import NotFound
from ..models import User
from ..schemas import MarkReadResult, MessageCreate, MessagePublic, SuggestionList, SummaryResponse
from ..security import get_advisory, get_current_user, get_db
from ..services.database_service import DatabaseService
from ..services.gemini_service import AdvisoryService, reply_context, summary_lines
from ..utils.map_to_dict import map_message

router = APIRouter(tags=["Message"])


@router.get("/unread", response_model=Dict[str, int])
async def get_unread_counts(current_user: User = Depends(get_current_user), db: DatabaseService = Depends(get_db)):
    """Số tin chưa đọc theo từng người gửi."""
    return await db.get_unread_counts(str(current_user.id))


@router.post("/{peer_id}", response_model=MessagePublic, status_code=201)
async def send_message(
    peer_id: str,
    message_data: MessageCreate,
    current_user: User = Depends(get_current_user),
    db: DatabaseService = Depends(get_db),
):
    if await db.get_user(peer_id) is None:
        raise NotFound(f"account {peer_id}")
    message = await db.send_message(
        str(current_user.id), peer_id,
        text=message_data.text, image=message_data.image, audio=message_data.audio,
    )
    return map_message(message)


@router.get("/{peer_id}", response_model=List[MessagePublic])
async def get_messages(
    peer_id: str,
    current_user: User = Depends(get_current_user),
    db: DatabaseService = Depends(get_db),
):
    messages = await db.get_messages(str(current_user.id), peer_id)
    return [map_message(message) for message in messages]


@router.post("/{peer_id}/read", response_model=MarkReadResult)
async def mark_as_read(
    peer_id: str,
    current_user: User = Depends(get_current_user),
    db: DatabaseService = Depends(get_db),
):
    updated = await db.mark_messages_as_read(str(current_user.id), peer_id)
    return {"updated": updated}


@router.get("/{peer_id}/suggestions", response_model=SuggestionList)
async def get_reply_suggestions(
    peer_id: str,
    current_user: User = Depends(get_current_user),
    db: DatabaseService = Depends(get_db),
    advisory: AdvisoryService = Depends(get_advisory),
):
    """Gợi ý trả lời cho tin nhắn gần nhất của người kia."""
    messages = await db.get_messages(str(current_user.id), peer_id)
    last_message = next(
        (m.text for m in reversed(messages) if m.senderId == peer_id and m.text), ""
    )
    suggestions = await advisory.get_smart_reply(reply_context(messages), last_message)
    return {"suggestions": suggestions}


@router.get("/{peer_id}/summary", response_model=SummaryResponse)
async def summarize_conversation(
    peer_id: str,
    current_user: User = Depends(get_current_user),
    db: DatabaseService = Depends(get_db),
    advisory: AdvisoryService = Depends(get_advisory),
):
    peer = await db.get_user(peer_id)
    if peer is None:
        raise NotFound(f"account {peer_id}")
    messages = await db.get_messages(str(current_user.id), peer_id)
    summary = await advisory.summarize_chat(summary_lines(messages, str(current_user.id), peer.name))
    return {"summary": summary}
