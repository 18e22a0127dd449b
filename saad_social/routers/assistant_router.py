from fastapi import APIRouter, Depends, Query
from typing import Optional

from ..models import User
from ..schemas import AssistantChatRequest, AssistantChatResponse, CaptionRequest, SuggestionList
from ..security import get_advisory, get_current_user, get_db, get_environment
from ..services.database_service import DatabaseService
from ..services.environment_service import Dashboard, EnvironmentService
from ..services.gemini_service import AdvisoryService, assistant_greeting

router = APIRouter(tags=["Assistant"])


@router.get("/greeting", response_model=AssistantChatResponse)
async def get_greeting(current_user: User = Depends(get_current_user)):
    return {"reply": assistant_greeting(current_user.name)}


@router.post("/chat", response_model=AssistantChatResponse)
async def chat_with_assistant(
    request: AssistantChatRequest,
    current_user: User = Depends(get_current_user),
    advisory: AdvisoryService = Depends(get_advisory),
):
    history = [turn.model_dump() for turn in request.history]
    return {"reply": await advisory.ask_assistant(history, request.prompt)}


@router.post("/captions", response_model=SuggestionList)
async def suggest_captions(
    request: CaptionRequest,
    current_user: User = Depends(get_current_user),
    advisory: AdvisoryService = Depends(get_advisory),
):
    return {"suggestions": await advisory.suggest_captions(request.draft, request.image)}


@router.get("/starters", response_model=SuggestionList)
async def suggest_starters(
    friend_id: str = Query(...),
    current_user: User = Depends(get_current_user),
    db: DatabaseService = Depends(get_db),
    advisory: AdvisoryService = Depends(get_advisory),
):
    friend = await db.get_user(friend_id)
    name = friend.name if friend else "my friend"
    return {"suggestions": await advisory.suggest_conversation_starters(name)}


@router.get("/dashboard", response_model=Dashboard)
async def get_dashboard(
    lat: Optional[float] = None,
    lon: Optional[float] = None,
    current_user: User = Depends(get_current_user),
    environment: EnvironmentService = Depends(get_environment),
):
    """Thời tiết, vị trí, giờ cầu nguyện và lời khuyên trong ngày; thiếu tọa độ thì các widget để trống."""
    return await environment.load_dashboard(lat, lon)
