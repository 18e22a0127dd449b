import json
import logging

from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect

from .controllers import AppShell
from .models import User
from .security import build_database_service, get_current_user_ws

logger = logging.getLogger(__name__)

router = APIRouter()


async def handle_command(shell: AppShell, data):
    """Xử lý lệnh từ client: chọn tab, mở/đóng cuộc trò chuyện."""
    if not isinstance(data, dict):
        raise ValueError("command must be a JSON object")
    kind = data.get("type")
    if kind == "select_tab":
        await shell.select_tab(data.get("tab", ""))
    elif kind == "open_chat":
        await shell.open_chat(data.get("peerId", ""))
    elif kind == "close_chat":
        await shell.close_chat()
    else:
        raise ValueError(f"unknown command {kind!r}")


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    db = build_database_service(websocket.app)
    try:
        user: User = await get_current_user_ws(websocket, db)
    except HTTPException:
        return

    await websocket.accept()

    async def push(shell: AppShell):
        await websocket.send_json({"type": "shell_state", "payload": shell.snapshot()})

    shell = AppShell(db, user, on_change=push)
    try:
        await shell.start()
        while True:
            raw = await websocket.receive_text()
            try:
                await handle_command(shell, json.loads(raw))
            except ValueError as exc:
                # Bao gồm cả JSONDecodeError: khung lỗi không làm đứt kết nối
                await websocket.send_json({"type": "error", "detail": str(exc)})
    except WebSocketDisconnect:
        pass
    finally:
        shell.close()
