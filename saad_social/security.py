import logging

from fastapi import Depends, HTTPException, Request, status, WebSocket
from fastapi.security import OAuth2PasswordBearer

from .errors import AuthProviderError
from .i18n import LocaleProvider
from .models import User
from .services.auth_service import AuthProvider
from .services.database_service import DatabaseService
from .services.environment_service import EnvironmentService
from .services.gemini_service import AdvisoryService

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")

credentials_exception = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Could not validate credentials",
    headers={"WWW-Authenticate": "Bearer"},
)


def build_database_service(app) -> DatabaseService:
    """Mỗi request/kết nối có phiên xác thực riêng nhưng dùng chung backend và hub."""
    return DatabaseService(app.state.backend, AuthProvider(), clock=getattr(app.state, "clock", None))


def get_db(request: Request) -> DatabaseService:
    return build_database_service(request.app)


def get_advisory(request: Request) -> AdvisoryService:
    return request.app.state.advisory


def get_environment(request: Request) -> EnvironmentService:
    return request.app.state.environment


def get_locale(request: Request) -> LocaleProvider:
    return LocaleProvider.from_accept_language(request.headers.get("accept-language"))


async def get_user_from_token(token: str, db: DatabaseService) -> User:
    try:
        user_id = await AuthProvider.verify_token(token)
    except AuthProviderError as exc:
        logger.warning("Rejected token: %s", exc.detail)
        raise credentials_exception

    user = await db.get_user(user_id)
    if user is None:
        logger.error("User not found with ID: %s", user_id)
        raise credentials_exception
    return user


async def get_current_user(token: str = Depends(oauth2_scheme), db: DatabaseService = Depends(get_db)) -> User:
    return await get_user_from_token(token, db)


async def get_current_user_ws(websocket: WebSocket, db: DatabaseService) -> User:
    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Token is missing")

    try:
        return await get_user_from_token(token, db)
    except HTTPException:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        raise
