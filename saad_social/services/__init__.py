from .auth_service import AuthProvider
from .database_service import DatabaseService
from .environment_service import EnvironmentService
from .gemini_service import AdvisoryService, GeminiClient
from .jwt_service import create_access_token, decode_access_token
from .live import Backend, ChangeHub

__all__ = [
    "AuthProvider",
    "DatabaseService",
    "EnvironmentService",
    "AdvisoryService",
    "GeminiClient",
    "create_access_token",
    "decode_access_token",
    "Backend",
    "ChangeHub",
]
