import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from . import websocket
from .configs import init_logging
from .errors import SocialError
from .i18n import LocaleProvider
from .models import get_database, init_db
from .routers import assistant_router, auth_router, message_router, post_router, user_router
from .services.environment_service import EnvironmentService
from .services.gemini_service import AdvisoryService
from .services.live import Backend

init_logging()
logger = logging.getLogger(__name__)

# Khởi tạo app FastAPI với thông tin Swagger UI
app = FastAPI(
    title="Saad Social",
    description="Backend mạng xã hội **Saad Social**.\n\n"
                "Hỗ trợ đăng ký, đăng nhập, kết bạn, bài đăng, nhắn tin thời gian thực "
                "và trợ lý AI.",
    version="1.0.0"
)


# Lỗi nghiệp vụ được dịch theo ngôn ngữ của người gọi, không trả mã lỗi thô
@app.exception_handler(SocialError)
async def social_exception_handler(request: Request, exc: SocialError):
    locale = LocaleProvider.from_accept_language(request.headers.get("accept-language"))
    logger.info("Request %s failed: %s", request.url.path, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": locale.t(exc.message_key), "code": exc.message_key},
    )


# Exception handler cho RequestValidationError (Pydantic validation)
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    error_messages = []
    for error in errors:
        field = " -> ".join(str(loc) for loc in error["loc"])
        message = error.get("msg", "Validation error")
        error_messages.append(f"{field}: {message}")

    detail = "; ".join(error_messages) if error_messages else "Validation error"

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": detail}
    )


# Kết nối với cơ sở dữ liệu khi khởi động
@app.on_event("startup")
async def startup_db_client():
    if not hasattr(app.state, "backend"):
        database = await init_db(get_database())
        app.state.backend = Backend(database)
    if not hasattr(app.state, "advisory"):
        app.state.advisory = AdvisoryService()
    if not hasattr(app.state, "environment"):
        app.state.environment = EnvironmentService(advisory=app.state.advisory)
    logger.info("Saad Social backend ready")


# Gắn các router
app.include_router(auth_router.router, prefix="/api/auth", tags=["Xác thực"])
app.include_router(user_router.router, prefix="/api/users", tags=["Người dùng"])
app.include_router(post_router.router, prefix="/api/posts", tags=["Bài viết"])
app.include_router(message_router.router, prefix="/api/messages", tags=["Tin nhắn"])
app.include_router(assistant_router.router, prefix="/api/assistant", tags=["Trợ lý AI"])
app.include_router(websocket.router, prefix="/websocket", tags=["Connect real-time"])


@app.get("/")
def read_root():
    return {"message": "Máy chủ đang chạy"}
