import logging
import os
from dotenv import load_dotenv

# Tải các biến môi trường từ tệp .env
load_dotenv()

# Cơ sở dữ liệu
MONGO_URI = os.getenv("MONGO_URI")
DATABASE_NAME = os.getenv("DATABASE_NAME", "saad-social")

# JWT
SECRET_KEY = os.getenv("SECRET_KEY", "change-me")  # Khóa bí mật để ký và xác minh token
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 120))

# Gemini
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-3-flash-preview")
GEMINI_CHAT_MODEL = os.getenv("GEMINI_CHAT_MODEL", "gemini-3-pro-preview")
GEMINI_ENDPOINT = os.getenv("GEMINI_ENDPOINT", "https://generativelanguage.googleapis.com/v1beta")

# Các dịch vụ bên ngoài cho widget thời tiết / vị trí / giờ cầu nguyện
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", 10))
WEATHER_URL = os.getenv("WEATHER_URL", "https://api.open-meteo.com/v1/forecast")
GEOCODE_URL = os.getenv("GEOCODE_URL", "https://nominatim.openstreetmap.org/reverse")
PRAYER_URL = os.getenv("PRAYER_URL", "https://api.aladhan.com/v1/timings")
PRAYER_METHOD = int(os.getenv("PRAYER_METHOD", 2))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

_logging_ready = False


def init_logging():
    """Cấu hình logging cho toàn ứng dụng (chỉ chạy một lần)."""
    global _logging_ready
    if _logging_ready:
        return
    logging.basicConfig(
        level=LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    _logging_ready = True
