import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = ("en", "ar")
DEFAULT_LANGUAGE = "en"
RTL_LANGUAGES = ("ar",)
_BUNDLE_DIR = Path(__file__).resolve().parent


@lru_cache(maxsize=8)
def get_messages(language: str) -> Dict[str, str]:
    """Đọc bộ chuỗi dịch của một ngôn ngữ từ file JSON đi kèm package."""
    path = _BUNDLE_DIR / f"{language}.json"
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def normalize_language(language: Optional[str]) -> str:
    """Chuẩn hóa tag ngôn ngữ ('ar-SA' -> 'ar'); ngôn ngữ lạ trả về mặc định."""
    if not language:
        return DEFAULT_LANGUAGE
    value = language.strip().lower().split("-")[0].split("_")[0]
    return value if value in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE


class LocaleProvider:
    """
    Giữ ngôn ngữ hiển thị hiện tại và cờ hướng chữ (RTL).
    Tra cứu chuỗi theo thứ tự: ngôn ngữ hiện tại -> tiếng Anh -> chính key.
    """

    def __init__(self, language: Optional[str] = DEFAULT_LANGUAGE):
        self.language = normalize_language(language)

    @property
    def is_rtl(self) -> bool:
        return self.language in RTL_LANGUAGES

    @property
    def direction(self) -> str:
        return "rtl" if self.is_rtl else "ltr"

    def set_language(self, language: str):
        self.language = normalize_language(language)
        logger.debug("Display language set to %s", self.language)

    def t(self, key: str) -> str:
        return get_messages(self.language).get(key) or get_messages(DEFAULT_LANGUAGE).get(key) or key

    @classmethod
    def from_accept_language(cls, header: Optional[str]) -> "LocaleProvider":
        """Chọn ngôn ngữ đầu tiên được hỗ trợ trong header Accept-Language."""
        if header:
            for part in header.split(","):
                tag = part.split(";")[0].strip()
                if normalize_language(tag) != DEFAULT_LANGUAGE or tag.lower().startswith("en"):
                    return cls(tag)
        return cls(DEFAULT_LANGUAGE)
