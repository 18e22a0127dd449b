"""
Các lỗi nghiệp vụ của ứng dụng.

Mỗi lỗi mang một `message_key` để tầng giao diện dịch sang ngôn ngữ của người dùng
thông qua LocaleProvider, thay vì hiển thị mã lỗi thô của nhà cung cấp.
"""
from typing import Optional


class SocialError(Exception):
    """Lớp gốc cho mọi lỗi nghiệp vụ."""

    message_key = "error_generic"
    status_code = 400

    def __init__(self, detail: Optional[str] = None, message_key: Optional[str] = None):
        if message_key:
            self.message_key = message_key
        self.detail = detail or self.message_key
        super().__init__(self.detail)


class AuthProviderError(SocialError):
    """Lỗi từ dịch vụ xác thực (sai thông tin đăng nhập, email đã tồn tại...)."""

    status_code = 401
    _KEYS = {
        "auth/invalid-credential": "error_invalid_credential",
        "auth/email-already-in-use": "error_email_in_use",
        "auth/weak-password": "error_weak_password",
    }

    _STATUS = {
        "auth/email-already-in-use": 409,
        "auth/weak-password": 400,
    }

    def __init__(self, code: str, detail: Optional[str] = None):
        self.code = code
        self.status_code = self._STATUS.get(code, self.status_code)
        super().__init__(detail or code, self._KEYS.get(code, "error_auth"))


class DuplicatePhone(SocialError):
    message_key = "error_duplicate_phone"
    status_code = 409


class BackendWriteError(SocialError):
    message_key = "error_backend_write"
    status_code = 503


class FriendRequestError(SocialError):
    """Chuyển trạng thái kết bạn không hợp lệ."""

    message_key = "error_friend_request"
    status_code = 409


class EmptyContent(SocialError):
    message_key = "error_empty_content"


class InvalidReaction(SocialError):
    message_key = "error_invalid_reaction"


class InvalidMedia(SocialError):
    message_key = "error_invalid_media"


class NotFound(SocialError):
    message_key = "error_not_found"
    status_code = 404


class AIProviderError(SocialError):
    """Chỉ dùng nội bộ trong tầng AI, luôn được chuyển thành chuỗi dự phòng."""

    message_key = "error_ai"
    status_code = 502


class GeolocationDenied(SocialError):
    message_key = "error_geolocation"
