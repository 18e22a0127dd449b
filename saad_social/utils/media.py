import base64
import binascii
from typing import Optional

from ..errors import InvalidMedia

AVATAR_MAX_BYTES = 1024 * 1024
ATTACHMENT_MAX_BYTES = 8 * 1024 * 1024


def normalize_data_url(value: Optional[str], default_mime: str = "image/jpeg",
                       max_bytes: int = ATTACHMENT_MAX_BYTES) -> Optional[str]:
    """
    Kiểm tra một payload nhị phân dạng chuỗi (data URL hoặc base64 thuần)
    và trả về data URL chuẩn để lưu trực tiếp trong document.
    URL http(s) được giữ nguyên (ví dụ ảnh đại diện mặc định).
    """
    if value is None or value == "":
        return None
    if value.startswith(("http://", "https://")):
        return value

    if "," in value:
        header, data = value.split(",", 1)
        if not header.startswith("data:") or ";base64" not in header:
            raise InvalidMedia("unsupported data URL header")
    else:
        header, data = f"data:{default_mime};base64", value

    # Thêm padding nếu cần
    missing_padding = len(data) % 4
    if missing_padding:
        data += "=" * (4 - missing_padding)
    try:
        raw = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidMedia("payload is not valid base64") from exc

    if not raw:
        raise InvalidMedia("empty payload")
    if len(raw) > max_bytes:
        raise InvalidMedia(f"payload exceeds {max_bytes} bytes")
    return f"{header},{data}"
