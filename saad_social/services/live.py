import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

Unsubscribe = Callable[[], None]
Refresh = Callable[[], Awaitable[None]]


async def deliver(callback: Callable[[Any], Any], value: Any):
    """Gọi callback của người nghe; hỗ trợ cả hàm thường lẫn coroutine."""
    result = callback(value)
    if inspect.isawaitable(result):
        await result


class _Listener:
    def __init__(self, collection: str, refresh: Refresh, document_id: Optional[str]):
        self.collection = collection
        self.refresh = refresh
        self.document_id = document_id
        self.active = True

    def matches(self, document_ids: Optional[Iterable[str]]) -> bool:
        if self.document_id is None or document_ids is None:
            return True
        return self.document_id in document_ids


class ChangeHub:
    """
    Sổ đăng ký các live listener theo collection.
    Mỗi thao tác ghi gọi publish(); mọi listener khớp sẽ chạy lại truy vấn của mình
    và nhận một snapshot đầy đủ (không gửi delta).
    """

    def __init__(self):
        # Ánh xạ tên collection tới danh sách listener đang hoạt động
        self.listeners: Dict[str, List[_Listener]] = {}

    def listen(self, collection: str, refresh: Refresh, document_id: Optional[str] = None) -> Unsubscribe:
        """Đăng ký một listener và trả về hàm hủy đăng ký (gọi nhiều lần vẫn an toàn)."""
        listener = _Listener(collection, refresh, document_id)
        self.listeners.setdefault(collection, []).append(listener)

        def unsubscribe():
            if not listener.active:
                return
            listener.active = False
            bucket = self.listeners.get(collection, [])
            if listener in bucket:
                bucket.remove(listener)
            if not bucket:
                self.listeners.pop(collection, None)

        return unsubscribe

    async def publish(self, collection: str, document_ids: Optional[Iterable[str]] = None):
        """Thông báo thay đổi trên một collection; snapshot được gửi tuần tự theo thứ tự đăng ký."""
        ids = set(document_ids) if document_ids is not None else None
        for listener in list(self.listeners.get(collection, [])):
            if not listener.active or not listener.matches(ids):
                continue
            try:
                await listener.refresh()
            except Exception:
                logger.exception("Live listener on '%s' failed", collection)

    def count(self, collection: Optional[str] = None) -> int:
        """Số listener đang hoạt động (dùng để phát hiện rò rỉ)."""
        if collection is not None:
            return len(self.listeners.get(collection, []))
        return sum(len(bucket) for bucket in self.listeners.values())


class Backend:
    """Các handle tới backend: database MongoDB và hub phát thay đổi dùng chung."""

    def __init__(self, database, hub: Optional[ChangeHub] = None):
        self.database = database
        self.hub = hub or ChangeHub()
