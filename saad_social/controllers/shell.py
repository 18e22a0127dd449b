import logging
from typing import Callable, Dict, List, Optional

from ..i18n import LocaleProvider
from ..models import Message, User
from ..services.database_service import DatabaseService
from ..services.gemini_service import reply_context, summary_lines
from ..services.live import Unsubscribe
from ..utils.map_to_dict import map_message, map_user

logger = logging.getLogger(__name__)

TABS = ("profile", "chats", "search", "settings", "ai-assistant", "community")
DEFAULT_TAB = "chats"


class ChatThread:
    """Một cuộc trò chuyện đang mở: danh sách tin nhắn trực tiếp, tự đánh dấu đã đọc."""

    def __init__(self, db: DatabaseService, me: User, peer_id: str, on_change: Optional[Callable] = None):
        self.db = db
        self.me = me
        self.peer_id = peer_id
        self.messages: List[Message] = []
        self._on_change = on_change
        self._unsubscribe: Optional[Unsubscribe] = None

    @property
    def me_id(self) -> str:
        return str(self.me.id)

    async def open(self):
        await self.db.mark_messages_as_read(self.me_id, self.peer_id)
        self._unsubscribe = await self.db.subscribe_to_messages(self.me_id, self.peer_id, self._handle_messages)

    async def _handle_messages(self, messages: List[Message]):
        self.messages = messages
        # Tin mới của người kia đến khi đang mở hội thoại thì được đọc ngay
        if any(m.senderId == self.peer_id and not m.read for m in messages):
            await self.db.mark_messages_as_read(self.me_id, self.peer_id)
        if self._on_change:
            await self._on_change(self)

    async def send(self, text: Optional[str] = None, image: Optional[str] = None,
                   audio: Optional[str] = None) -> Message:
        return await self.db.send_message(self.me_id, self.peer_id, text=text, image=image, audio=audio)

    def context_for_reply(self) -> str:
        return reply_context(self.messages)

    def last_peer_message(self) -> Optional[str]:
        for message in reversed(self.messages):
            if message.senderId == self.peer_id and message.text:
                return message.text
        return None

    def summary_lines(self, peer_name: str) -> List[str]:
        return summary_lines(self.messages, self.me_id, peer_name)

    def close(self):
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None


class AppShell:
    """
    Trạng thái khung ứng dụng sau khi đăng nhập: tab đang chọn, danh sách bạn bè,
    lời mời kết bạn, số tin chưa đọc và cuộc trò chuyện đang mở.
    """

    def __init__(self, db: DatabaseService, account: User, locale: Optional[LocaleProvider] = None,
                 on_change: Optional[Callable] = None):
        self.db = db
        self.account = account
        self.locale = locale or LocaleProvider(account.language)
        self.active_tab = DEFAULT_TAB
        self.friends: List[User] = []
        self.pending_requests: List[User] = []
        self.unread_counts: Dict[str, int] = {}
        self.selected_friend: Optional[User] = None
        self.chat: Optional[ChatThread] = None
        self._on_change = on_change
        self._account_unsubscribe: Optional[Unsubscribe] = None
        self._unread_unsubscribe: Optional[Unsubscribe] = None

    @property
    def total_unread(self) -> int:
        return sum(self.unread_counts.values())

    async def start(self):
        # Hồ sơ thay đổi (kết bạn, đổi ngôn ngữ...) thì bạn bè và lời mời được đọc lại
        self._account_unsubscribe = await self.db.subscribe_to_user(str(self.account.id), self.refresh)
        self._unread_unsubscribe = await self.db.subscribe_to_all_unread(str(self.account.id), self._handle_unread)

    async def refresh(self, account: User):
        """Đọc lại bạn bè và lời mời mỗi khi hồ sơ tài khoản thay đổi."""
        self.account = account
        self.locale.set_language(account.language)
        self.friends = await self.db.get_users(account.friends)
        self.pending_requests = await self.db.get_users(account.receivedRequests)
        await self._emit()

    async def select_tab(self, tab: str):
        if tab not in TABS:
            raise ValueError(f"unknown tab {tab!r}")
        self.active_tab = tab
        if tab != "chats":
            self._close_chat()
        await self._emit()

    async def open_chat(self, peer_id: str) -> ChatThread:
        peer = await self.db.get_user(peer_id)
        if peer is None:
            raise ValueError(f"unknown account {peer_id!r}")
        self._close_chat()
        self.active_tab = "chats"
        self.selected_friend = peer
        self.chat = ChatThread(self.db, self.account, peer_id, on_change=self._handle_chat)
        await self.chat.open()
        await self._emit()
        return self.chat

    async def close_chat(self):
        self._close_chat()
        await self._emit()

    def snapshot(self) -> Dict:
        return {
            "account": map_user(self.account, viewer=self.account),
            "activeTab": self.active_tab,
            "direction": self.locale.direction,
            "friends": [map_user(friend, viewer=self.account) for friend in self.friends],
            "pendingRequests": [map_user(user, viewer=self.account) for user in self.pending_requests],
            "unreadCounts": dict(self.unread_counts),
            "totalUnread": self.total_unread,
            "selectedFriendId": str(self.selected_friend.id) if self.selected_friend else None,
            "messages": [map_message(m) for m in self.chat.messages] if self.chat else [],
        }

    def close(self):
        self._close_chat()
        if self._account_unsubscribe:
            self._account_unsubscribe()
            self._account_unsubscribe = None
        if self._unread_unsubscribe:
            self._unread_unsubscribe()
            self._unread_unsubscribe = None

    async def _handle_unread(self, counts: Dict[str, int]):
        self.unread_counts = counts
        await self._emit()

    async def _handle_chat(self, _thread: ChatThread):
        await self._emit()

    def _close_chat(self):
        if self.chat:
            self.chat.close()
        self.chat = None
        self.selected_friend = None

    async def _emit(self):
        if self._on_change:
            try:
                await self._on_change(self)
            except Exception:
                logger.exception("Shell observer failed")
