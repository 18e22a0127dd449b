import logging
from typing import Callable, List, Optional

from ..errors import SocialError
from ..i18n import LocaleProvider
from ..models import User
from ..services.database_service import DatabaseService
from ..services.live import Unsubscribe

logger = logging.getLogger(__name__)

VIEW_LOADING = "loading"
VIEW_LOGIN = "login"
VIEW_SHELL = "shell"


class SessionController:
    """
    Bộ điều khiển gốc: theo dõi trạng thái đăng nhập, giữ tài khoản hiện tại
    luôn mới qua subscribe_to_user và quyết định hiển thị màn hình nào.
    Đây cũng là ranh giới lỗi: lỗi trong các callback được ghi log và lưu vào
    `last_error` thay vì lan ra ngoài.
    """

    def __init__(self, db: DatabaseService, locale: Optional[LocaleProvider] = None):
        self.db = db
        self.locale = locale or LocaleProvider()
        self.account: Optional[User] = None
        self.loading = True
        self.alert: Optional[str] = None
        self.last_error: Optional[Exception] = None
        self._account_id: Optional[str] = None
        self._auth_unsubscribe: Optional[Unsubscribe] = None
        self._user_unsubscribe: Optional[Unsubscribe] = None
        self._observers: List[Callable] = []

    @property
    def view(self) -> str:
        if self.loading:
            return VIEW_LOADING
        return VIEW_SHELL if self.account else VIEW_LOGIN

    def on_change(self, callback: Callable[["SessionController"], None]):
        self._observers.append(callback)

    async def start(self):
        self._auth_unsubscribe = await self.db.on_auth_change(self._guard(self._handle_auth))

    async def login(self, email: str, password: str) -> bool:
        self.alert = None
        try:
            await self.db.login(email, password)
        except SocialError as exc:
            self.alert = self.locale.t("alert_login_failed") + self.locale.t(exc.message_key)
            return False
        return True

    async def register(self, name: str, email: str, phone: str, password: str) -> bool:
        self.alert = None
        try:
            await self.db.register(name, email, phone, password)
        except SocialError as exc:
            self.alert = self.locale.t("alert_register_failed") + self.locale.t(exc.message_key)
            return False
        return True

    async def logout(self):
        await self.db.logout()

    def close(self):
        """Hủy mọi listener đang giữ."""
        self._release_user()
        if self._auth_unsubscribe:
            self._auth_unsubscribe()
            self._auth_unsubscribe = None

    async def _handle_auth(self, account: Optional[User]):
        new_id = str(account.id) if account else None
        if new_id != self._account_id:
            self._release_user()
            self._account_id = new_id
            if new_id:
                self._user_unsubscribe = await self.db.subscribe_to_user(new_id, self._guard(self._handle_user))

        self.account = account
        if account:
            self.locale.set_language(account.language)
        self.loading = False
        self._emit()

    async def _handle_user(self, account: User):
        if str(account.id) != self._account_id:
            return
        self.account = account
        self.locale.set_language(account.language)
        self._emit()

    def _release_user(self):
        if self._user_unsubscribe:
            self._user_unsubscribe()
            self._user_unsubscribe = None

    def _emit(self):
        for callback in list(self._observers):
            callback(self)

    def _guard(self, handler):
        async def guarded(value):
            try:
                await handler(value)
            except Exception as exc:
                logger.exception("Session listener failed")
                self.last_error = exc

        return guarded
