import logging
import random
import string
import time
from contextlib import contextmanager
from typing import Callable, Dict, Iterable, List, Optional

from beanie import PydanticObjectId
from pymongo.errors import PyMongoError

from ..errors import (
    BackendWriteError,
    DuplicatePhone,
    EmptyContent,
    FriendRequestError,
    InvalidReaction,
    NotFound,
)
from ..models import (
    Comment,
    FriendStatus,
    Message,
    Post,
    REACTION_KINDS,
    User,
    default_avatar,
    init_db,
)
from ..utils.media import AVATAR_MAX_BYTES, normalize_data_url
from .auth_service import AuthProvider
from .live import Backend, Unsubscribe, deliver

logger = logging.getLogger(__name__)

SEARCH_WINDOW = 50
FEED_WINDOW = 50
PROFILE_FIELDS = ("name", "phone", "showPhone", "avatar", "bio", "language")


def _object_id(value: Optional[str]) -> Optional[PydanticObjectId]:
    if value is None or not PydanticObjectId.is_valid(str(value)):
        return None
    return PydanticObjectId(str(value))


def _comment_id() -> str:
    return "".join(random.choices(string.ascii_lowercase + string.digits, k=9))


@contextmanager
def _writing(action: str):
    """Chuyển lỗi của driver MongoDB thành BackendWriteError."""
    try:
        yield
    except PyMongoError as exc:
        logger.exception("Backend write failed: %s", action)
        raise BackendWriteError(f"{action}: {exc}") from exc


class DatabaseService:
    """
    Điểm liên lạc duy nhất với cơ sở dữ liệu và dịch vụ xác thực.

    Mọi thao tác ghi đều phát thay đổi lên hub của backend; các hàm subscribe_*
    chạy lại truy vấn và gửi snapshot đầy đủ cho callback cho đến khi hàm hủy
    đăng ký được gọi.
    """

    def __init__(
        self,
        backend: Backend,
        auth: Optional[AuthProvider] = None,
        clock: Optional[Callable[[], int]] = None,
        search_window: int = SEARCH_WINDOW,
        feed_window: int = FEED_WINDOW,
    ):
        self.backend = backend
        self.hub = backend.hub
        self.auth = auth or AuthProvider()
        self._clock = clock or (lambda: int(time.time() * 1000))
        self.search_window = search_window
        self.feed_window = feed_window

    async def connect(self):
        """Gắn các model Beanie vào database của backend."""
        await init_db(self.backend.database)
        return self

    def now(self) -> int:
        return self._clock()

    # ------------------------------------------------------------------
    # Xác thực
    # ------------------------------------------------------------------

    async def register(self, name: str, email: str, phone: str, password: str) -> User:
        """
        Đăng ký tài khoản mới.
        Kiểm tra trùng số điện thoại chỉ mang tính tham khảo: hai lượt đăng ký đồng thời
        vẫn có thể cùng vượt qua trước khi bên nào ghi xong.
        """
        if await User.find_one(User.phone == phone):
            raise DuplicatePhone(phone)

        credential = await self.auth.create_user(email, password)
        uid = str(credential.id)
        new_user = User(
            id=credential.id,
            name=name,
            email=credential.email,
            phone=phone,
            avatar=default_avatar(uid),
        )
        with _writing("create account"):
            await new_user.insert()
        logger.info("Registered account %s", uid)

        await self.hub.publish("users", [uid])
        # Đăng ký xong thì phiên được mở luôn, giống dịch vụ xác thực gốc
        await self.auth.start_session(uid)
        return new_user

    async def login(self, email: str, password: str) -> Optional[User]:
        """Đăng nhập; trả về None nếu credential hợp lệ nhưng không có hồ sơ tương ứng."""
        credential = await self.auth.sign_in(email, password)
        return await self.get_user(str(credential.id))

    async def logout(self):
        await self.auth.sign_out()

    async def on_auth_change(self, callback: Callable) -> Unsubscribe:
        """Callback nhận tài khoản hiện tại (đọc mới từ DB) hoặc None mỗi khi trạng thái đăng nhập đổi."""
        async def handle(uid: Optional[str]):
            account = await self.get_user(uid) if uid else None
            await deliver(callback, account)

        return await self.auth.on_auth_state_changed(handle)

    # ------------------------------------------------------------------
    # Tài khoản
    # ------------------------------------------------------------------

    async def get_user(self, user_id: Optional[str]) -> Optional[User]:
        oid = _object_id(user_id)
        if oid is None:
            return None
        return await User.get(oid)

    async def get_users(self, user_ids: Iterable[str]) -> List[User]:
        """Lấy nhiều tài khoản, giữ nguyên thứ tự ID và bỏ qua ID không tồn tại."""
        ids = [uid for uid in user_ids]
        object_ids = [oid for oid in (_object_id(uid) for uid in ids) if oid is not None]
        if not object_ids:
            return []
        users = await User.find({"_id": {"$in": object_ids}}).to_list()
        by_id = {str(user.id): user for user in users}
        return [by_id[uid] for uid in ids if uid in by_id]

    async def subscribe_to_user(self, user_id: str, callback: Callable) -> Unsubscribe:
        async def refresh():
            user = await self.get_user(user_id)
            if user:
                await deliver(callback, user)

        return await self._listen("users", refresh, document_id=user_id)

    async def update_profile(self, user_id: str, data: Dict) -> None:
        """
        Ghi đè chỉ những trường được truyền vào.
        Không cập nhật cục bộ: giao diện phải chờ listener phản ánh thay đổi.
        """
        changes = {key: value for key, value in data.items() if key in PROFILE_FIELDS and value is not None}
        if not changes:
            return
        if "avatar" in changes:
            changes["avatar"] = normalize_data_url(changes["avatar"], max_bytes=AVATAR_MAX_BYTES)
        if "language" in changes and changes["language"] not in ("en", "ar"):
            changes.pop("language")

        with _writing("update profile"):
            result = await self._update_user(user_id, {"$set": changes})
        if result is None or result.matched_count == 0:
            raise BackendWriteError(f"account {user_id} not found")
        await self.hub.publish("users", [user_id])

    async def search_users(self, exclude_id: str, search_term: str) -> List[User]:
        """
        Tìm theo tên hoặc số điện thoại (không phân biệt hoa thường).
        Chỉ quét tối đa `search_window` tài khoản đầu tiên rồi lọc phía client,
        nên tài khoản nằm ngoài cửa sổ quét sẽ không bao giờ được tìm thấy.
        """
        users = await User.find({}, limit=self.search_window).to_list()
        term = (search_term or "").lower()
        return [
            user for user in users
            if str(user.id) != exclude_id
            and (not term or term in user.name.lower() or term in user.phone.lower())
        ]

    # ------------------------------------------------------------------
    # Kết bạn
    # ------------------------------------------------------------------

    @staticmethod
    def relationship(account: User, peer_id: str) -> FriendStatus:
        """Xác định trạng thái kết bạn của `account` với `peer_id`."""
        if peer_id in account.friends:
            return FriendStatus.FRIENDS
        if peer_id in account.sentRequests:
            return FriendStatus.PENDING_SENT
        if peer_id in account.receivedRequests:
            return FriendStatus.PENDING_RECEIVED
        return FriendStatus.UNRELATED

    async def send_friend_request(self, from_id: str, to_id: str):
        """Chỉ hợp lệ khi hai người chưa có quan hệ nào."""
        if from_id == to_id:
            raise FriendRequestError("cannot send a friend request to yourself")
        sender = await self._require_user(from_id)
        await self._require_user(to_id)
        if self.relationship(sender, to_id) != FriendStatus.UNRELATED:
            raise FriendRequestError(f"{from_id} and {to_id} are not unrelated")

        # Hai lần ghi độc lập, không nằm trong transaction
        with _writing("send friend request"):
            await self._update_user(from_id, {"$addToSet": {"sentRequests": to_id}})
            await self._update_user(to_id, {"$addToSet": {"receivedRequests": from_id}})
        await self.hub.publish("users", [from_id, to_id])

    async def accept_friend_request(self, user_id: str, target_id: str):
        """Lời mời đang chờ (theo bất kỳ chiều nào) -> bạn bè."""
        await self._require_pending(user_id, target_id)
        with _writing("accept friend request"):
            await self._update_user(user_id, {
                "$pull": {"sentRequests": target_id, "receivedRequests": target_id},
                "$addToSet": {"friends": target_id},
            })
            await self._update_user(target_id, {
                "$pull": {"sentRequests": user_id, "receivedRequests": user_id},
                "$addToSet": {"friends": user_id},
            })
        await self.hub.publish("users", [user_id, target_id])

    async def reject_friend_request(self, user_id: str, target_id: str):
        """Lời mời đang chờ (theo bất kỳ chiều nào) -> không quan hệ."""
        await self._require_pending(user_id, target_id)
        with _writing("reject friend request"):
            await self._update_user(user_id, {"$pull": {"sentRequests": target_id, "receivedRequests": target_id}})
            await self._update_user(target_id, {"$pull": {"sentRequests": user_id, "receivedRequests": user_id}})
        await self.hub.publish("users", [user_id, target_id])

    # ------------------------------------------------------------------
    # Bài đăng
    # ------------------------------------------------------------------

    async def create_post(self, author: User, text: str, image: Optional[str] = None) -> Post:
        text = (text or "").strip()
        image = normalize_data_url(image)
        if not text and not image:
            raise EmptyContent("a post needs text or an image")

        new_post = Post(
            authorId=str(author.id),
            authorName=author.name,
            authorAvatar=author.avatar,
            text=text,
            image=image,
            timestamp=self.now(),
        )
        with _writing("create post"):
            await new_post.insert()
        await self.hub.publish("posts", [str(new_post.id)])
        return new_post

    async def get_feed(self, user_id: str, friend_ids: Iterable[str]) -> List[Post]:
        """
        Lấy `feed_window` bài mới nhất trên toàn hệ thống rồi lọc theo tác giả.
        Bài của bạn bè có thể bị bỏ sót nếu có nhiều hơn `feed_window` bài mới hơn của người khác.
        """
        allowed_ids = {user_id, *friend_ids}
        posts = await Post.find({}, sort="-timestamp", limit=self.feed_window).to_list()
        return [post for post in posts if post.authorId in allowed_ids]

    async def get_user_posts(self, user_id: str) -> List[Post]:
        """Bài của chính người dùng trong cửa sổ feed (trang cá nhân)."""
        return await self.get_feed(user_id, [])

    async def subscribe_to_feed(self, user_id: str, friend_ids: Iterable[str], callback: Callable) -> Unsubscribe:
        friend_ids = list(friend_ids)

        async def refresh():
            await deliver(callback, await self.get_feed(user_id, friend_ids))

        return await self._listen("posts", refresh)

    async def add_reaction(self, post_id: str, user_id: str, kind: str) -> Optional[bool]:
        """
        Bật/tắt phản ứng `kind` của người dùng.
        Mỗi lần bật/tắt là một cập nhật nguyên tử trên đúng một phần tử nên
        các phản ứng đồng thời của người khác không bị ghi đè.
        Trả về True nếu vừa thêm, False nếu vừa bỏ, None nếu bài không tồn tại.
        """
        if kind not in REACTION_KINDS:
            raise InvalidReaction(kind)
        oid = _object_id(post_id)
        if oid is None:
            return None

        collection = Post.get_motor_collection()
        field = f"reactions.{kind}"
        with _writing("toggle reaction"):
            result = await collection.update_one({"_id": oid, field: {"$ne": user_id}}, {"$addToSet": {field: user_id}})
            added = result.matched_count > 0
            if not added:
                result = await collection.update_one({"_id": oid, field: user_id}, {"$pull": {field: user_id}})
        if result.matched_count == 0:
            return None

        await self.hub.publish("posts", [post_id])
        return added

    async def add_comment(self, post_id: str, author: User, text: str) -> Comment:
        """Nối bình luận bằng $push nguyên tử, an toàn khi nhiều người cùng bình luận."""
        text = (text or "").strip()
        if not text:
            raise EmptyContent("a comment needs text")
        oid = _object_id(post_id)
        if oid is None:
            raise NotFound(f"post {post_id}")

        comment = Comment(
            id=_comment_id(),
            authorId=str(author.id),
            authorName=author.name,
            authorAvatar=author.avatar,
            text=text,
            timestamp=self.now(),
        )
        with _writing("add comment"):
            result = await Post.get_motor_collection().update_one(
                {"_id": oid}, {"$push": {"comments": comment.model_dump()}}
            )
        if result.matched_count == 0:
            raise NotFound(f"post {post_id}")

        await self.hub.publish("posts", [post_id])
        return comment

    # ------------------------------------------------------------------
    # Tin nhắn
    # ------------------------------------------------------------------

    async def send_message(
        self,
        sender_id: str,
        receiver_id: str,
        text: Optional[str] = None,
        image: Optional[str] = None,
        audio: Optional[str] = None,
    ) -> Message:
        text = (text or "").strip() or None
        image = normalize_data_url(image)
        audio = normalize_data_url(audio, default_mime="audio/webm")
        if not text and not image and not audio:
            raise EmptyContent("a message needs text, an image or audio")

        message = Message(
            senderId=sender_id,
            receiverId=receiver_id,
            text=text,
            image=image,
            audio=audio,
            timestamp=self.now(),
            read=False,
        )
        with _writing("send message"):
            await message.insert()
        await self.hub.publish("messages", [str(message.id)])
        return message

    async def mark_messages_as_read(self, receiver_id: str, sender_id: str) -> int:
        """
        Đánh dấu đã đọc mọi tin chưa đọc từ `sender_id` gửi `receiver_id` trong một lần update_many.
        Gọi lại khi không còn tin chưa đọc thì không ghi gì và trả về 0.
        """
        query = {"receiverId": receiver_id, "senderId": sender_id, "read": False}
        if await Message.find(query).count() == 0:
            return 0

        with _writing("mark messages as read"):
            result = await Message.get_motor_collection().update_many(query, {"$set": {"read": True}})
        if result.modified_count:
            await self.hub.publish("messages")
        return result.modified_count

    async def get_messages(self, u1: str, u2: str) -> List[Message]:
        """Toàn bộ hội thoại hai chiều, sắp xếp tăng dần theo thời gian."""
        messages = await Message.find({
            "$or": [
                {"senderId": u1, "receiverId": u2},
                {"senderId": u2, "receiverId": u1},
            ]
        }).to_list()
        messages.sort(key=lambda m: (m.timestamp, str(m.id)))
        return messages

    async def subscribe_to_messages(self, u1: str, u2: str, callback: Callable) -> Unsubscribe:
        async def refresh():
            await deliver(callback, await self.get_messages(u1, u2))

        return await self._listen("messages", refresh)

    async def get_unread_counts(self, user_id: str) -> Dict[str, int]:
        unread = await Message.find({"receiverId": user_id, "read": False}).to_list()
        counts: Dict[str, int] = {}
        for message in unread:
            counts[message.senderId] = counts.get(message.senderId, 0) + 1
        return counts

    async def subscribe_to_all_unread(self, user_id: str, callback: Callable) -> Unsubscribe:
        async def refresh():
            await deliver(callback, await self.get_unread_counts(user_id))

        return await self._listen("messages", refresh)

    # ------------------------------------------------------------------
    # Nội bộ
    # ------------------------------------------------------------------

    async def _listen(self, collection: str, refresh, document_id: Optional[str] = None) -> Unsubscribe:
        # Đăng ký trước khi đọc snapshot đầu tiên để không lỡ thay đổi xen giữa
        unsubscribe = self.hub.listen(collection, refresh, document_id=document_id)
        try:
            await refresh()
        except Exception:
            unsubscribe()
            raise
        return unsubscribe

    async def _update_user(self, user_id: str, update: Dict):
        oid = _object_id(user_id)
        if oid is None:
            return None
        return await User.get_motor_collection().update_one({"_id": oid}, update)

    async def _require_user(self, user_id: str) -> User:
        user = await self.get_user(user_id)
        if not user:
            raise NotFound(f"account {user_id}")
        return user

    async def _require_pending(self, user_id: str, target_id: str):
        account = await self._require_user(user_id)
        await self._require_user(target_id)
        status = self.relationship(account, target_id)
        if status not in (FriendStatus.PENDING_SENT, FriendStatus.PENDING_RECEIVED):
            raise FriendRequestError(f"no pending request between {user_id} and {target_id}")
