from typing import Optional

from ..models import FriendStatus, Message, Post, User
from ..schemas.auth_schema import UserPublic
from ..schemas.message_schema import MessagePublic
from ..schemas.post_schema import CommentPublic, PostPublic


# Các hàm trợ giúp để chuyển đổi các đối tượng mô hình thành từ điển để trả về hoặc phát sóng
def map_user(user: User, viewer: Optional[User] = None) -> dict:
    """
    Chuyển một User thành dict công khai.
    Số điện thoại bị ẩn với người khác khi showPhone tắt; danh sách bạn bè/lời mời không bao giờ lộ ra.
    """
    is_self = viewer is not None and str(viewer.id) == str(user.id)
    friend_status = None
    if viewer is not None and not is_self:
        if str(user.id) in viewer.friends:
            friend_status = FriendStatus.FRIENDS.value
        elif str(user.id) in viewer.sentRequests:
            friend_status = FriendStatus.PENDING_SENT.value
        elif str(user.id) in viewer.receivedRequests:
            friend_status = FriendStatus.PENDING_RECEIVED.value
        else:
            friend_status = FriendStatus.UNRELATED.value

    public_user = UserPublic(
        id=str(user.id),
        name=user.name,
        email=user.email,
        phone=user.phone if (is_self or user.showPhone) else None,
        showPhone=user.showPhone,
        avatar=user.avatar,
        bio=user.bio,
        language=user.language,
        friendStatus=friend_status,
    )
    return public_user.model_dump()


def map_post(post: Post) -> dict:
    reactions = post.reactions.model_dump()
    public_post = PostPublic(
        id=str(post.id),
        authorId=post.authorId,
        authorName=post.authorName,
        authorAvatar=post.authorAvatar,
        text=post.text,
        image=post.image,
        timestamp=post.timestamp,
        reactions=reactions,
        reactionCounts={kind: len(ids) for kind, ids in reactions.items()},
        comments=[CommentPublic(**comment.model_dump()) for comment in post.comments],
    )
    return public_post.model_dump()


def map_message(msg: Message) -> dict:
    public_msg = MessagePublic(
        id=str(msg.id),
        senderId=msg.senderId,
        receiverId=msg.receiverId,
        text=msg.text,
        image=msg.image,
        audio=msg.audio,
        timestamp=msg.timestamp,
        read=msg.read,
    )
    return public_msg.model_dump()
