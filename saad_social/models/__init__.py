from .user import User, FriendStatus, default_avatar, DEFAULT_BIO
from .credential import Credential
from .post import Post, Reactions, Comment, REACTION_KINDS
from .message import Message
from .database import init_db, get_database, DOCUMENT_MODELS
