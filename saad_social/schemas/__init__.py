from .auth_schema import UserCreate, UserLogin, UserPublic, TokenResponse
from .user_schema import FriendRequestCreate, UserUpdate
from .post_schema import PostCreate, PostPublic, ReactionCreate, ReactionResult, CommentCreate, CommentPublic
from .message_schema import MessageCreate, MessagePublic, MarkReadResult, SuggestionList, SummaryResponse
from .assistant_schema import ChatTurn, AssistantChatRequest, AssistantChatResponse, CaptionRequest
