from fastapi import APIRouter, Depends
from typing import List

from ..errors import NotFound
from ..models import User
from ..schemas import CommentCreate, CommentPublic, PostCreate, PostPublic, ReactionCreate, ReactionResult
from ..security import get_current_user, get_db
from ..services.database_service import DatabaseService
from ..utils.map_to_dict import map_post

router = APIRouter(tags=["Post"])


@router.post("", response_model=PostPublic, status_code=201)
async def create_post(
    post_data: PostCreate,
    current_user: User = Depends(get_current_user),
    db: DatabaseService = Depends(get_db),
):
    """Tạo một bài đăng mới; cần ít nhất nội dung hoặc ảnh."""
    new_post = await db.create_post(current_user, post_data.text, post_data.image)
    return map_post(new_post)


@router.get("/feed", response_model=List[PostPublic])
async def get_post_feed(current_user: User = Depends(get_current_user), db: DatabaseService = Depends(get_db)):
    """Bài mới nhất của người dùng và bạn bè."""
    posts = await db.get_feed(str(current_user.id), current_user.friends)
    return [map_post(post) for post in posts]


@router.get("/mine", response_model=List[PostPublic])
async def get_my_posts(current_user: User = Depends(get_current_user), db: DatabaseService = Depends(get_db)):
    posts = await db.get_user_posts(str(current_user.id))
    return [map_post(post) for post in posts]


@router.post("/{post_id}/react", response_model=ReactionResult)
async def react_to_post(
    post_id: str,
    reaction: ReactionCreate,
    current_user: User = Depends(get_current_user),
    db: DatabaseService = Depends(get_db),
):
    """Bật/tắt một loại phản ứng; `active` cho biết phản ứng đang bật hay đã tắt."""
    added = await db.add_reaction(post_id, str(current_user.id), reaction.kind)
    if added is None:
        raise NotFound(f"post {post_id}")
    return {"active": added}


@router.post("/{post_id}/comments", response_model=CommentPublic, status_code=201)
async def add_comment(
    post_id: str,
    comment_data: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: DatabaseService = Depends(get_db),
):
    comment = await db.add_comment(post_id, current_user, comment_data.text)
    return comment.model_dump()
