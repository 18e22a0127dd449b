from fastapi import APIRouter, Depends, Query
from typing import List

from ..errors import NotFound
from ..models import User
from ..schemas import FriendRequestCreate, UserPublic, UserUpdate
from ..security import get_current_user, get_db
from ..services.database_service import DatabaseService
from ..utils.map_to_dict import map_user

router = APIRouter(tags=["User"])


# Lấy hồ sơ của người dùng hiện tại
@router.get("/me", response_model=UserPublic)
async def read_users_me(current_user: User = Depends(get_current_user)):
    return map_user(current_user, viewer=current_user)


# Cập nhật hồ sơ của người dùng hiện tại
@router.put("/me", response_model=UserPublic)
async def update_user_me(
    user_update: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: DatabaseService = Depends(get_db),
):
    """Chỉ ghi những trường được gửi lên; ảnh đại diện tối đa 1 MB."""
    user_id = str(current_user.id)
    await db.update_profile(user_id, user_update.model_dump(exclude_unset=True))
    updated = await db.get_user(user_id)
    return map_user(updated, viewer=updated)


@router.get("/search", response_model=List[UserPublic])
async def search_users(
    q: str = Query(default=""),
    current_user: User = Depends(get_current_user),
    db: DatabaseService = Depends(get_db),
):
    users = await db.search_users(str(current_user.id), q)
    return [map_user(user, viewer=current_user) for user in users]


@router.get("/friends", response_model=List[UserPublic])
async def get_friends(current_user: User = Depends(get_current_user), db: DatabaseService = Depends(get_db)):
    friends = await db.get_users(current_user.friends)
    return [map_user(friend, viewer=current_user) for friend in friends]


@router.get("/friend-requests", response_model=List[UserPublic])
async def get_friend_requests(current_user: User = Depends(get_current_user), db: DatabaseService = Depends(get_db)):
    """Những người đã gửi lời mời kết bạn đến người dùng hiện tại."""
    senders = await db.get_users(current_user.receivedRequests)
    return [map_user(sender, viewer=current_user) for sender in senders]


@router.post("/friend-request", status_code=201)
async def send_friend_request(
    request: FriendRequestCreate,
    current_user: User = Depends(get_current_user),
    db: DatabaseService = Depends(get_db),
):
    await db.send_friend_request(str(current_user.id), request.to_user_id)
    return {"status": "pending_sent"}


@router.post("/friend-request/{user_id}/accept")
async def accept_friend_request(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: DatabaseService = Depends(get_db),
):
    await db.accept_friend_request(str(current_user.id), user_id)
    return {"status": "friends"}


@router.post("/friend-request/{user_id}/reject")
async def reject_friend_request(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: DatabaseService = Depends(get_db),
):
    await db.reject_friend_request(str(current_user.id), user_id)
    return {"status": "unrelated"}


@router.get("/{user_id}", response_model=UserPublic)
async def get_user_profile(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: DatabaseService = Depends(get_db),
):
    user = await db.get_user(user_id)
    if user is None:
        raise NotFound(f"account {user_id}")
    return map_user(user, viewer=current_user)
