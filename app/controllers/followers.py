"""
Followers Controller

Follow / unfollow and follower listings.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.dependencies import get_current_user, get_optional_user, http_error
from app.models import FollowResponse, ProfileResponse
from config.auth import UserContext
from config.database import get_db
from services.errors import AppError
from services.social_service import SocialService

router = APIRouter(tags=["followers"])


@router.post("/followers/{user_id}", response_model=FollowResponse)
def follow(user_id: str, user: UserContext = Depends(get_current_user), db: Session = Depends(get_db)):
    """Follow a user. Following someone twice is a no-op."""
    service = SocialService(db)
    try:
        service.follow(user.user_id, user_id)
    except AppError as e:
        raise http_error(e, "API follow")
    return FollowResponse(following=True, followers_count=service.follower_count(user_id))


@router.delete("/followers/{user_id}", response_model=FollowResponse)
def unfollow(user_id: str, user: UserContext = Depends(get_current_user), db: Session = Depends(get_db)):
    service = SocialService(db)
    service.unfollow(user.user_id, user_id)
    return FollowResponse(following=False, followers_count=service.follower_count(user_id))


@router.get("/users/{user_id}/followers", response_model=list[ProfileResponse])
def list_followers(
    user_id: str,
    viewer: Optional[UserContext] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    return SocialService(db).list_followers(user_id, viewer_id=viewer.user_id if viewer else None)


@router.get("/users/{user_id}/following", response_model=list[ProfileResponse])
def list_following(
    user_id: str,
    viewer: Optional[UserContext] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    return SocialService(db).list_following(user_id, viewer_id=viewer.user_id if viewer else None)
