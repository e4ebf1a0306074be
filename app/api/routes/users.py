"""User profile and follow endpoints"""
from fastapi import APIRouter, Depends, Request, Path, status
from sqlalchemy.orm import Session
from typing import Optional

from app.database import get_db
from app.core.dependencies import get_optional_identity, require_identity, require_session
from app.core.exceptions import NotFound
from app.core.identity import Identity
from app.core.responses import shape, success_response
from app.models.user import User
from app.services.social_service import FollowResult, SocialService
from app.schemas.auth import UserPublic
from app.schemas.social import FollowResponse, UserProfileResponse

router = APIRouter(tags=["users"])


def build_profile(db: Session, user_id: int, viewer: Optional[Identity]) -> UserProfileResponse:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound("User not found")

    service = SocialService(db)
    is_current_user = viewer is not None and viewer.id == user_id
    is_following = (
        viewer is not None
        and not is_current_user
        and service.is_following(viewer.id, user_id)
    )

    return UserProfileResponse(
        user=UserPublic(**user.public_fields()),
        followers=service.get_followers(user_id),
        following=service.get_following(user_id),
        is_following=is_following,
        is_current_user=is_current_user,
    )


@router.get("/profile")
def get_own_profile(
    identity: Identity = Depends(require_session),
    db: Session = Depends(get_db)
):
    """Signed-in user's profile with followers and following (browser session only)"""
    return success_response(build_profile(db, identity.id, identity))


@router.get("/user/{user_id}")
def get_user_profile(
    user_id: int = Path(..., description="User ID"),
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: Session = Depends(get_db)
):
    """
    Public profile

    Returns:
    - followers / following lists
    - is_following: whether the viewer follows this user
    """
    return success_response(build_profile(db, user_id, identity))


@router.post("/user/{user_id}/follow")
def follow_user(
    request: Request,
    user_id: int = Path(..., description="User ID to follow"),
    identity: Identity = Depends(require_identity),
    db: Session = Depends(get_db)
):
    """
    Follow a user

    - Following someone already followed is a no-op reported as
      `already_following`
    - Cannot follow yourself (400)
    """
    result = SocialService(db).follow_user(follower_id=identity.id, followed_id=user_id)

    message = "User followed" if result is FollowResult.created else "Already following this user"
    data = FollowResponse(followed_id=user_id, status=result.value, message=message)

    return shape(
        request,
        data,
        browser_redirect=f"/user/{user_id}",
        status_code=status.HTTP_201_CREATED if result is FollowResult.created else status.HTTP_200_OK,
    )
