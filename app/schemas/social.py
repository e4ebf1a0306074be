"""Social interaction schemas"""
from typing import List
from pydantic import BaseModel

from app.schemas.auth import UserPublic


class FollowResponse(BaseModel):
    """Response for follow"""
    followed_id: int
    status: str  # created | already_following
    message: str


class UserProfileResponse(BaseModel):
    """User profile with follow lists"""
    user: UserPublic
    followers: List[UserPublic]
    following: List[UserPublic]
    is_following: bool = False
    is_current_user: bool = False
