"""Database models"""
from app.models.user import User
from app.models.post import Post, Comment
from app.models.social import PostVote, UserFollow

__all__ = [
    "User",
    "Post",
    "Comment",
    "PostVote",
    "UserFollow",
]
