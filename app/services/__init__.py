"""Business logic services"""
from app.services.auth_service import AuthService
from app.services.feed_service import FeedService
from app.services.post_service import PostService
from app.services.comment_service import CommentService
from app.services.social_service import SocialService

__all__ = ["AuthService", "FeedService", "PostService", "CommentService", "SocialService"]
