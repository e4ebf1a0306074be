"""Social graph service (follow edges between users)"""
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from app.core.exceptions import NotFound, SelfFollow
from app.models.social import UserFollow
from app.models.user import User
from typing import List, Set, Dict, Any, Iterable
from enum import Enum
import logging

logger = logging.getLogger(__name__)


class FollowResult(str, Enum):
    created = "created"
    already_following = "already_following"


class SocialService:
    """Service for follow relationships"""

    def __init__(self, db: Session):
        self.db = db

    def follow_user(self, follower_id: int, followed_id: int) -> FollowResult:
        """
        Create a follow edge
        Re-following reports ALREADY_FOLLOWING instead of failing
        """
        # Prevent self-follow before touching the store
        if follower_id == followed_id:
            raise SelfFollow()

        try:
            user_to_follow = self.db.query(User.id).filter(User.id == followed_id).first()
            if not user_to_follow:
                raise NotFound("User not found")

            if self.is_following(follower_id, followed_id):
                return FollowResult.already_following

            self.db.add(UserFollow(follower_id=follower_id, followed_id=followed_id))
            self.db.commit()
            logger.info(f"User {follower_id} now follows {followed_id}")
            return FollowResult.created

        except IntegrityError as e:
            # A concurrent request inserted the same edge first
            self.db.rollback()
            logger.warning(f"Integrity error creating follow: {str(e)}")
            if self.is_following(follower_id, followed_id):
                return FollowResult.already_following
            raise
        except NotFound:
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error following user: {str(e)}")
            raise

    def is_following(self, follower_id: int, followed_id: int) -> bool:
        """
        Check if follower is following user
        """
        follow = self.db.query(UserFollow.id).filter(
            UserFollow.follower_id == follower_id,
            UserFollow.followed_id == followed_id
        ).first()

        return follow is not None

    def get_followers(self, user_id: int) -> List[Dict[str, Any]]:
        """
        Users following this user
        """
        rows = self.db.query(
            User.id, User.name, User.surname, User.email
        ).join(
            UserFollow, UserFollow.follower_id == User.id
        ).filter(
            UserFollow.followed_id == user_id
        ).all()

        return [_user_row(row) for row in rows]

    def get_following(self, user_id: int) -> List[Dict[str, Any]]:
        """
        Users this user follows
        """
        rows = self.db.query(
            User.id, User.name, User.surname, User.email
        ).join(
            UserFollow, UserFollow.followed_id == User.id
        ).filter(
            UserFollow.follower_id == user_id
        ).all()

        return [_user_row(row) for row in rows]

    def get_following_ids(self, user_id: int) -> Set[int]:
        rows = self.db.query(UserFollow.followed_id).filter(UserFollow.follower_id == user_id).all()
        return {row[0] for row in rows}

    def following_flags(self, viewer_id: int, author_ids: Iterable[int]) -> Dict[int, bool]:
        """Per-author 'viewer follows author' map built from one following lookup"""
        following = self.get_following_ids(viewer_id)
        return {author_id: author_id in following for author_id in author_ids}


def _user_row(row) -> Dict[str, Any]:
    return {
        "id": row.id,
        "name": row.name,
        "surname": row.surname,
        "email": row.email,
    }
