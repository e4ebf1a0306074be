"""Post service for business logic"""
from sqlalchemy.orm import Session
from sqlalchemy.dialects import postgresql, sqlite
from app.core.exceptions import NotFound
from app.models.post import Post
from app.models.social import PostVote
from app.schemas.post import PostCreate, PostUpdate
from app.utils.time_utils import utc_now
from typing import Optional
import logging

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class PostService:
    """Service for blog post management and voting"""

    def __init__(self, db: Session):
        self.db = db

    def get_post(self, post_id: int) -> Optional[Post]:
        return self.db.query(Post).filter(Post.id == post_id).first()

    def require_post(self, post_id: int) -> Post:
        post = self.get_post(post_id)
        if not post:
            raise NotFound("Blog post not found")
        return post

    def create_post(self, user_id: int, post_data: PostCreate) -> Post:
        """Create a new post authored by ``user_id``"""
        post = Post(
            user_id=user_id,
            title=post_data.title,
            content=post_data.content,
            date_of_visit=post_data.date_of_visit,
            country_name=post_data.country_name,
        )

        try:
            self.db.add(post)
            self.db.commit()
            self.db.refresh(post)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating blog post: {str(e)}")
            raise

        logger.info(f"Created post {post.id} for user {user_id}")
        return post

    def update_post(self, post_id: int, post_data: PostUpdate) -> Post:
        """
        Update editable fields of a post
        Ownership is checked by the caller; authorship never changes here
        """
        post = self.require_post(post_id)

        update_data = post_data.model_dump(exclude_unset=True, exclude_none=True)
        for field_name, value in update_data.items():
            setattr(post, field_name, value)

        try:
            self.db.commit()
            self.db.refresh(post)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating blog post {post_id}: {str(e)}")
            raise

        return post

    def delete_post(self, post_id: int) -> None:
        """Delete a post together with its comments and votes"""
        post = self.require_post(post_id)

        try:
            self.db.delete(post)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error deleting blog post {post_id}: {str(e)}")
            raise

        logger.info(f"Deleted post {post_id}")

    def vote(self, user_id: int, post_id: int, is_like: bool) -> PostVote:
        """
        Record a like or dislike

        A single INSERT .. ON CONFLICT DO UPDATE against the (user, post)
        unique constraint, so a second vote overwrites the first and
        concurrent votes cannot create duplicates.
        """
        self.require_post(post_id)

        dialect = self.db.get_bind().dialect.name
        insert = _UPSERT_DIALECTS.get(dialect)
        if insert is None:
            raise RuntimeError(f"Vote upsert not supported on dialect {dialect}")

        now = utc_now()
        stmt = insert(PostVote).values(
            user_id=user_id,
            post_id=post_id,
            is_like=is_like,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[PostVote.user_id, PostVote.post_id],
            set_={"is_like": stmt.excluded.is_like, "updated_at": now},
        )

        try:
            self.db.execute(stmt)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error recording vote on post {post_id}: {str(e)}")
            raise

        return self.db.query(PostVote).filter(
            PostVote.user_id == user_id,
            PostVote.post_id == post_id
        ).one()
