"""Comment service"""
from sqlalchemy import desc, func
from sqlalchemy.orm import Session
from typing import Any, Dict
import logging

from app.core.exceptions import NotFound
from app.models.post import Post, Comment
from app.models.user import User
from app.services.feed_service import build_pagination

logger = logging.getLogger(__name__)


class CommentService:
    """Service for post comments"""

    def __init__(self, db: Session):
        self.db = db

    def create_comment(self, user_id: int, post_id: int, content: str) -> Comment:
        post_exists = self.db.query(Post.id).filter(Post.id == post_id).first()
        if not post_exists:
            raise NotFound("Blog post not found")

        comment = Comment(post_id=post_id, user_id=user_id, content=content)
        try:
            self.db.add(comment)
            self.db.commit()
            self.db.refresh(comment)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating comment: {str(e)}")
            raise

        return comment

    def get_comments_for_post(self, post_id: int, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        """Newest-first comments with their authors, paginated"""
        offset = (page - 1) * limit

        rows = self.db.query(
            Comment,
            User.name.label("user_name"),
            User.surname.label("user_surname"),
        ).join(
            User, Comment.user_id == User.id
        ).filter(
            Comment.post_id == post_id
        ).order_by(
            desc(Comment.created_at)
        ).offset(offset).limit(limit).all()

        total = self.db.query(func.count(Comment.id)).filter(Comment.post_id == post_id).scalar() or 0

        comments = [
            {
                "id": row.Comment.id,
                "post_id": row.Comment.post_id,
                "user_id": row.Comment.user_id,
                "content": row.Comment.content,
                "created_at": row.Comment.created_at,
                "user_name": row.user_name,
                "user_surname": row.user_surname,
            }
            for row in rows
        ]

        return {
            "comments": comments,
            "pagination": build_pagination(total, page, limit),
        }
