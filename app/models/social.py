"""Social interaction database models"""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, Boolean, UniqueConstraint, CheckConstraint, Index
from app.database import Base
from app.utils.time_utils import utc_now


class PostVote(Base):
    """Like/dislike on a blog post, one row per user per post"""
    __tablename__ = "liked_posts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    post_id = Column(Integer, ForeignKey("blog_posts.id", ondelete="CASCADE"), nullable=False)
    is_like = Column(Boolean, nullable=False, default=True)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    # Unique constraint: one vote per user per post (upsert target)
    __table_args__ = (
        UniqueConstraint('user_id', 'post_id', name='uq_user_post_vote'),
        Index('idx_liked_posts_post', 'post_id'),
    )


class UserFollow(Base):
    """User follows table"""
    __tablename__ = "follows"

    id = Column(Integer, primary_key=True, autoincrement=True)
    follower_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)  # Who is following
    followed_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)  # Who is being followed
    created_at = Column(DateTime, default=utc_now, nullable=False)

    # Unique constraint: one follow per follower-followed pair
    __table_args__ = (
        UniqueConstraint('follower_id', 'followed_id', name='uq_follower_followed'),
        CheckConstraint('follower_id <> followed_id', name='ck_no_self_follow'),
        Index('idx_follows_follower', 'follower_id'),
        Index('idx_follows_followed', 'followed_id'),
    )
