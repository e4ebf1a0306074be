"""Blog post and comment models"""
from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, Text, Index
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.time_utils import utc_now


class Post(Base):
    """Travel blog post about a visited country"""

    __tablename__ = "blog_posts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Authorship is fixed at creation; updates never touch user_id
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    date_of_visit = Column(String(32), nullable=False)
    country_name = Column(String(255), nullable=False, index=True)

    created_at = Column(DateTime, default=utc_now, nullable=False)

    # Relationships
    author = relationship("User", back_populates="posts")
    comments = relationship("Comment", back_populates="post", cascade="all, delete-orphan", passive_deletes=True)
    votes = relationship("PostVote", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        Index("idx_blog_posts_created", "created_at"),
    )

    def __repr__(self):
        return f"<Post(id={self.id}, title={self.title}, user_id={self.user_id})>"


class Comment(Base):
    """Comment on a blog post (immutable once created)"""

    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    post_id = Column(Integer, ForeignKey("blog_posts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utc_now, nullable=False)

    # Relationships
    post = relationship("Post", back_populates="comments")
    author = relationship("User", back_populates="comments")

    def __repr__(self):
        return f"<Comment(id={self.id}, post_id={self.post_id}, user_id={self.user_id})>"
