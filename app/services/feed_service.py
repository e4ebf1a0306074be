"""Home feed composition"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional
import logging
import math

from sqlalchemy import desc, func, select, true, false
from sqlalchemy.orm import Session

from app.core.exceptions import ValidationFailed
from app.models.post import Post, Comment
from app.models.social import PostVote
from app.models.user import User

logger = logging.getLogger(__name__)


class FeedSort(str, Enum):
    newest = "newest"
    most_liked = "most_liked"
    most_commented = "most_commented"

    @classmethod
    def parse(cls, value: Optional[str]) -> "FeedSort":
        """Unknown or empty values fall back to newest"""
        try:
            return cls(value) if value else cls.newest
        except ValueError:
            return cls.newest


@dataclass
class FeedPage:
    posts: List[Dict[str, Any]]
    pagination: Dict[str, int]
    following_authors: Dict[int, bool] = field(default_factory=dict)


def like_count_column():
    return (
        select(func.count(PostVote.id))
        .where(PostVote.post_id == Post.id, PostVote.is_like == true())
        .correlate(Post)
        .scalar_subquery()
        .label("likes")
    )


def dislike_count_column():
    return (
        select(func.count(PostVote.id))
        .where(PostVote.post_id == Post.id, PostVote.is_like == false())
        .correlate(Post)
        .scalar_subquery()
        .label("dislikes")
    )


def comment_count_column():
    return (
        select(func.count(Comment.id))
        .where(Comment.post_id == Post.id)
        .correlate(Post)
        .scalar_subquery()
        .label("comment_count")
    )


def build_pagination(total: int, page: int, limit: int) -> Dict[str, int]:
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "totalPages": math.ceil(total / limit) if limit else 0,
    }


def post_row_to_dict(row) -> Dict[str, Any]:
    """Flatten a (Post, author name, author surname, counts...) row"""
    post = row.Post
    return {
        "id": post.id,
        "user_id": post.user_id,
        "title": post.title,
        "content": post.content,
        "date_of_visit": post.date_of_visit,
        "country_name": post.country_name,
        "created_at": post.created_at,
        "author_name": row.author_name,
        "author_surname": row.author_surname,
        "likes": row.likes or 0,
        "dislikes": row.dislikes or 0,
        "comment_count": row.comment_count or 0,
    }


class FeedService:
    """
    Composes a page of posts with read-time aggregate counts.

    Counts are correlated sub-selects evaluated on every read; nothing is
    denormalized or cached.
    """

    def __init__(self, db: Session):
        self.db = db

    def _base_query(self):
        likes = like_count_column()
        dislikes = dislike_count_column()
        comment_count = comment_count_column()

        query = self.db.query(
            Post,
            User.name.label("author_name"),
            User.surname.label("author_surname"),
            likes,
            dislikes,
            comment_count,
        ).join(User, Post.user_id == User.id)
        return query, likes, comment_count

    def compose_feed(
        self,
        page: int = 1,
        limit: int = 10,
        sort_by: Optional[str] = None,
        country: Optional[str] = None,
    ) -> FeedPage:
        """
        Fetch one ranked page, then optionally filter it by country

        The country filter runs on the fetched page only, so a filtered page
        may hold fewer than ``limit`` rows even when more matches exist on
        other pages. Pagination is then recomputed against the filtered
        subset.
        """
        if page < 1 or limit < 1:
            raise ValidationFailed("page and limit must be positive integers")

        sort = FeedSort.parse(sort_by)
        query, likes, comment_count = self._base_query()

        # Ties keep storage order; there is no secondary key
        if sort is FeedSort.most_liked:
            query = query.order_by(desc(likes))
        elif sort is FeedSort.most_commented:
            query = query.order_by(desc(comment_count))
        else:
            query = query.order_by(desc(Post.created_at))

        offset = (page - 1) * limit
        rows = query.offset(offset).limit(limit).all()
        posts = [post_row_to_dict(row) for row in rows]

        total = self.db.query(func.count(Post.id)).scalar() or 0
        pagination = build_pagination(total, page, limit)

        needle = (country or "").strip().lower()
        if needle:
            posts = [
                p for p in posts
                if p["country_name"] and needle in p["country_name"].lower()
            ]
            pagination = build_pagination(len(posts), page, limit)

        logger.debug(f"Feed page={page} limit={limit} sort={sort.value} country={country!r} -> {len(posts)} posts")
        return FeedPage(posts=posts, pagination=pagination)

    def get_post_with_counts(self, post_id: int) -> Optional[Dict[str, Any]]:
        """Single post with author and aggregate counts"""
        query, _, _ = self._base_query()
        row = query.filter(Post.id == post_id).first()
        return post_row_to_dict(row) if row is not None else None
