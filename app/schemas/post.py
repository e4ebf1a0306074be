"""Schemas for blog post, comment and feed endpoints"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict
from datetime import datetime


def _strip_not_blank(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("must not be blank")
    return v


class PostBase(BaseModel):
    """Base post schema"""
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    date_of_visit: str = Field(..., min_length=1, max_length=32)
    country_name: str = Field(..., min_length=1, max_length=255)

    @field_validator("title", "country_name", "date_of_visit")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return _strip_not_blank(v)


class PostCreate(PostBase):
    """Schema for creating a post"""
    pass


class PostUpdate(BaseModel):
    """Schema for updating a post (all fields optional, author is not editable)"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    date_of_visit: Optional[str] = Field(None, min_length=1, max_length=32)
    country_name: Optional[str] = Field(None, min_length=1, max_length=255)

    @field_validator("title", "country_name", "date_of_visit")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        # Stored values must still satisfy PostBase when read back
        if v is None:
            return v
        return _strip_not_blank(v)


class PostResponse(PostBase):
    """Stored post"""
    id: int
    user_id: int
    created_at: datetime

    class Config:
        from_attributes = True


class FeedPost(PostResponse):
    """Post with author display fields and read-time counts"""
    author_name: str
    author_surname: str
    likes: int = 0
    dislikes: int = 0
    comment_count: int = 0


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    totalPages: int


class FeedData(BaseModel):
    posts: List[FeedPost]
    pagination: Pagination
    sortBy: str
    selectedCountry: str = ""
    followingAuthors: Dict[int, bool] = Field(default_factory=dict)


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)

    @field_validator("content")
    @classmethod
    def strip_content(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class CommentResponse(BaseModel):
    id: int
    post_id: int
    user_id: int
    content: str
    created_at: datetime
    user_name: Optional[str] = None
    user_surname: Optional[str] = None


class VoteResponse(BaseModel):
    post_id: int
    is_like: bool
    message: str
