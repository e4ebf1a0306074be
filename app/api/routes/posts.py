"""Feed and blog post endpoints"""
from fastapi import APIRouter, Depends, Request, Query, Path, status
from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.config import settings
from app.database import get_db
from app.core.dependencies import (
    get_optional_identity,
    require_identity,
    require_owner,
    require_session,
    require_session_owner,
    read_payload,
    validate_payload,
)
from app.core.exceptions import NotFound, TravelTalesError
from app.core.identity import Identity
from app.core.ownership import ResourceKind
from app.core.responses import shape, success_response
from app.services.comment_service import CommentService
from app.services.country_service import CountryService, get_country_service
from app.services.feed_service import FeedService, FeedSort
from app.services.post_service import PostService
from app.services.social_service import SocialService
from app.schemas.post import (
    CommentCreate,
    CommentResponse,
    FeedData,
    PostCreate,
    PostResponse,
    PostUpdate,
    VoteResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["posts"])


@router.get("/")
def get_feed(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    limit: int = Query(settings.FEED_DEFAULT_LIMIT, ge=1, le=settings.FEED_MAX_LIMIT),
    sort: str = Query(FeedSort.newest.value, description="newest, most_liked or most_commented"),
    country: str = Query("", description="Case-insensitive country name filter"),
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: Session = Depends(get_db)
):
    """
    Home feed

    - **sort**: newest (default), most_liked, most_commented
    - **country**: filters the fetched page only; pagination then reflects
      the filtered subset
    - Signed-in viewers also get `followingAuthors`, a map of author id to
      whether the viewer follows them
    """
    sort_by = FeedSort.parse(sort)
    country = country.strip()
    feed = FeedService(db).compose_feed(page=page, limit=limit, sort_by=sort_by.value, country=country or None)

    following_authors = {}
    if identity is not None and feed.posts:
        following_authors = SocialService(db).following_flags(
            identity.id, {post["user_id"] for post in feed.posts}
        )

    return success_response(FeedData(
        posts=feed.posts,
        pagination=feed.pagination,
        sortBy=sort_by.value,
        selectedCountry=country,
        followingAuthors=following_authors,
    ))


@router.get("/post/create")
def create_post_form(identity: Identity = Depends(require_session)):
    """Fields expected by POST /post (browser session only)"""
    return success_response({
        "form": "createPost",
        "fields": ["title", "content", "country_name", "date_of_visit"],
        "user": identity.public_fields(),
    })


@router.post("/post")
async def create_post(
    request: Request,
    identity: Identity = Depends(require_identity),
    db: Session = Depends(get_db)
):
    """Create a blog post authored by the current identity"""
    post_data = validate_payload(PostCreate, await read_payload(request))
    post = PostService(db).create_post(user_id=identity.id, post_data=post_data)

    return shape(
        request,
        PostResponse.model_validate(post),
        browser_redirect=f"/post/{post.id}",
        status_code=status.HTTP_201_CREATED,
    )


@router.get("/post/{post_id}")
async def view_post(
    post_id: int = Path(..., description="Post ID"),
    page: int = Query(1, ge=1, description="Comments page"),
    commentsLimit: int = Query(settings.COMMENTS_DEFAULT_LIMIT, ge=1, le=100),
    identity: Optional[Identity] = Depends(get_optional_identity),
    countries: CountryService = Depends(get_country_service),
    db: Session = Depends(get_db)
):
    """
    Single post with counts, paginated comments and country details

    Country details are best effort: if the country service fails the post
    is returned with `countryDetails: null`.
    """
    post = FeedService(db).get_post_with_counts(post_id)
    if post is None:
        raise NotFound("Post not found")

    comments = CommentService(db).get_comments_for_post(post_id, page=page, limit=commentsLimit)

    country_details = None
    if post["country_name"]:
        try:
            country_details = await countries.get_country_details(post["country_name"])
        except TravelTalesError as e:
            logger.warning(f"Country details unavailable for {post['country_name']!r}: {e.message}")

    return success_response({
        "post": post,
        "comments": comments,
        "countryDetails": country_details,
        "isAuthor": identity is not None and identity.id == post["user_id"],
    })


@router.get("/post/{post_id}/edit")
def edit_post_form(
    post_id: int = Path(..., description="Post ID"),
    identity: Identity = Depends(require_session_owner(ResourceKind.post, "post_id")),
    db: Session = Depends(get_db)
):
    """Current values for the edit form (owner's browser session only)"""
    post = PostService(db).require_post(post_id)
    return success_response({
        "form": "editPost",
        "post": PostResponse.model_validate(post),
        "user": identity.public_fields(),
    })


@router.put("/post/{post_id}")
async def update_post(
    request: Request,
    post_id: int = Path(..., description="Post ID"),
    identity: Identity = Depends(require_owner(ResourceKind.post, "post_id")),
    db: Session = Depends(get_db)
):
    """Update title, content, visit date or country (owner only)"""
    post_data = validate_payload(PostUpdate, await read_payload(request))
    post = PostService(db).update_post(post_id, post_data)

    return shape(request, PostResponse.model_validate(post), browser_redirect=f"/post/{post_id}")


@router.delete("/post/{post_id}")
def delete_post(
    request: Request,
    post_id: int = Path(..., description="Post ID"),
    identity: Identity = Depends(require_owner(ResourceKind.post, "post_id")),
    db: Session = Depends(get_db)
):
    """Delete a post with its comments and votes (owner only)"""
    PostService(db).delete_post(post_id)

    return shape(
        request,
        {"id": post_id, "message": "Blog post deleted successfully"},
        browser_redirect="/",
    )


@router.post("/post/{post_id}/comment")
async def add_comment(
    request: Request,
    post_id: int = Path(..., description="Post ID"),
    identity: Identity = Depends(require_identity),
    db: Session = Depends(get_db)
):
    """Add a comment to a post"""
    comment_data = validate_payload(CommentCreate, await read_payload(request))
    comment = CommentService(db).create_comment(identity.id, post_id, comment_data.content)

    data = CommentResponse(
        id=comment.id,
        post_id=comment.post_id,
        user_id=comment.user_id,
        content=comment.content,
        created_at=comment.created_at,
        user_name=identity.name,
        user_surname=identity.surname,
    )
    return shape(request, data, browser_redirect=f"/post/{post_id}", status_code=status.HTTP_201_CREATED)


def _vote(request: Request, post_id: int, identity: Identity, db: Session, is_like: bool):
    vote = PostService(db).vote(user_id=identity.id, post_id=post_id, is_like=is_like)
    data = VoteResponse(
        post_id=post_id,
        is_like=vote.is_like,
        message="Post liked" if vote.is_like else "Post disliked",
    )
    return shape(request, data, browser_redirect=f"/post/{post_id}")


@router.post("/post/{post_id}/like")
def like_post(
    request: Request,
    post_id: int = Path(..., description="Post ID"),
    identity: Identity = Depends(require_identity),
    db: Session = Depends(get_db)
):
    """Like a post (replaces an earlier dislike)"""
    return _vote(request, post_id, identity, db, is_like=True)


@router.post("/post/{post_id}/dislike")
def dislike_post(
    request: Request,
    post_id: int = Path(..., description="Post ID"),
    identity: Identity = Depends(require_identity),
    db: Session = Depends(get_db)
):
    """Dislike a post (replaces an earlier like)"""
    return _vote(request, post_id, identity, db, is_like=False)
