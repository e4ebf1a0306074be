"""
Ownership guard tests
"""
import pytest

from app.core.exceptions import InvalidResourceType, NotFound, NotOwner, Unauthenticated
from app.core.ownership import OwnershipGuard, ResourceKind
from app.models.post import Comment

from tests.conftest import identity_of


class TestOwnershipGuard:

    def test_owner_allowed(self, db, make_user, make_post):
        author = make_user()
        post = make_post(author)

        OwnershipGuard(db).authorize(ResourceKind.post, post.id, identity_of(author))

    def test_other_user_forbidden(self, db, make_user, make_post):
        author, intruder = make_user(), make_user()
        post = make_post(author)

        with pytest.raises(NotOwner) as exc:
            OwnershipGuard(db).authorize(ResourceKind.post, post.id, identity_of(intruder))
        assert exc.value.status_code == 403

    def test_missing_post(self, db, make_user):
        with pytest.raises(NotFound) as exc:
            OwnershipGuard(db).authorize(ResourceKind.post, 999, identity_of(make_user()))
        assert exc.value.message == "Blog post not found"

    def test_missing_identity_checked_first(self, db):
        # No lookup happens, so a missing resource still reports 401
        with pytest.raises(Unauthenticated):
            OwnershipGuard(db).authorize(ResourceKind.post, 999, None)

    def test_comment_ownership(self, db, make_user, make_post):
        author, commenter = make_user(), make_user()
        post = make_post(author)
        comment = Comment(post_id=post.id, user_id=commenter.id, content="nice")
        db.add(comment)
        db.commit()

        guard = OwnershipGuard(db)
        guard.authorize(ResourceKind.comment, comment.id, identity_of(commenter))
        with pytest.raises(NotOwner):
            guard.authorize(ResourceKind.comment, comment.id, identity_of(author))

    def test_missing_comment(self, db, make_user):
        with pytest.raises(NotFound) as exc:
            OwnershipGuard(db).authorize("comment", 42, identity_of(make_user()))
        assert exc.value.message == "Comment not found"

    def test_string_kind_accepted(self, db, make_user, make_post):
        author = make_user()
        post = make_post(author)
        OwnershipGuard(db).authorize("post", post.id, identity_of(author))

    def test_unknown_kind(self, db, make_user):
        with pytest.raises(InvalidResourceType):
            OwnershipGuard(db).authorize("photo", 1, identity_of(make_user()))
