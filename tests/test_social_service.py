"""
Social graph tests
"""
import pytest

from app.core.exceptions import NotFound, SelfFollow
from app.models.social import UserFollow
from app.services.social_service import FollowResult, SocialService


class TestFollowUser:

    def test_follow_creates_edge(self, db, make_user):
        alice, bob = make_user("Alice"), make_user("Bob")
        service = SocialService(db)

        assert service.follow_user(alice.id, bob.id) is FollowResult.created
        assert service.is_following(alice.id, bob.id)
        assert not service.is_following(bob.id, alice.id)

    def test_refollow_is_idempotent(self, db, make_user):
        alice, bob = make_user("Alice"), make_user("Bob")
        service = SocialService(db)

        service.follow_user(alice.id, bob.id)
        assert service.follow_user(alice.id, bob.id) is FollowResult.already_following
        assert db.query(UserFollow).count() == 1

    def test_self_follow_rejected_without_write(self, db, make_user):
        alice = make_user("Alice")

        with pytest.raises(SelfFollow) as exc:
            SocialService(db).follow_user(alice.id, alice.id)
        assert exc.value.status_code == 400
        assert db.query(UserFollow).count() == 0

    def test_follow_unknown_user(self, db, make_user):
        alice = make_user("Alice")
        with pytest.raises(NotFound):
            SocialService(db).follow_user(alice.id, 4040)


class TestFollowLists:

    def test_followers_and_following(self, db, make_user):
        alice, bob, carol = make_user("Alice"), make_user("Bob"), make_user("Carol")
        service = SocialService(db)
        service.follow_user(alice.id, bob.id)
        service.follow_user(carol.id, bob.id)
        service.follow_user(bob.id, alice.id)

        followers = {u["id"] for u in service.get_followers(bob.id)}
        assert followers == {alice.id, carol.id}

        following = service.get_following(bob.id)
        assert [u["id"] for u in following] == [alice.id]
        assert set(following[0]) == {"id", "name", "surname", "email"}

    def test_empty_lists(self, db, make_user):
        loner = make_user("Loner")
        service = SocialService(db)
        assert service.get_followers(loner.id) == []
        assert service.get_following(loner.id) == []

    def test_following_flags(self, db, make_user):
        alice, bob, carol = make_user("Alice"), make_user("Bob"), make_user("Carol")
        service = SocialService(db)
        service.follow_user(alice.id, bob.id)

        flags = service.following_flags(alice.id, [bob.id, carol.id])
        assert flags == {bob.id: True, carol.id: False}
