"""
Feed composition tests: ordering, counts and pagination
"""
import pytest

from app.core.exceptions import ValidationFailed
from app.services.feed_service import FeedService, FeedSort, build_pagination
from app.services.post_service import PostService


class TestFeedOrdering:

    def test_newest_first(self, db, make_user, make_post):
        author = make_user()
        posts = [make_post(author) for _ in range(3)]

        feed = FeedService(db).compose_feed(sort_by="newest")
        assert [p["id"] for p in feed.posts] == [p.id for p in reversed(posts)]

    def test_most_commented(self, db, make_user, make_post, add_comments):
        author, reader = make_user(), make_user()
        five, one, three = make_post(author), make_post(author), make_post(author)
        add_comments(five, reader, 5)
        add_comments(one, reader, 1)
        add_comments(three, reader, 3)

        feed = FeedService(db).compose_feed(sort_by="most_commented")
        assert [p["comment_count"] for p in feed.posts] == [5, 3, 1]
        assert [p["id"] for p in feed.posts] == [five.id, three.id, one.id]

    def test_most_liked(self, db, make_user, make_post):
        author = make_user()
        voters = [make_user() for _ in range(3)]
        quiet, popular = make_post(author), make_post(author)
        votes = PostService(db)
        for voter in voters:
            votes.vote(voter.id, popular.id, is_like=True)
        votes.vote(voters[0].id, quiet.id, is_like=False)

        feed = FeedService(db).compose_feed(sort_by="most_liked")
        assert feed.posts[0]["id"] == popular.id
        assert feed.posts[0]["likes"] == 3
        assert feed.posts[1]["likes"] == 0
        assert feed.posts[1]["dislikes"] == 1

    def test_unknown_sort_falls_back_to_newest(self, db, make_user, make_post):
        author = make_user()
        older, newer = make_post(author), make_post(author)

        feed = FeedService(db).compose_feed(sort_by="by_vibes")
        assert [p["id"] for p in feed.posts] == [newer.id, older.id]
        assert FeedSort.parse("by_vibes") is FeedSort.newest
        assert FeedSort.parse(None) is FeedSort.newest

    def test_rows_carry_author_and_counts(self, db, make_user, make_post):
        author = make_user("Marco", surname="Polo")
        make_post(author, country="Mongolia")

        row = FeedService(db).compose_feed().posts[0]
        assert row["author_name"] == "Marco"
        assert row["author_surname"] == "Polo"
        assert row["country_name"] == "Mongolia"
        assert (row["likes"], row["dislikes"], row["comment_count"]) == (0, 0, 0)


class TestFeedPagination:

    def test_last_partial_page(self, db, make_user, make_post):
        author = make_user()
        for _ in range(23):
            make_post(author)

        feed = FeedService(db).compose_feed(page=3, limit=10)
        assert len(feed.posts) == 3
        assert feed.pagination == {"total": 23, "page": 3, "limit": 10, "totalPages": 3}

    def test_page_past_the_end_is_empty(self, db, make_user, make_post):
        author = make_user()
        for _ in range(4):
            make_post(author)

        feed = FeedService(db).compose_feed(page=5, limit=10)
        assert feed.posts == []
        assert feed.pagination["total"] == 4

    def test_empty_feed(self, db):
        feed = FeedService(db).compose_feed()
        assert feed.posts == []
        assert feed.pagination == {"total": 0, "page": 1, "limit": 10, "totalPages": 0}

    @pytest.mark.parametrize("page,limit", [(0, 10), (1, 0), (-1, 5)])
    def test_non_positive_page_or_limit(self, db, page, limit):
        with pytest.raises(ValidationFailed):
            FeedService(db).compose_feed(page=page, limit=limit)

    def test_build_pagination_rounds_up(self):
        assert build_pagination(21, 1, 10)["totalPages"] == 3
        assert build_pagination(20, 1, 10)["totalPages"] == 2


class TestCountryFilter:

    def test_filter_applies_to_fetched_page(self, db, make_user, make_post):
        author = make_user()
        for i in range(10):
            make_post(author, country="Japan" if i % 3 == 0 else "Peru")

        feed = FeedService(db).compose_feed(page=1, limit=10, country="Japan")
        assert len(feed.posts) == 4
        assert all(p["country_name"] == "Japan" for p in feed.posts)
        assert feed.pagination["total"] == 4
        assert feed.pagination["totalPages"] == 1

    def test_filter_is_case_insensitive_substring(self, db, make_user, make_post):
        author = make_user()
        make_post(author, country="New Zealand")
        make_post(author, country="Japan")

        feed = FeedService(db).compose_feed(country="zeal")
        assert [p["country_name"] for p in feed.posts] == ["New Zealand"]

    def test_blank_country_keeps_full_pagination(self, db, make_user, make_post):
        author = make_user()
        for _ in range(5):
            make_post(author)

        feed = FeedService(db).compose_feed(page=1, limit=2, country="   ")
        assert len(feed.posts) == 2
        assert feed.pagination == {"total": 5, "page": 1, "limit": 2, "totalPages": 3}

    def test_matches_outside_fetched_page_are_missed(self, db, make_user, make_post):
        author = make_user()
        make_post(author, country="Japan")
        for _ in range(3):
            make_post(author, country="Peru")

        # The only Japan post is the oldest, so it sits on page 2 at limit 3
        feed = FeedService(db).compose_feed(page=1, limit=3, country="japan")
        assert feed.posts == []
        assert feed.pagination["total"] == 0


class TestSinglePost:

    def test_get_post_with_counts(self, db, make_user, make_post, add_comments):
        author, reader = make_user(), make_user()
        post = make_post(author)
        add_comments(post, reader, 2)
        PostService(db).vote(reader.id, post.id, is_like=True)

        row = FeedService(db).get_post_with_counts(post.id)
        assert row["likes"] == 1
        assert row["comment_count"] == 2

    def test_missing_post(self, db):
        assert FeedService(db).get_post_with_counts(12345) is None
