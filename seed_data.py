"""
Seed script to populate a development database with sample travellers and posts

Run with: python seed_data.py

Features:
- Creates a few users (password: TravelPass123!)
- Creates posts about different countries
- Adds follows, votes and comments so every feed sort order has data
"""
import sys
from pathlib import Path

# Add app to path
sys.path.insert(0, str(Path(__file__).parent))

from app.database import SessionLocal, init_db
from app.models.user import User
from app.models.post import Post
from app.schemas.post import PostCreate
from app.services.auth_service import AuthService
from app.services.comment_service import CommentService
from app.services.post_service import PostService
from app.services.social_service import SocialService

SEED_PASSWORD = "TravelPass123!"

SEED_USERS = [
    {"name": "Ada", "surname": "Lovelace", "email": "ada@example.com"},
    {"name": "Ibn", "surname": "Battuta", "email": "ibn@example.com"},
    {"name": "Isabella", "surname": "Bird", "email": "isabella@example.com"},
]

SEED_POSTS = [
    (0, "Fjords and ferries", "Three weeks hopping between fjords.", "2024-06-12", "Norway"),
    (1, "Spice markets of Marrakech", "The souks at dusk are unforgettable.", "2023-11-02", "Morocco"),
    (2, "Across the Andes", "Bus rides, altitude and empanadas.", "2024-02-20", "Argentina"),
    (0, "Tapas crawl", "Granada still serves free tapas.", "2024-09-05", "Spain"),
    (1, "Temples at sunrise", "Angkor Wat before the crowds.", "2023-12-28", "Cambodia"),
]


def get_or_create_user(service: AuthService, data: dict) -> User:
    user = service.get_user_by_email(data["email"])
    if user:
        print(f"[SKIP] User exists: {user.email}")
        return user
    user = service.register(password=SEED_PASSWORD, **data)
    print(f"[OK] Created user: {user.email}")
    return user


def main():
    init_db()
    db = SessionLocal()

    try:
        auth = AuthService(db)
        users = [get_or_create_user(auth, data) for data in SEED_USERS]

        if db.query(Post).count() > 0:
            print("[SKIP] Posts already seeded")
            return

        posts = PostService(db)
        created = []
        for author_index, title, content, visited, country in SEED_POSTS:
            post = posts.create_post(
                user_id=users[author_index].id,
                post_data=PostCreate(title=title, content=content, date_of_visit=visited, country_name=country),
            )
            created.append(post)
            print(f"[OK] Created post: {title}")

        social = SocialService(db)
        social.follow_user(users[0].id, users[1].id)
        social.follow_user(users[2].id, users[0].id)

        posts.vote(users[1].id, created[0].id, is_like=True)
        posts.vote(users[2].id, created[0].id, is_like=True)
        posts.vote(users[0].id, created[1].id, is_like=False)

        comments = CommentService(db)
        comments.create_comment(users[1].id, created[2].id, "Which pass did you cross?")
        comments.create_comment(users[0].id, created[2].id, "Adding this to my list.")

        print("=" * 50)
        print(f"[SUCCESS] Seeded {len(users)} users and {len(created)} posts")
        print(f"[INFO] Login with any seed email and password {SEED_PASSWORD}")
        print("=" * 50)

    except Exception as e:
        print(f"[ERROR] Error during seeding: {str(e)}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
