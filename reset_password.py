"""
Reset a traveller's password from the command line

Run with: python reset_password.py <email> [--password NEW]
Omitting --password prompts for it without echo.
"""
import argparse
import getpass
import sys
from pathlib import Path

# Add app to path
sys.path.insert(0, str(Path(__file__).parent))

from app.core.security import get_password_hash
from app.database import SessionLocal
from app.services.auth_service import AuthService

MIN_PASSWORD_LENGTH = 6


def reset_password(email: str, new_password: str) -> bool:
    if len(new_password) < MIN_PASSWORD_LENGTH:
        print(f"[ERROR] Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return False

    db = SessionLocal()
    try:
        user = AuthService(db).get_user_by_email(email)
        if user is None:
            print(f"[ERROR] No account for {email}")
            return False

        print(f"[INFO] Updating account {user.id} ({user.display_name})")
        user.password_hash = get_password_hash(new_password)
        db.commit()

        print(f"[SUCCESS] Password changed for {user.email}")
        # Sessions live in the server process; tokens are stateless
        print("[INFO] Bearer tokens already issued remain valid until expiry")
        return True

    except Exception as e:
        print(f"[ERROR] Failed to reset password: {e}")
        db.rollback()
        return False
    finally:
        db.close()


def main() -> int:
    parser = argparse.ArgumentParser(description="Reset a Travel Tales account password")
    parser.add_argument("email", help="Account email address")
    parser.add_argument("--password", help="New password (prompted if omitted)")
    args = parser.parse_args()

    new_password = args.password or getpass.getpass("New password: ")
    return 0 if reset_password(args.email, new_password) else 1


if __name__ == "__main__":
    sys.exit(main())
