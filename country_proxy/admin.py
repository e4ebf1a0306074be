"""
Grant or revoke proxy admin rights

Run with: python -m country_proxy.admin <email> [--revoke]
"""
import argparse
import sys

from app.core.exceptions import NotFound
from country_proxy.accounts import AccountService
from country_proxy.database import SessionLocal, init_db


def set_admin(email: str, is_admin: bool) -> bool:
    init_db()
    db = SessionLocal()
    try:
        user = AccountService(db).set_admin(email, is_admin)
        state = "granted" if user.is_admin else "revoked"
        print(f"[SUCCESS] Admin rights {state} for {user.email}")
        return True
    except NotFound:
        print(f"[ERROR] No proxy account for {email}")
        return False
    finally:
        db.close()


def main() -> int:
    parser = argparse.ArgumentParser(description="Grant or revoke country proxy admin rights")
    parser.add_argument("email", help="Account email address")
    parser.add_argument("--revoke", action="store_true", help="Remove admin rights instead")
    args = parser.parse_args()
    return 0 if set_admin(args.email, not args.revoke) else 1


if __name__ == "__main__":
    sys.exit(main())
