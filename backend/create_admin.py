# backend/create_admin.py
import getpass
import sys

from sqlalchemy.exc import IntegrityError

from config import Settings
from database import build_engine, build_session_factory, init_db
from models.users import User, UserRole
from utils.hashing import get_password_hash


def create_admin(settings: Settings, email: str, password: str, name: str = None) -> User:
    """Create the first Admin account so /auth/register can be used with a token."""
    engine = build_engine(settings.DATABASE_URL)
    init_db(engine)
    db = build_session_factory(engine)()

    try:
        admin = User(
            email=email.strip().lower(),
            name=name or None,
            role=UserRole.ADMIN.value,
            password_hash=get_password_hash(password, settings.BCRYPT_ROUNDS),
        )
        db.add(admin)
        db.commit()
        db.refresh(admin)
        db.expunge(admin)
        return admin
    except IntegrityError:
        db.rollback()
        raise
    finally:
        db.close()


def main():
    print("--- Create admin user ---")
    email = input("Email: ").strip()
    name = input("Name (optional): ").strip()
    password = getpass.getpass("Password (hidden): ").strip()

    if not email or not password:
        print("Email and password are required.")
        return 1

    try:
        admin = create_admin(Settings(), email, password, name)
    except IntegrityError:
        print(f"User {email.lower()} already exists.")
        return 1

    print(f"Admin {admin.email} created (id {admin.id}).")
    return 0


if __name__ == "__main__":
    sys.exit(main())
