import argparse
import logging
import os
import sys

from sqlalchemy.orm import Session

# Ensure we can import hr_portal modules
sys.path.append(os.getcwd())

from hr_portal.database import SessionLocal, init_db
from hr_portal.models.user import User, UserRole
from hr_portal.services.auth import get_password_hash

# Configure logging
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def create_admin_user(email: str, password: str, full_name: str) -> int:
    init_db()
    db: Session = SessionLocal()
    try:
        existing_user = db.query(User).filter(User.email == email).first()
        if existing_user:
            logger.warning(f"User '{email}' already exists with role {existing_user.role.value}.")
            return 1

        admin_user = User(
            email=email,
            hashed_password=get_password_hash(password),
            full_name=full_name,
            role=UserRole.ADMIN,
            is_active=True,
            is_verified=True,
        )
        db.add(admin_user)
        db.commit()
        logger.info(f"Admin user '{email}' created successfully. You can now login.")
        return 0
    except Exception as e:
        logger.error(f"Error creating admin user: {e}")
        db.rollback()
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create an HR Portal admin account")
    parser.add_argument("email")
    parser.add_argument("password")
    parser.add_argument("--name", default="System Administrator")
    args = parser.parse_args()
    sys.exit(create_admin_user(args.email, args.password, args.name))
