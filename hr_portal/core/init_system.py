import logging
from hr_portal.core.config import settings
from hr_portal.database import SessionLocal
from hr_portal.models.user import User, UserRole
from hr_portal.services import auth as auth_service

logger = logging.getLogger(__name__)

def init_system_data():
    """
    Creates the first admin account when BOOTSTRAP_ADMIN_EMAIL and
    BOOTSTRAP_ADMIN_PASSWORD are configured and no admin exists yet.
    """
    if not (settings.bootstrap_admin_email and settings.bootstrap_admin_password):
        logger.info("System initialization check: no bootstrap admin configured.")
        return

    db = SessionLocal()
    try:
        admin_count = db.query(User).filter(User.role == UserRole.ADMIN).count()
        if admin_count:
            logger.info(f"System initialization check: {admin_count} admin(s) found.")
            return

        existing = db.query(User).filter(User.email == settings.bootstrap_admin_email).first()
        if existing:
            logger.warning(f"Bootstrap admin {existing.email} exists with role {existing.role.value}; leaving it unchanged.")
            return

        db.add(User(
            email=settings.bootstrap_admin_email,
            hashed_password=auth_service.get_password_hash(settings.bootstrap_admin_password),
            full_name="System Admin",
            role=UserRole.ADMIN,
            is_active=True,
            is_verified=True,
        ))
        db.commit()
        logger.info(f"✓ Created bootstrap admin: {settings.bootstrap_admin_email}")
    except Exception as e:
        db.rollback()
        logger.error(f"Error during system initialization check: {str(e)}", exc_info=True)
        raise
    finally:
        db.close()
