"""
Bootstrap utilities for first admin creation.
Handles automatic creation of the first admin account from settings.
"""
import logging
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import Settings
from ..core.security import hash_password
from .models import Admin, AccountEmail, AccountRole
from .service import email_in_use
from .utils import normalize_email

logger = logging.getLogger(__name__)

def admin_exists(db: Session) -> bool:
    """
    Check if any admin account exists in the database.

    Args:
        db: Database session

    Returns:
        bool: True if at least one admin exists, False otherwise
    """
    return db.query(Admin).count() > 0

def create_bootstrap_admin(db: Session, settings: Settings) -> bool:
    """
    Create the first admin account from settings.

    Args:
        db: Database session
        settings: Application settings with bootstrap credentials

    Returns:
        bool: True if admin was created successfully, False otherwise
    """
    if not settings.bootstrap_admin_email or not settings.bootstrap_admin_password:
        logger.warning("Bootstrap admin credentials not provided in environment variables")
        return False

    email = normalize_email(settings.bootstrap_admin_email)
    if email_in_use(db, email):
        logger.warning(f"Bootstrap failed: Email {email} already exists")
        return False

    try:
        admin = Admin(
            email=email,
            name=settings.bootstrap_admin_name,
            password=hash_password(settings.bootstrap_admin_password),
            role="Admin"
        )
        db.add(admin)
        db.add(AccountEmail(email=email, role=AccountRole.ADMIN))
        db.commit()
        db.refresh(admin)
    except SQLAlchemyError as e:
        logger.error(f"Failed to create bootstrap admin: {e}")
        db.rollback()
        return False

    logger.info(f"Bootstrap admin created successfully: {admin.email} (ID: {admin.id})")
    return True

def bootstrap_admin_if_needed(db: Session, settings: Settings) -> None:
    """
    Check if admin exists and create bootstrap admin if needed.
    This function should be called during application startup.

    Args:
        db: Database session
        settings: Application settings
    """
    if admin_exists(db):
        logger.info(f"Admin accounts found ({db.query(Admin).count()} total). Bootstrap not needed.")
        return

    logger.info("No admin accounts found. Attempting bootstrap admin creation...")
    if not create_bootstrap_admin(db, settings):
        logger.warning("Bootstrap admin was not created; admin login is unavailable until one exists")
