"""Create all tables. Run on app startup.

SECURITY: The first admin gets a random password (not hardcoded), logged once.
Change it after first login.
"""
import logging
import secrets

from vendor_portal.core.config import settings
from vendor_portal.core.security import get_password_hash
from vendor_portal.db.base import Base
from vendor_portal.db.session import engine, SessionLocal
from vendor_portal import models  # noqa: F401 - register models
from vendor_portal.models.user import User

logger = logging.getLogger(__name__)


def init_db(bind=None, session_factory=None):
    Base.metadata.create_all(bind=bind or engine)

    db = (session_factory or SessionLocal)()
    try:
        if db.query(User).count() == 0:
            password = secrets.token_urlsafe(16)
            db.add(User(
                name="Administrator",
                email=settings.ADMIN_EMAIL,
                hashed_password=get_password_hash(password),
                role="admin",
            ))
            db.commit()
            logger.warning(
                f"Default admin created: {settings.ADMIN_EMAIL} / {password} "
                "(change this password immediately)"
            )
    finally:
        db.close()
