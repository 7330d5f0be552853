import logging
from typing import Optional
from sqlalchemy.orm import Session

from socialfeed.core.config import Settings
from socialfeed.core.security import create_access_token, verify_password
from socialfeed.modules.user_management.models.user import User
from socialfeed.modules.user_management.services.user import get_user_by_login

logger = logging.getLogger("socialfeed")

def authenticate(db: Session, login: str, password: str) -> Optional[User]:
    """Return the user for valid credentials; login may be a username or an email"""
    user = get_user_by_login(db, login)
    if not user:
        logger.info(f"Login failed: unknown user '{login}'")
        return None
    if not verify_password(password, user.hashed_password):
        logger.info(f"Login failed: bad password for user {user.id}")
        return None
    return user

def issue_token(user: User, settings: Settings) -> str:
    """Access token for user; only 'sub' is trusted when the token comes back"""
    return create_access_token(
        user.id,
        settings,
        claims={"username": user.username, "email": user.email},
    )
