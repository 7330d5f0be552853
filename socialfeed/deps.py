from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from socialfeed.core import security
from socialfeed.core.config import Settings
from socialfeed.core.errors import AppError, ErrorKind
from socialfeed.db.session import get_db
from socialfeed.modules.user_management.models.user import User
from socialfeed.modules.user_management.services.user import get_user

# Bearer scheme; missing or malformed headers are handled below rather than by FastAPI
bearer_scheme = HTTPBearer(auto_error=False)

def get_settings(request: Request) -> Settings:
    return request.app.state.settings

def _unauthorized(message: str) -> AppError:
    return AppError(ErrorKind.UNAUTHORIZED, message, headers={"WWW-Authenticate": "Bearer"})

def get_current_user(
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> User:
    """
    Mandatory auth gate: rejects the request with 401 before the handler runs
    unless the bearer token is valid and its user still exists.
    """
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Access token required")

    user_id = security.verify_access_token(credentials.credentials, settings)
    if not user_id:
        raise _unauthorized("Invalid token")

    # Re-resolve on every request so deleted users lose access at once
    user = get_user(db, user_id=user_id)
    if not user:
        raise _unauthorized("User not found")

    return user

def get_optional_user(
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> Optional[User]:
    """
    Optional auth gate: never rejects. A valid token attaches its user,
    anything else lets the request through anonymously.
    """
    if credentials is None or not credentials.credentials:
        return None

    user_id = security.verify_access_token(credentials.credentials, settings)
    if not user_id:
        return None

    return get_user(db, user_id=user_id)
