"""Authentication router: password registration/login and the current user's account"""
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from socialfeed.core.config import Settings
from socialfeed.core.errors import AppError, ErrorKind
from socialfeed.core.rate_limit import auth_rate_limit
from socialfeed.core.responses import ApiResponse, DeletedResource
from socialfeed.db.session import get_db
from socialfeed.deps import get_current_user, get_settings
from socialfeed.modules.auth.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from socialfeed.modules.auth.services.auth import authenticate, issue_token
from socialfeed.modules.user_management.models.user import User
from socialfeed.modules.user_management.schemas.user import ProfileUpdate, UserPublic, UserWithStats
from socialfeed.modules.user_management.services.user import (
    create_user, delete_user, get_user_by_email, get_user_by_username, to_user_with_stats, update_profile
)

router = APIRouter()

@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(auth_rate_limit)],
)
def register(
    *,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    register_in: RegisterRequest,
) -> Any:
    """Register a new user and return it with an access token"""
    if get_user_by_username(db, register_in.username):
        raise AppError(ErrorKind.CONFLICT, "Username already exists")
    if get_user_by_email(db, register_in.email):
        raise AppError(ErrorKind.CONFLICT, "Email already exists")

    user = create_user(
        db,
        username=register_in.username,
        email=register_in.email,
        password=register_in.password,
        name=register_in.name,
    )
    return AuthResponse(
        message="User registered successfully",
        data=UserPublic.model_validate(user),
        token=issue_token(user, settings),
    )

@router.post("/login", response_model=AuthResponse, dependencies=[Depends(auth_rate_limit)])
def login(
    *,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    login_in: LoginRequest,
) -> Any:
    """Log in with username (or email) and password"""
    user = authenticate(db, login_in.username, login_in.password)
    if not user:
        raise AppError(
            ErrorKind.UNAUTHORIZED,
            "Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return AuthResponse(
        message="Login successful",
        data=UserPublic.model_validate(user),
        token=issue_token(user, settings),
    )

@router.get("/me", response_model=ApiResponse[UserWithStats])
def read_me(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Current user with post/follower/following counts"""
    return ApiResponse(data=to_user_with_stats(db, current_user))

@router.put("/profile", response_model=ApiResponse[UserPublic])
def update_me(
    *,
    db: Session = Depends(get_db),
    profile_in: ProfileUpdate,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Update name, bio or avatar of the current user"""
    if not profile_in.model_fields_set:
        raise AppError(ErrorKind.VALIDATION, "No fields to update")

    user = update_profile(db, current_user, profile_in)
    return ApiResponse(message="Profile updated successfully", data=UserPublic.model_validate(user))

@router.delete("/me", response_model=ApiResponse[DeletedResource])
def delete_me(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Delete the current account together with its posts, likes and follows"""
    user_id = current_user.id
    delete_user(db, current_user)
    return ApiResponse(
        message="Account deleted successfully",
        data=DeletedResource(id=user_id, deleted_at=datetime.now(timezone.utc).isoformat()),
    )
