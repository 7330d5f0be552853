from typing import Any, List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from socialfeed.core.errors import AppError, ErrorKind
from socialfeed.core.responses import ApiResponse
from socialfeed.db.session import get_db
from socialfeed.modules.user_management.models.user import User
from socialfeed.modules.user_management.schemas.user import UserPublic, UserWithStats
from socialfeed.modules.user_management.services.user import get_user, search_users, to_user_with_stats
from socialfeed.modules.posts.schemas.post import PostOut
from socialfeed.modules.posts.services.post import build_post_views, get_user_posts

router = APIRouter()

def validate_user(db: Session, user_id: str) -> User:
    """Validate user exists and return user object or raise a not-found error"""
    user = get_user(db, user_id=user_id)
    if not user:
        raise AppError(ErrorKind.NOT_FOUND, "User not found")
    return user

@router.get("/search", response_model=ApiResponse[List[UserPublic]])
def search(
    *,
    db: Session = Depends(get_db),
    q: str = Query(..., max_length=50, description="Search query for username or name"),
    limit: int = Query(10, ge=1, le=50),
) -> Any:
    """Search for users by username or name"""
    query = q.strip()
    if not query:
        raise AppError(ErrorKind.VALIDATION, "Search query is required")

    users = search_users(db, query, limit=limit)
    return ApiResponse(
        data=[UserPublic.model_validate(user) for user in users],
        meta={"query": query, "count": len(users), "limit": limit},
    )

@router.get("/{user_id}", response_model=ApiResponse[UserWithStats])
def read_user_profile(
    *,
    db: Session = Depends(get_db),
    user_id: str,
) -> Any:
    """Get user profile by ID, with post/follower/following counts"""
    user = validate_user(db, user_id)
    return ApiResponse(data=to_user_with_stats(db, user))

@router.get("/{user_id}/posts", response_model=ApiResponse[List[PostOut]])
def read_user_posts(
    *,
    db: Session = Depends(get_db),
    user_id: str,
    limit: int = Query(20, ge=1, le=100),
) -> Any:
    """Posts by one user, newest first"""
    user = validate_user(db, user_id)

    posts = get_user_posts(db, user_id=user.id, limit=limit)
    return ApiResponse(
        data=build_post_views(db, posts),
        meta={"userId": user.id, "username": user.username, "count": len(posts), "limit": limit},
    )
