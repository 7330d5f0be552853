from typing import Any, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from socialfeed.core.errors import AppError, ErrorKind
from socialfeed.core.responses import ApiResponse
from socialfeed.db.session import get_db
from socialfeed.deps import get_current_user
from socialfeed.modules.user_management.api.router import validate_user
from socialfeed.modules.user_management.models.user import User
from socialfeed.modules.user_management.schemas.user import UserPublic
from socialfeed.modules.follows.schemas.follow import FollowResult, FollowStatus
from socialfeed.modules.follows.services.follow import (
    FollowOutcome,
    follow,
    unfollow,
    is_following,
    get_followers,
    get_following,
)

router = APIRouter()

# Failing outcomes and the error each one is reported as
_FOLLOW_ERRORS = {
    FollowOutcome.SELF_FOLLOW: (ErrorKind.VALIDATION, "You cannot follow yourself"),
    FollowOutcome.ALREADY_FOLLOWING: (ErrorKind.CONFLICT, "You are already following this user"),
    FollowOutcome.NOT_FOLLOWING: (ErrorKind.CONFLICT, "You are not following this user"),
}

def _raise_for_outcome(outcome: FollowOutcome) -> None:
    if outcome in _FOLLOW_ERRORS:
        kind, message = _FOLLOW_ERRORS[outcome]
        raise AppError(kind, message)

@router.post("/{user_id}/follow", response_model=ApiResponse[FollowResult], status_code=status.HTTP_201_CREATED)
def follow_user(
    *,
    db: Session = Depends(get_db),
    user_id: str,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Follow a user"""
    followee = validate_user(db, user_id)

    _raise_for_outcome(follow(db, current_user.id, followee.id))

    return ApiResponse(
        message=f"You are now following {followee.username}",
        data=FollowResult(followee_id=followee.id, followee_name=followee.username),
    )

@router.delete("/{user_id}/follow", response_model=ApiResponse[FollowResult])
def unfollow_user(
    *,
    db: Session = Depends(get_db),
    user_id: str,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Unfollow a user"""
    followee = validate_user(db, user_id)

    _raise_for_outcome(unfollow(db, current_user.id, followee.id))

    return ApiResponse(
        message=f"You are no longer following {followee.username}",
        data=FollowResult(followee_id=followee.id, followee_name=followee.username),
    )

@router.get("/{user_id}/follow-status", response_model=ApiResponse[FollowStatus])
def read_follow_status(
    *,
    db: Session = Depends(get_db),
    user_id: str,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Check if the current user follows the given user"""
    followee = validate_user(db, user_id)

    return ApiResponse(
        data=FollowStatus(
            user_id=followee.id,
            username=followee.username,
            is_following=is_following(db, current_user.id, followee.id),
        )
    )

# Follower/following listings are not paginated
@router.get("/{user_id}/followers", response_model=ApiResponse[List[UserPublic]])
def read_followers(
    *,
    db: Session = Depends(get_db),
    user_id: str,
) -> Any:
    """Users following the given user"""
    user = validate_user(db, user_id)

    followers = get_followers(db, user.id)
    return ApiResponse(
        data=[UserPublic.model_validate(follower) for follower in followers],
        meta={"userId": user.id, "username": user.username, "count": len(followers)},
    )

@router.get("/{user_id}/following", response_model=ApiResponse[List[UserPublic]])
def read_following(
    *,
    db: Session = Depends(get_db),
    user_id: str,
) -> Any:
    """Users the given user follows"""
    user = validate_user(db, user_id)

    following = get_following(db, user.id)
    return ApiResponse(
        data=[UserPublic.model_validate(followee) for followee in following],
        meta={"userId": user.id, "username": user.username, "count": len(following)},
    )
