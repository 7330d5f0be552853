from typing import Any, List

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from socialfeed.core.errors import AppError, ErrorKind
from socialfeed.core.responses import ApiResponse
from socialfeed.db.session import get_db
from socialfeed.deps import get_current_user
from socialfeed.modules.user_management.models.user import User
from socialfeed.modules.posts.api.router import get_post_or_404
from socialfeed.modules.posts.likes.schemas.like import LikeResult, PostLike
from socialfeed.modules.posts.likes.services.like import LikeOutcome, get_post_likes, like, unlike

router = APIRouter()

@router.post("/like", response_model=ApiResponse[LikeResult], status_code=status.HTTP_201_CREATED)
def like_post(
    *,
    db: Session = Depends(get_db),
    post_id: str = Path(..., description="The ID of the post to like"),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Like a post. Liking twice is an error, not a no-op."""
    get_post_or_404(db, post_id)

    if like(db, current_user.id, post_id) is LikeOutcome.ALREADY_LIKED:
        raise AppError(ErrorKind.VALIDATION, "Post already liked")

    return ApiResponse(
        message="Post liked successfully",
        data=LikeResult(post_id=post_id, user_id=current_user.id),
    )

@router.delete("/like", response_model=ApiResponse[LikeResult])
def unlike_post(
    *,
    db: Session = Depends(get_db),
    post_id: str = Path(..., description="The ID of the post to unlike"),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Remove the current user's like from a post"""
    get_post_or_404(db, post_id)

    if unlike(db, current_user.id, post_id) is LikeOutcome.NOT_LIKED:
        raise AppError(ErrorKind.VALIDATION, "Post not liked yet")

    return ApiResponse(
        message="Post unliked successfully",
        data=LikeResult(post_id=post_id, user_id=current_user.id),
    )

@router.get("/likes", response_model=ApiResponse[List[PostLike]])
def read_post_likes(
    *,
    db: Session = Depends(get_db),
    post_id: str = Path(..., description="The ID of the post to get likes for"),
) -> Any:
    """Users who liked a post, newest like first"""
    get_post_or_404(db, post_id)

    likes = get_post_likes(db, post_id)
    return ApiResponse(
        data=[PostLike.model_validate(item) for item in likes],
        meta={"postId": post_id, "count": len(likes)},
    )
