from datetime import datetime, timezone
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from socialfeed.core.errors import AppError, ErrorKind
from socialfeed.core.rate_limit import post_creation_rate_limit
from socialfeed.core.responses import ApiResponse, DeletedResource
from socialfeed.db.session import get_db
from socialfeed.deps import get_current_user, get_optional_user
from socialfeed.modules.user_management.models.user import User
from socialfeed.modules.posts.models.post import Post
from socialfeed.modules.posts.schemas.post import PostCreate, PostOut
from socialfeed.modules.posts.services.post import (
    build_post_views, create_post, delete_post, get_post, get_public_timeline, to_post_out
)
from socialfeed.modules.posts.likes.services.like import is_liked, like_count


router = APIRouter()

def get_post_or_404(db: Session, post_id: str) -> Post:
    """Validate post exists and return it or raise a not-found error"""
    post = get_post(db, post_id=post_id)
    if not post:
        raise AppError(ErrorKind.NOT_FOUND, "Post not found")
    return post

def _viewer_id(user: Optional[User]) -> Optional[str]:
    return user.id if user else None

@router.get("", response_model=ApiResponse[List[PostOut]])
@router.get("/", response_model=ApiResponse[List[PostOut]], include_in_schema=False)
def read_public_timeline(
    db: Session = Depends(get_db),
    limit: int = Query(20, ge=1, le=100),
    skip: int = Query(0, ge=0),
    current_user: Optional[User] = Depends(get_optional_user),
) -> Any:
    """
    Public timeline: every post, newest first.
    When the caller is authenticated, isLiked reflects their likes.
    """
    posts = get_public_timeline(db, skip=skip, limit=limit)
    return ApiResponse(
        data=build_post_views(db, posts, viewer_id=_viewer_id(current_user)),
        meta={"count": len(posts), "limit": limit, "skip": skip, "type": "public_timeline"},
    )

@router.post(
    "",
    response_model=ApiResponse[PostOut],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(post_creation_rate_limit)],
)
@router.post(
    "/",
    response_model=ApiResponse[PostOut],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(post_creation_rate_limit)],
    include_in_schema=False,
)
def create_new_post(
    *,
    db: Session = Depends(get_db),
    post_in: PostCreate,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Create new post authored by the current user"""
    post = create_post(db, post_in, current_user.id)
    return ApiResponse(message="Post created successfully", data=to_post_out(post))

@router.get("/{post_id}", response_model=ApiResponse[PostOut])
def read_post_by_id(
    *,
    db: Session = Depends(get_db),
    post_id: str,
    current_user: Optional[User] = Depends(get_optional_user),
) -> Any:
    """Get post by ID with author, like count and the caller's like flag"""
    post = get_post_or_404(db, post_id)
    return ApiResponse(
        data=to_post_out(
            post,
            like_count=like_count(db, post.id),
            is_liked=is_liked(db, _viewer_id(current_user), post.id),
        )
    )

@router.delete("/{post_id}", response_model=ApiResponse[DeletedResource])
def delete_post_by_id(
    *,
    db: Session = Depends(get_db),
    post_id: str,
    current_user: User = Depends(get_current_user),
) -> Any:
    """
    Delete a post. Only its author may do so; the post's likes are
    removed with it.
    """
    post = get_post_or_404(db, post_id)

    # Check if user is the author
    if post.author_id != current_user.id:
        raise AppError(ErrorKind.FORBIDDEN, "You can only delete your own posts")

    delete_post(db, post)
    return ApiResponse(
        message="Post deleted successfully",
        data=DeletedResource(id=post_id, deleted_at=datetime.now(timezone.utc).isoformat()),
    )
