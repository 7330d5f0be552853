from typing import Any, List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from socialfeed.core.responses import ApiResponse
from socialfeed.db.session import get_db
from socialfeed.deps import get_current_user
from socialfeed.modules.user_management.models.user import User
from socialfeed.modules.posts.schemas.post import PostOut
from socialfeed.modules.home_feed.services.feed import DEFAULT_FEED_LIMIT, MAX_FEED_LIMIT, get_home_feed

router = APIRouter()

@router.get("", response_model=ApiResponse[List[PostOut]])
@router.get("/", response_model=ApiResponse[List[PostOut]], include_in_schema=False)
def read_home_feed(
    *,
    db: Session = Depends(get_db),
    limit: int = Query(DEFAULT_FEED_LIMIT, ge=1, le=MAX_FEED_LIMIT),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Personalized timeline: the current user's posts and those of everyone they follow"""
    items = get_home_feed(db, current_user.id, limit)
    return ApiResponse(
        data=items,
        meta={"userId": current_user.id, "count": len(items), "limit": limit, "type": "personalized_feed"},
    )
