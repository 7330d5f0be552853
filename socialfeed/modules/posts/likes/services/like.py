from typing import Dict, Iterable, List, Optional, Set
import enum
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from socialfeed.modules.posts.likes.models.like import Like

logger = logging.getLogger(__name__)

class LikeOutcome(enum.Enum):
    CREATED = "created"
    REMOVED = "removed"
    ALREADY_LIKED = "already_liked"
    NOT_LIKED = "not_liked"

def get_like(db: Session, user_id: str, post_id: str) -> Optional[Like]:
    """Get like by user ID and post ID"""
    return (
        db.query(Like)
        .filter(Like.user_id == user_id, Like.post_id == post_id)
        .first()
    )

def is_liked(db: Session, user_id: Optional[str], post_id: str) -> bool:
    if user_id is None:
        return False
    return get_like(db, user_id, post_id) is not None

def like_count(db: Session, post_id: str) -> int:
    return db.query(func.count()).select_from(Like).filter(Like.post_id == post_id).scalar() or 0

def like(db: Session, user_id: str, post_id: str) -> LikeOutcome:
    """Add user_id to the post's like set"""
    if get_like(db, user_id, post_id):
        return LikeOutcome.ALREADY_LIKED

    db.add(Like(user_id=user_id, post_id=post_id))
    db.commit()
    logger.info(f"User {user_id} liked post {post_id}")
    return LikeOutcome.CREATED

def unlike(db: Session, user_id: str, post_id: str) -> LikeOutcome:
    """Remove user_id from the post's like set"""
    existing = get_like(db, user_id, post_id)
    if existing is None:
        return LikeOutcome.NOT_LIKED

    db.delete(existing)
    db.commit()
    logger.info(f"User {user_id} unliked post {post_id}")
    return LikeOutcome.REMOVED

def get_post_likes(db: Session, post_id: str) -> List[Like]:
    """Likes of a post with their users, newest first"""
    return (
        db.query(Like)
        .options(joinedload(Like.user))
        .filter(Like.post_id == post_id)
        .order_by(Like.created_at.desc())
        .all()
    )

def get_like_counts(db: Session, post_ids: Iterable[str]) -> Dict[str, int]:
    """Like count per post for a page of posts, in one query"""
    post_ids = list(post_ids)
    if not post_ids:
        return {}
    rows = (
        db.query(Like.post_id, func.count().label("count"))
        .filter(Like.post_id.in_(post_ids))
        .group_by(Like.post_id)
        .all()
    )
    return {post_id: count for post_id, count in rows}

def get_liked_post_ids(db: Session, user_id: Optional[str], post_ids: Iterable[str]) -> Set[str]:
    """Subset of post_ids that user_id has liked"""
    post_ids = list(post_ids)
    if user_id is None or not post_ids:
        return set()
    rows = (
        db.query(Like.post_id)
        .filter(Like.user_id == user_id, Like.post_id.in_(post_ids))
        .all()
    )
    return {row.post_id for row in rows}
