from typing import Dict, List, Set
import enum
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from socialfeed.modules.follows.models.follow import Follow
from socialfeed.modules.user_management.models.user import User

logger = logging.getLogger(__name__)

class FollowOutcome(enum.Enum):
    CREATED = "created"
    REMOVED = "removed"
    SELF_FOLLOW = "self_follow"
    ALREADY_FOLLOWING = "already_following"
    NOT_FOLLOWING = "not_following"

def get_follow(db: Session, follower_id: str, followee_id: str):
    """Get the edge follower -> followee, if any"""
    return db.query(Follow).filter(
        Follow.follower_id == follower_id,
        Follow.followee_id == followee_id,
    ).first()

def is_following(db: Session, follower_id: str, followee_id: str) -> bool:
    """Check if follower follows followee; a user never follows themselves"""
    if follower_id == followee_id:
        return False
    return get_follow(db, follower_id, followee_id) is not None

def follow(db: Session, follower_id: str, followee_id: str) -> FollowOutcome:
    """
    Create the edge follower -> followee.
    A concurrent duplicate insert surfaces as IntegrityError on commit.
    """
    if follower_id == followee_id:
        return FollowOutcome.SELF_FOLLOW
    if get_follow(db, follower_id, followee_id):
        return FollowOutcome.ALREADY_FOLLOWING

    db.add(Follow(follower_id=follower_id, followee_id=followee_id))
    db.commit()
    logger.info(f"{follower_id} now follows {followee_id}")
    return FollowOutcome.CREATED

def unfollow(db: Session, follower_id: str, followee_id: str) -> FollowOutcome:
    """Remove the edge follower -> followee"""
    edge = get_follow(db, follower_id, followee_id)
    if edge is None:
        return FollowOutcome.NOT_FOLLOWING

    db.delete(edge)
    db.commit()
    logger.info(f"{follower_id} no longer follows {followee_id}")
    return FollowOutcome.REMOVED

def get_followee_ids(db: Session, user_id: str) -> Set[str]:
    """Ids of everyone user_id follows"""
    rows = db.query(Follow.followee_id).filter(Follow.follower_id == user_id).all()
    return {row.followee_id for row in rows}

def get_followers(db: Session, user_id: str) -> List[User]:
    """Users following user_id, in edge insertion order. Not paginated."""
    return (
        db.query(User)
        .join(Follow, Follow.follower_id == User.id)
        .filter(Follow.followee_id == user_id)
        .order_by(Follow.created_at)
        .all()
    )

def get_following(db: Session, user_id: str) -> List[User]:
    """Users that user_id follows, in edge insertion order. Not paginated."""
    return (
        db.query(User)
        .join(Follow, Follow.followee_id == User.id)
        .filter(Follow.follower_id == user_id)
        .order_by(Follow.created_at)
        .all()
    )

def get_follow_counts(db: Session, user_id: str) -> Dict[str, int]:
    followers = db.query(func.count()).select_from(Follow).filter(Follow.followee_id == user_id).scalar()
    following = db.query(func.count()).select_from(Follow).filter(Follow.follower_id == user_id).scalar()
    return {"followers": followers or 0, "following": following or 0}
