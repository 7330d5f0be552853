from typing import List

from sqlalchemy.orm import Session, joinedload

from socialfeed.modules.posts.models.post import Post
from socialfeed.modules.posts.schemas.post import PostOut
from socialfeed.modules.posts.services.post import build_post_views
from socialfeed.modules.follows.services.follow import get_followee_ids

DEFAULT_FEED_LIMIT = 20
MAX_FEED_LIMIT = 100

def get_timeline(db: Session, user_id: str, limit: int = DEFAULT_FEED_LIMIT) -> List[Post]:
    """
    Fan-out-on-read timeline: posts written by user_id or by anyone user_id
    follows, newest first, at most `limit` of them.
    A user who follows nobody gets exactly their own posts.
    """
    author_ids = get_followee_ids(db, user_id)
    author_ids.add(user_id)

    return (
        db.query(Post)
        .options(joinedload(Post.author))
        .filter(Post.author_id.in_(author_ids))
        .order_by(Post.created_at.desc(), Post.id.desc())
        .limit(limit)
        .all()
    )

def get_home_feed(db: Session, user_id: str, limit: int = DEFAULT_FEED_LIMIT) -> List[PostOut]:
    """Timeline with like counts and the viewer's like flags"""
    return build_post_views(db, get_timeline(db, user_id, limit), viewer_id=user_id)
