from typing import List, Optional
import uuid
import logging

from sqlalchemy.orm import Session, joinedload

from socialfeed.modules.posts.models.post import Post
from socialfeed.modules.posts.schemas.post import PostCreate, PostOut
from socialfeed.modules.posts.likes.services.like import get_like_counts, get_liked_post_ids
from socialfeed.modules.user_management.schemas.user import UserPublic

logger = logging.getLogger(__name__)

def get_post(db: Session, post_id: str) -> Optional[Post]:
    """Get post by ID, with its author loaded"""
    return (
        db.query(Post)
        .options(joinedload(Post.author))
        .filter(Post.id == post_id)
        .first()
    )

def get_public_timeline(db: Session, skip: int = 0, limit: int = 20) -> List[Post]:
    """All posts, newest first"""
    logger.debug(f"Getting public timeline with skip={skip}, limit={limit}")
    return (
        db.query(Post)
        .options(joinedload(Post.author))
        .order_by(Post.created_at.desc(), Post.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )

def get_user_posts(db: Session, user_id: str, limit: int = 20) -> List[Post]:
    """Posts by one author, newest first"""
    return (
        db.query(Post)
        .options(joinedload(Post.author))
        .filter(Post.author_id == user_id)
        .order_by(Post.created_at.desc(), Post.id.desc())
        .limit(limit)
        .all()
    )

def create_post(db: Session, post_in: PostCreate, author_id: str) -> Post:
    """Create new post"""
    post = Post(
        id=str(uuid.uuid4()),
        author_id=author_id,
        text=post_in.text,
        media_url=post_in.media_url,
    )
    db.add(post)
    db.commit()
    logger.info(f"Created post {post.id} for author {author_id}")
    return get_post(db, post.id)

def delete_post(db: Session, post: Post) -> None:
    """Delete post; its likes go with it"""
    logger.info(f"Deleting post with ID: {post.id}")
    db.delete(post)
    db.commit()

def to_post_out(post: Post, like_count: int = 0, is_liked: bool = False) -> PostOut:
    """Map a post (author loaded) to its wire shape"""
    return PostOut(
        id=post.id,
        text=post.text,
        media_url=post.media_url,
        author_id=post.author_id,
        author=UserPublic.model_validate(post.author),
        like_count=like_count,
        is_liked=is_liked,
        created_at=post.created_at,
        updated_at=post.updated_at,
    )

def build_post_views(db: Session, posts: List[Post], viewer_id: Optional[str] = None) -> List[PostOut]:
    """Attach like counts and the viewer's like flag to a page of posts"""
    post_ids = [post.id for post in posts]
    counts = get_like_counts(db, post_ids)
    liked = get_liked_post_ids(db, viewer_id, post_ids)
    return [
        to_post_out(post, like_count=counts.get(post.id, 0), is_liked=post.id in liked)
        for post in posts
    ]
