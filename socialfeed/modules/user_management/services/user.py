from typing import List, Optional
import logging
import uuid

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from socialfeed.core.security import get_password_hash
from socialfeed.modules.user_management.models.user import User
from socialfeed.modules.user_management.schemas.user import ProfileUpdate, UserPublic, UserStats, UserWithStats
from socialfeed.modules.posts.models.post import Post
from socialfeed.modules.follows.services.follow import get_follow_counts

logger = logging.getLogger(__name__)

def get_user(db: Session, user_id: str) -> Optional[User]:
    """Get user by ID"""
    return db.query(User).filter(User.id == user_id).first()

def get_user_by_username(db: Session, username: str) -> Optional[User]:
    """Get user by username"""
    return db.query(User).filter(User.username == username).first()

def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Get user by email"""
    return db.query(User).filter(User.email == email.lower()).first()

def get_user_by_login(db: Session, login: str) -> Optional[User]:
    """Get user by username, falling back to email"""
    return get_user_by_username(db, login) or get_user_by_email(db, login)

def create_user(db: Session, username: str, email: str, password: str, name: Optional[str] = None) -> User:
    """Create user with a hashed password"""
    user = User(
        id=str(uuid.uuid4()),
        username=username,
        email=email.lower(),
        hashed_password=get_password_hash(password),
        name=name or None,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"Registered user {user.id} ({user.username})")
    return user

def update_profile(db: Session, user: User, profile_in: ProfileUpdate) -> User:
    """Apply the fields present in profile_in; empty strings clear a field"""
    update_data = profile_in.model_dump(exclude_unset=True)

    for field, value in update_data.items():
        setattr(user, field, value or None)

    db.commit()
    db.refresh(user)
    return user

def delete_user(db: Session, user: User) -> None:
    """Delete user; posts, likes and follow edges go with it"""
    logger.info(f"Deleting user {user.id} ({user.username})")
    db.delete(user)
    db.commit()

def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")

def search_users(db: Session, query: str, limit: int = 10) -> List[User]:
    """Case-insensitive substring match on username or name; % and _ match literally"""
    pattern = f"%{_escape_like(query)}%"
    return (
        db.query(User)
        .filter(or_(User.username.ilike(pattern, escape="\\"), User.name.ilike(pattern, escape="\\")))
        .order_by(User.username)
        .limit(limit)
        .all()
    )

def get_user_stats(db: Session, user_id: str) -> UserStats:
    """Post, follower and following counts, computed per call"""
    posts = db.query(func.count(Post.id)).filter(Post.author_id == user_id).scalar() or 0
    return UserStats(posts=posts, **get_follow_counts(db, user_id))

def to_user_with_stats(db: Session, user: User) -> UserWithStats:
    """Map a user to its public projection plus stats"""
    public = UserPublic.model_validate(user)
    return UserWithStats(**public.model_dump(), stats=get_user_stats(db, user.id))
