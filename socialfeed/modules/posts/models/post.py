from sqlalchemy import Column, String, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship

from socialfeed.db.session import Base
from socialfeed.modules.user_management.models.user import utcnow

class Post(Base):
    __tablename__ = "posts"

    id = Column(String, primary_key=True, index=True)
    text = Column(Text, nullable=False)
    media_url = Column(String(500), nullable=True)
    author_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, index=True, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    author = relationship("User", back_populates="posts")
    likes = relationship("Like", back_populates="post", cascade="all, delete-orphan")
