from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship

from socialfeed.db.session import Base
from socialfeed.modules.user_management.models.user import utcnow

# Directed edge: follower_id follows followee_id
class Follow(Base):
    __tablename__ = "follows"

    follower_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    followee_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    follower = relationship("User", foreign_keys=[follower_id], back_populates="following_edges")
    followee = relationship("User", foreign_keys=[followee_id], back_populates="follower_edges")

    __table_args__ = (
        UniqueConstraint("follower_id", "followee_id", name="unique_follow"),
        CheckConstraint("follower_id != followee_id", name="no_self_follow"),
    )
