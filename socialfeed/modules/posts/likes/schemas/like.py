from datetime import datetime

from socialfeed.core.responses import CamelModel
from socialfeed.modules.user_management.schemas.user import UserPublic

class LikeResult(CamelModel):
    """Returned by like / unlike"""
    post_id: str
    user_id: str

class PostLike(CamelModel):
    """One entry of a post's likers list"""
    user: UserPublic
    created_at: datetime
