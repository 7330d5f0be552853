from socialfeed.core.responses import CamelModel

class FollowResult(CamelModel):
    """Returned by follow / unfollow"""
    followee_id: str
    followee_name: str

class FollowStatus(CamelModel):
    user_id: str
    username: str
    is_following: bool
