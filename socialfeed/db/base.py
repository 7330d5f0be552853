# Import all models here so Base.metadata knows every table
from socialfeed.db.session import Base

from socialfeed.modules.user_management.models.user import User
from socialfeed.modules.posts.models.post import Post
from socialfeed.modules.posts.likes.models.like import Like
from socialfeed.modules.follows.models.follow import Follow
