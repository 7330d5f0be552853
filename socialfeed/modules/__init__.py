"""
Modules package initialization.
This package contains all the functional modules of the application.
"""

from socialfeed.modules import auth
from socialfeed.modules import user_management
from socialfeed.modules import posts
from socialfeed.modules import follows
from socialfeed.modules import home_feed
