"""Models package."""

from .user import User
from .instagram_account import InstagramAccount
from .instagram_cookie import InstagramCookie
from .activity_log import ActivityLog
