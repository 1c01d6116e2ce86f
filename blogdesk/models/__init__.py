from blogdesk.models.user import Profile, Role, User
from blogdesk.models.post import Category, Post, Tag, post_tags
from blogdesk.models.engagement import Comment, Like, Reply
from blogdesk.models.notification import Notification
from blogdesk.models.site_settings import SiteSettings

__all__ = [
    "User",
    "Profile",
    "Role",
    "Category",
    "Tag",
    "Post",
    "post_tags",
    "Comment",
    "Reply",
    "Like",
    "Notification",
    "SiteSettings",
]
