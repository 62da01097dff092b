from typing import Any, Dict, List, Optional

from . import CamelModel
from .users import UserOut
from .posts import PostOut, CommentOut


class UserActivityOut(UserOut):
    posts: List[PostOut]
    comments: List[CommentOut]


class ActivityCounts(CamelModel):
    total_posts: int
    total_comments: int


class UsersData(CamelModel):
    supabase_users: List[Dict[str, Any]]
    prisma_users: List[UserOut]
    total_users: int
    user_emails: List[Optional[str]]


class UserDetailData(CamelModel):
    supabase_user: Optional[Dict[str, Any]] = None
    prisma_user: Optional[UserActivityOut] = None
    user_activity: Optional[ActivityCounts] = None


class UsersEnvelope(CamelModel):
    success: bool = True
    data: UsersData


class UserDetailEnvelope(CamelModel):
    success: bool = True
    data: UserDetailData
