from datetime import datetime
from typing import List, Optional

from . import CamelModel


class PostIn(CamelModel):
    title: Optional[str] = None
    content: Optional[str] = None


class CommentIn(CamelModel):
    content: Optional[str] = None
    post_id: Optional[str] = None


class AuthorOut(CamelModel):
    id: str
    email: str


class AuthorEmailOut(CamelModel):
    email: str


class PostTitleOut(CamelModel):
    title: str


class PostOut(CamelModel):
    id: str
    title: str
    content: str
    author_id: str
    created_at: datetime
    updated_at: datetime


class CommentOut(CamelModel):
    id: str
    content: str
    author_id: str
    post_id: str
    created_at: datetime
    updated_at: datetime


class CreatedCommentOut(CommentOut):
    author: AuthorEmailOut
    post: PostTitleOut


class CommentWithAuthorOut(CommentOut):
    author: AuthorOut


class PostDetailOut(PostOut):
    author: AuthorOut
    comments: List[CommentWithAuthorOut]


class PostEnvelope(CamelModel):
    success: bool = True
    post: PostOut


class PostDetailEnvelope(CamelModel):
    success: bool = True
    post: PostDetailOut


class CommentEnvelope(CamelModel):
    success: bool = True
    comment: CreatedCommentOut
