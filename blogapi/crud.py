from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from .models.users import User
from .models.posts import Post
from .models.comments import Comment

# users

async def get_user_by_id(session: AsyncSession, user_id: str):
    q = await session.execute(select(User).where(User.id == user_id))
    return q.scalars().first()

async def get_user_by_email(session: AsyncSession, email: str):
    q = await session.execute(select(User).where(User.email == email))
    return q.scalars().first()

async def create_user(session: AsyncSession, user_id: str, email: str):
    user = User(id=user_id, email=email)
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user

async def get_or_create_user(session: AsyncSession, user_id: str, email: str):
    """Return the local user for a provider account, creating it if missing."""
    user = await get_user_by_id(session, user_id)
    if user:
        return user, False
    try:
        return await create_user(session, user_id, email), True
    except IntegrityError:
        await session.rollback()
        # a concurrent request created it first
        user = await get_user_by_id(session, user_id)
        if not user:
            raise
        return user, False

async def list_users(session: AsyncSession):
    q = await session.execute(select(User).order_by(User.created_at.asc()))
    return q.scalars().all()

async def get_user_with_activity(session: AsyncSession, email: str):
    q = await session.execute(
        select(User)
        .options(selectinload(User.posts), selectinload(User.comments))
        .where(User.email == email)
    )
    return q.scalars().first()

# posts

async def create_post(session: AsyncSession, author_id: str, title: str, content: str):
    post = Post(title=title, content=content, author_id=author_id)
    session.add(post)
    await session.commit()
    await session.refresh(post)
    return post

async def get_post(session: AsyncSession, post_id: str):
    q = await session.execute(select(Post).where(Post.id == post_id))
    return q.scalars().first()

async def get_post_detail(session: AsyncSession, post_id: str):
    q = await session.execute(
        select(Post)
        .options(
            selectinload(Post.author),
            selectinload(Post.comments).selectinload(Comment.author),
        )
        .where(Post.id == post_id)
    )
    return q.scalars().first()

# comments

async def create_comment(session: AsyncSession, author_id: str, post_id: str, content: str):
    comment = Comment(content=content, author_id=author_id, post_id=post_id)
    session.add(comment)
    await session.commit()
    q = await session.execute(
        select(Comment)
        .options(selectinload(Comment.author), selectinload(Comment.post))
        .where(Comment.id == comment.id)
        .execution_options(populate_existing=True)
    )
    return q.scalars().one()
