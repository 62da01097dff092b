import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from .. import crud
from ..auth import get_current_user
from ..deps import get_db
from ..errors import ApiError, InternalError, NotFound, ValidationError
from ..schemas.posts import (
    CommentEnvelope,
    CommentIn,
    CreatedCommentOut,
    PostDetailEnvelope,
    PostDetailOut,
    PostEnvelope,
    PostIn,
    PostOut,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post('/post', response_model=PostEnvelope)
async def create_post(
    payload: PostIn,
    current_user: Dict[str, Any] = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    if not payload.title or not payload.content:
        raise ValidationError('Title and content are required')
    try:
        # author is always the caller
        post = await crud.create_post(session, current_user['id'], payload.title, payload.content)
    except Exception as e:
        logger.exception({'msg': 'create_post_failed', 'user_id': current_user['id']})
        raise InternalError(str(e))

    logger.info({'msg': 'post_created', 'post_id': post.id, 'user_id': current_user['id']})
    return PostEnvelope(post=PostOut.model_validate(post))


@router.get('/post/{post_id}', response_model=PostDetailEnvelope)
async def get_post(post_id: str, session: AsyncSession = Depends(get_db)):
    try:
        post = await crud.get_post_detail(session, post_id)
    except Exception as e:
        logger.exception({'msg': 'get_post_failed', 'post_id': post_id})
        raise InternalError(str(e))
    if not post:
        raise NotFound('Post not found')
    return PostDetailEnvelope(post=PostDetailOut.model_validate(post))


@router.post('/comment', response_model=CommentEnvelope)
async def create_comment(
    payload: CommentIn,
    current_user: Dict[str, Any] = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
):
    if not payload.content or not payload.post_id:
        raise ValidationError('Content and postId are required')
    try:
        if not await crud.get_post(session, payload.post_id):
            raise NotFound('Post not found')
        comment = await crud.create_comment(session, current_user['id'], payload.post_id, payload.content)
    except ApiError:
        raise
    except Exception as e:
        logger.exception({'msg': 'create_comment_failed', 'post_id': payload.post_id})
        raise InternalError(str(e))

    logger.info({'msg': 'comment_created', 'comment_id': comment.id, 'post_id': comment.post_id})
    return CommentEnvelope(comment=CreatedCommentOut.model_validate(comment))
