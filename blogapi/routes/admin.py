import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from .. import crud
from ..auth import require_admin
from ..deps import get_db, get_identity
from ..errors import InternalError
from ..identity import IdentityProviderClient, IdentityProviderError
from ..schemas.admin import (
    ActivityCounts,
    UserActivityOut,
    UserDetailData,
    UserDetailEnvelope,
    UsersData,
    UsersEnvelope,
)
from ..schemas.users import UserOut

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get('/users', response_model=UsersEnvelope)
async def list_users(
    admin: Dict[str, Any] = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
    identity: IdentityProviderClient = Depends(get_identity),
):
    try:
        auth_users = await identity.list_users()
        local_users = await crud.list_users(session)
    except IdentityProviderError as e:
        raise InternalError(e.message)
    except Exception as e:
        logger.exception({'msg': 'admin_list_users_failed'})
        raise InternalError(str(e))

    return UsersEnvelope(data=UsersData(
        supabase_users=auth_users,
        prisma_users=[UserOut.model_validate(u) for u in local_users],
        total_users=len(auth_users),
        user_emails=[u.get('email') for u in auth_users],
    ))


@router.get('/user/{email}', response_model=UserDetailEnvelope)
async def get_user(
    email: str,
    admin: Dict[str, Any] = Depends(require_admin),
    session: AsyncSession = Depends(get_db),
    identity: IdentityProviderClient = Depends(get_identity),
):
    try:
        auth_users = await identity.list_users(email=email)
        user = await crud.get_user_with_activity(session, email)
    except IdentityProviderError as e:
        raise InternalError(e.message)
    except Exception as e:
        logger.exception({'msg': 'admin_get_user_failed'})
        raise InternalError(str(e))

    data = UserDetailData(supabase_user=auth_users[0] if auth_users else None)
    if user:
        data.prisma_user = UserActivityOut.model_validate(user)
        data.user_activity = ActivityCounts(
            total_posts=len(user.posts),
            total_comments=len(user.comments),
        )
    return UserDetailEnvelope(data=data)
