"""
Signup / signin.

A user lives in two stores: the identity provider owns the account and the
local database keeps a row with the same id. The two writes are not atomic;
signin re-creates a missing local row, which is how the stores converge.
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from .. import crud
from ..deps import get_db, get_identity
from ..errors import ApiError, DuplicateUser, InternalError, ValidationError
from ..identity import IdentityProviderClient, IdentityProviderError
from ..schemas.users import CredentialsIn, SigninOut, SignupOut, UserOut, UserWithAuthOut

logger = logging.getLogger(__name__)

router = APIRouter()


def _with_auth(user, auth_user) -> UserWithAuthOut:
    return UserWithAuthOut(**UserOut.model_validate(user).model_dump(), auth=auth_user)


def _require_credentials(payload: CredentialsIn):
    # empty strings still go to the provider, which owns credential validation
    if payload.email is None or payload.password is None:
        raise ValidationError('Email and password are required')


@router.post('/signup', response_model=SignupOut)
async def signup(
    payload: CredentialsIn,
    session: AsyncSession = Depends(get_db),
    identity: IdentityProviderClient = Depends(get_identity),
):
    _require_credentials(payload)
    try:
        if await identity.list_users(email=payload.email):
            raise DuplicateUser()
        # the stores can diverge, so check the local one as well
        if await crud.get_user_by_email(session, payload.email):
            raise DuplicateUser()

        auth_user = await identity.sign_up(payload.email, payload.password)
        user = await crud.create_user(session, auth_user['id'], payload.email)
    except ApiError as e:
        logger.warning({'msg': 'signup_rejected', 'error': e.message})
        raise
    except IdentityProviderError as e:
        logger.warning({'msg': 'signup_provider_error', 'status': e.status_code, 'error': e.message})
        raise InternalError(e.message)
    except Exception as e:
        logger.exception({'msg': 'signup_failed'})
        raise InternalError(str(e))

    logger.info({'msg': 'user_signed_up', 'user_id': user.id})
    return SignupOut(user=_with_auth(user, auth_user))


@router.post('/signin', response_model=SigninOut)
async def signin(
    payload: CredentialsIn,
    session: AsyncSession = Depends(get_db),
    identity: IdentityProviderClient = Depends(get_identity),
):
    _require_credentials(payload)
    try:
        # provider rejections (bad password included) surface as 500, kept for client compatibility
        auth_session = await identity.sign_in_with_password(payload.email, payload.password)
        auth_user = auth_session['user']
        user, created = await crud.get_or_create_user(session, auth_user['id'], payload.email)
    except IdentityProviderError as e:
        logger.warning({'msg': 'signin_provider_error', 'status': e.status_code, 'error': e.message})
        raise InternalError(e.message)
    except Exception as e:
        logger.exception({'msg': 'signin_failed'})
        raise InternalError(str(e))

    if created:
        logger.info({'msg': 'local_user_restored', 'user_id': user.id})
    logger.info({'msg': 'user_signed_in', 'user_id': user.id})
    return SigninOut(
        msg='User signed in successfully',
        session=auth_session,
        user=_with_auth(user, auth_user),
    )
