import logging
from typing import Any, Dict

from fastapi import Depends, Request

from .config import Settings
from .deps import get_identity, get_settings
from .errors import (
    AuthError,
    AuthenticationFailed,
    Forbidden,
    InvalidToken,
    MissingAuthHeader,
    MissingToken,
)
from .identity import IdentityProviderClient, IdentityProviderError

logger = logging.getLogger(__name__)


async def get_current_user(request: Request) -> Dict[str, Any]:
    """Resolve the bearer token to a provider user or answer 401.

    The resolved user is also kept on ``request.state.user``.
    """
    try:
        identity: IdentityProviderClient = get_identity(request)
        auth_header = request.headers.get('authorization')
        if not auth_header:
            raise MissingAuthHeader()

        # scheme is ignored, the token is the second segment
        parts = auth_header.split()
        if len(parts) < 2:
            raise MissingToken()

        try:
            user = await identity.get_user(parts[1])
        except IdentityProviderError as e:
            logger.info({'msg': 'token_rejected', 'status': e.status_code, 'error': e.message})
            raise InvalidToken()
        if not user:
            raise InvalidToken()

        request.state.user = user
        return user
    except AuthError:
        raise
    except Exception:
        logger.exception({'msg': 'authentication_error'})
        raise AuthenticationFailed()


async def require_admin(
    current_user: Dict[str, Any] = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    if not settings.is_admin(current_user.get('email')):
        logger.warning({'msg': 'admin_access_denied', 'user_id': current_user.get('id')})
        raise Forbidden()
    return current_user
