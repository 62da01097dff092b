"""
Async client for the hosted identity provider (GoTrue-compatible REST API).

Tokens, passwords and accounts are owned by the provider; this module only
forwards requests and normalizes its error bodies into IdentityProviderError.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

ADMIN_PAGE_SIZE = 1000


class IdentityProviderError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ('msg', 'error_description', 'message', 'error'):
            if body.get(key):
                return str(body[key])
    return response.reason_phrase or f'Identity provider returned {response.status_code}'


class IdentityProviderClient:
    def __init__(
        self,
        base_url: str,
        anon_key: str,
        service_role_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.anon_key = anon_key
        self.service_role_key = service_role_key
        self._http = httpx.AsyncClient(
            base_url=f'{base_url.rstrip("/")}/auth/v1',
            timeout=timeout,
            transport=transport,
        )

    def _headers(self, bearer: Optional[str] = None, admin: bool = False) -> Dict[str, str]:
        key = self.service_role_key if admin else self.anon_key
        return {'apikey': key, 'Authorization': f'Bearer {bearer or key}'}

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f'Identity provider request {method} {path} failed: {e}')
            raise IdentityProviderError(f'Identity provider unavailable: {e}') from e
        if response.is_error:
            raise IdentityProviderError(_error_message(response), response.status_code)
        if not response.content:
            return None
        return response.json()

    async def get_user(self, token: str) -> Optional[Dict[str, Any]]:
        user = await self._request('GET', '/user', headers=self._headers(bearer=token))
        if not user or not user.get('id'):
            return None
        return user

    async def sign_up(self, email: str, password: str) -> Dict[str, Any]:
        data = await self._request(
            'POST', '/signup',
            json={'email': email, 'password': password},
            headers=self._headers(),
        )
        # with autoconfirm enabled the provider answers with a session wrapping the user
        user = data.get('user') if data and 'user' in data else data
        if not user or not user.get('id'):
            raise IdentityProviderError('Identity provider did not return a user')
        return user

    async def sign_in_with_password(self, email: str, password: str) -> Dict[str, Any]:
        session = await self._request(
            'POST', '/token',
            params={'grant_type': 'password'},
            json={'email': email, 'password': password},
            headers=self._headers(),
        )
        if not session or not session.get('user'):
            raise IdentityProviderError('Identity provider did not return a session')
        return session

    async def list_users(self, email: Optional[str] = None) -> List[Dict[str, Any]]:
        users: List[Dict[str, Any]] = []
        page = 1
        while True:
            params = {'page': page, 'per_page': ADMIN_PAGE_SIZE}
            if email:
                # server-side search is a substring match, narrowed below
                params['filter'] = email
            data = await self._request(
                'GET', '/admin/users',
                params=params,
                headers=self._headers(admin=True),
            )
            batch = (data or {}).get('users', []) if isinstance(data, dict) else (data or [])
            users.extend(batch)
            if len(batch) < ADMIN_PAGE_SIZE:
                break
            page += 1

        if email is None:
            return users
        wanted = email.lower()
        return [u for u in users if (u.get('email') or '').lower() == wanted]

    async def sign_out(self):
        """Release the connection pool.

        The client is server-side and never signs in on its own behalf, so
        there is no provider session to revoke; signing out closes the pool.
        """
        if not self._http.is_closed:
            await self._http.aclose()
            logger.info('Identity provider client closed')
