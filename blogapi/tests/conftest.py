import uuid
import pytest
import pytest_asyncio
import sys
from pathlib import Path
from httpx import AsyncClient, ASGITransport
from sqlalchemy import select, func
from sqlalchemy.pool import StaticPool

# Ensure the project root is on sys.path when pytest changes CWD to this tests dir
HERE = Path(__file__).resolve()
PKG_ROOT = HERE.parents[2]
if str(PKG_ROOT) not in sys.path:
    sys.path.insert(0, str(PKG_ROOT))

from blogapi.config import load_settings  # noqa: E402
from blogapi.database import Database  # noqa: E402
from blogapi.identity import IdentityProviderError  # noqa: E402
from blogapi.main import create_app  # noqa: E402

ADMIN_EMAIL = 'admin@example.com'


class FakeIdentityProvider:
    """In-memory stand-in for IdentityProviderClient."""

    def __init__(self):
        self.accounts = {}
        self.passwords = {}
        self.tokens = {}
        self.signed_out = False
        self.get_user_calls = 0

    def add_account(self, email, password):
        user = {'id': str(uuid.uuid4()), 'email': email, 'aud': 'authenticated', 'role': 'authenticated'}
        self.accounts[user['id']] = user
        self.passwords[user['id']] = password
        return user

    def issue_token(self, user_id):
        token = f'token-{uuid.uuid4().hex}'
        self.tokens[token] = user_id
        return token

    async def get_user(self, token):
        self.get_user_calls += 1
        user_id = self.tokens.get(token)
        if user_id is None:
            raise IdentityProviderError('invalid JWT: unable to parse or verify signature', 401)
        return self.accounts[user_id]

    async def sign_up(self, email, password):
        if not email:
            raise IdentityProviderError('Unable to validate email address: invalid format', 400)
        if not password:
            raise IdentityProviderError('Signup requires a valid password', 422)
        return self.add_account(email, password)

    async def sign_in_with_password(self, email, password):
        if not email or not password:
            raise IdentityProviderError('missing email or phone', 400)
        for user in self.accounts.values():
            if user['email'] == email and self.passwords[user['id']] == password:
                token = self.issue_token(user['id'])
                return {
                    'access_token': token,
                    'token_type': 'bearer',
                    'expires_in': 3600,
                    'refresh_token': uuid.uuid4().hex,
                    'user': user,
                }
        raise IdentityProviderError('Invalid login credentials', 400)

    async def list_users(self, email=None):
        users = list(self.accounts.values())
        if email is None:
            return users
        return [u for u in users if u['email'].lower() == email.lower()]

    async def sign_out(self):
        self.signed_out = True


@pytest.fixture
def settings():
    return load_settings({
        'DATABASE_URL': 'sqlite+aiosqlite://',
        'ADMIN_EMAILS': ADMIN_EMAIL.upper(),
        'LOG_LEVEL': 'WARNING',
    })


@pytest_asyncio.fixture
async def database():
    db = Database('sqlite+aiosqlite://', poolclass=StaticPool, connect_args={'check_same_thread': False})
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def identity():
    return FakeIdentityProvider()


@pytest.fixture
def app(settings, database, identity):
    app = create_app(settings)
    app.state.db = database
    app.state.identity = identity
    return app


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url='http://test') as ac:
        yield ac


@pytest.fixture
def count_rows(database):
    async def count(model):
        async with database.session() as session:
            res = await session.execute(select(func.count()).select_from(model))
            return res.scalar_one()
    return count


@pytest.fixture
def login(client):
    """Sign up and sign in through the API, returning (user, auth headers)."""
    async def do_login(email='writer@example.com', password='secret'):
        r = await client.post('/signup', json={'email': email, 'password': password})
        assert r.status_code == 200, r.text
        r = await client.post('/signin', json={'email': email, 'password': password})
        assert r.status_code == 200, r.text
        body = r.json()
        return body['user'], {'Authorization': f"Bearer {body['session']['access_token']}"}
    return do_login
