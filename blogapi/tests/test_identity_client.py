import json

import httpx
import pytest

from blogapi.identity import ADMIN_PAGE_SIZE, IdentityProviderClient, IdentityProviderError

BASE = 'https://project.supabase.test'


def make_client(handler):
    return IdentityProviderClient(BASE, 'anon-key', 'service-key', transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_get_user_forwards_token():
    seen = {}

    def handler(request):
        seen['url'] = str(request.url)
        seen['auth'] = request.headers['authorization']
        seen['apikey'] = request.headers['apikey']
        return httpx.Response(200, json={'id': 'u1', 'email': 'a@x.com'})

    client = make_client(handler)
    user = await client.get_user('the-token')
    assert user == {'id': 'u1', 'email': 'a@x.com'}
    assert seen == {'url': f'{BASE}/auth/v1/user', 'auth': 'Bearer the-token', 'apikey': 'anon-key'}
    await client.sign_out()


@pytest.mark.asyncio
async def test_error_message_comes_from_provider_body():
    def handler(request):
        return httpx.Response(401, json={'code': 401, 'msg': 'invalid JWT'})

    client = make_client(handler)
    with pytest.raises(IdentityProviderError) as exc:
        await client.get_user('bad')
    assert exc.value.message == 'invalid JWT'
    assert exc.value.status_code == 401
    await client.sign_out()


@pytest.mark.asyncio
async def test_error_description_key_is_used():
    def handler(request):
        return httpx.Response(400, json={'error': 'invalid_grant', 'error_description': 'Invalid login credentials'})

    client = make_client(handler)
    with pytest.raises(IdentityProviderError) as exc:
        await client.sign_in_with_password('a@x.com', 'nope')
    assert exc.value.message == 'Invalid login credentials'
    await client.sign_out()


@pytest.mark.asyncio
async def test_transport_failure_is_wrapped():
    def handler(request):
        raise httpx.ConnectError('connection refused', request=request)

    client = make_client(handler)
    with pytest.raises(IdentityProviderError) as exc:
        await client.sign_up('a@x.com', 'pw')
    assert exc.value.status_code is None
    await client.sign_out()


@pytest.mark.asyncio
@pytest.mark.parametrize('payload', [
    {'id': 'u1', 'email': 'a@x.com'},
    {'access_token': 't', 'user': {'id': 'u1', 'email': 'a@x.com'}},
])
async def test_sign_up_returns_the_user(payload):
    def handler(request):
        assert request.url.path == '/auth/v1/signup'
        assert json.loads(request.content) == {'email': 'a@x.com', 'password': 'pw'}
        return httpx.Response(200, json=payload)

    client = make_client(handler)
    user = await client.sign_up('a@x.com', 'pw')
    assert user['id'] == 'u1'
    await client.sign_out()


@pytest.mark.asyncio
async def test_sign_in_uses_password_grant():
    def handler(request):
        assert request.url.path == '/auth/v1/token'
        assert request.url.params['grant_type'] == 'password'
        return httpx.Response(200, json={'access_token': 't', 'user': {'id': 'u1'}})

    client = make_client(handler)
    session = await client.sign_in_with_password('a@x.com', 'pw')
    assert session['access_token'] == 't'
    await client.sign_out()


@pytest.mark.asyncio
async def test_list_users_walks_every_page():
    pages = {
        '1': [{'id': str(i), 'email': f'user{i}@x.com'} for i in range(ADMIN_PAGE_SIZE)],
        '2': [{'id': 'last', 'email': 'last@x.com'}],
    }
    seen = []

    def handler(request):
        seen.append((request.headers['apikey'], request.url.params.get('filter')))
        return httpx.Response(200, json={'users': pages[request.url.params['page']], 'aud': 'authenticated'})

    client = make_client(handler)
    everyone = await client.list_users()
    assert len(everyone) == ADMIN_PAGE_SIZE + 1
    assert seen == [('service-key', None), ('service-key', None)]
    await client.sign_out()


@pytest.mark.asyncio
async def test_list_users_filters_on_the_server_and_matches_exactly():
    seen = []

    def handler(request):
        seen.append(request.url.params.get('filter'))
        # the provider's search is a substring match
        return httpx.Response(200, json={'users': [
            {'id': 'a', 'email': 'Target@X.com'},
            {'id': 'b', 'email': 'other.target@x.com'},
        ]})

    client = make_client(handler)
    matches = await client.list_users(email='target@x.com')
    assert matches == [{'id': 'a', 'email': 'Target@X.com'}]
    assert seen == ['target@x.com']
    await client.sign_out()


@pytest.mark.asyncio
async def test_sign_out_closes_the_pool_without_calling_the_provider():
    calls = []

    def handler(request):
        calls.append(request.url.path)
        return httpx.Response(204)

    client = make_client(handler)
    await client.sign_out()
    await client.sign_out()
    assert calls == []
    assert client._http.is_closed
