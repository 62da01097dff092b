import pytest


@pytest.mark.asyncio
async def test_healthz(client):
    r = await client.get('/healthz')
    assert r.status_code == 200
    assert r.json() == {'status': 'ok'}


@pytest.mark.asyncio
async def test_shutdown_closes_both_clients(app, database, identity):
    closed = []
    dispose = database.dispose

    async def tracking_dispose():
        closed.append('db')
        await dispose()
    database.dispose = tracking_dispose

    async with app.router.lifespan_context(app):
        assert app.state.db is database
        assert app.state.identity is identity

    assert closed == ['db']
    assert identity.signed_out is True


@pytest.mark.asyncio
async def test_shutdown_failure_is_logged_not_raised(app, identity):
    async def failing_sign_out():
        raise RuntimeError('network down')
    identity.sign_out = failing_sign_out

    async with app.router.lifespan_context(app):
        pass


@pytest.mark.asyncio
async def test_startup_builds_missing_clients(settings):
    from blogapi.database import Database
    from blogapi.identity import IdentityProviderClient
    from blogapi.main import create_app

    app = create_app(settings)
    async with app.router.lifespan_context(app):
        assert isinstance(app.state.db, Database)
        assert isinstance(app.state.identity, IdentityProviderClient)
