from fastapi import Request

from .config import Settings
from .database import Database
from .identity import IdentityProviderClient


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_identity(request: Request) -> IdentityProviderClient:
    return request.app.state.identity


async def get_db(request: Request):
    database: Database = request.app.state.db
    async with database.session() as session:
        yield session
