import asyncio
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from pythonjsonlogger import jsonlogger

from .config import Settings, load_settings
from .database import Database
from .errors import register_exception_handlers
from .identity import IdentityProviderClient
from .metrics import init_metrics, observe_request
from .routes import router

logger = logging.getLogger('blogapi')


def setup_logging(level: str = 'INFO'):
    # structured logging on the package logger, installed once
    if not any(getattr(h, '_blogapi', False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(jsonlogger.JsonFormatter('%(asctime)s %(levelname)s %(name)s %(message)s'))
        handler._blogapi = True
        logger.addHandler(handler)
    logger.setLevel(level)


async def shutdown_clients(app: FastAPI):
    """Close the store and sign out of the provider concurrently."""
    closers = []
    if getattr(app.state, 'db', None) is not None:
        closers.append(app.state.db.dispose())
    if getattr(app.state, 'identity', None) is not None:
        closers.append(app.state.identity.sign_out())
    results = await asyncio.gather(*closers, return_exceptions=True)
    for result in results:
        if isinstance(result, Exception):
            logger.error({'msg': 'shutdown_error', 'error': str(result)})
    logger.info({'msg': 'shutdown_complete'})


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    if getattr(app.state, 'db', None) is None:
        app.state.db = Database(settings.database_url)
    if getattr(app.state, 'identity', None) is None:
        app.state.identity = IdentityProviderClient(
            settings.supabase_url,
            settings.supabase_anon_key,
            settings.supabase_service_role_key,
            timeout=settings.provider_timeout,
        )
    if settings.metrics_port:
        init_metrics(settings.metrics_port)
    logger.info({'msg': 'startup_complete', 'port': settings.port})
    yield
    await shutdown_clients(app)


def create_app(settings: Settings = None) -> FastAPI:
    settings = settings or load_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title="Blog API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.db = None
    app.state.identity = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )
    register_exception_handlers(app)
    app.include_router(router)

    @app.get('/healthz')
    async def healthz():
        return {'status': 'ok'}

    @app.middleware('http')
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        logger.info({'msg': 'request_start', 'method': request.method, 'path': request.url.path})
        response = await call_next(request)
        duration = time.perf_counter() - start
        route = request.scope.get('route')
        observe_request(request.method, getattr(route, 'path', 'unmatched'), response.status_code, duration)
        logger.info({'msg': 'request_end', 'status': response.status_code, 'duration_ms': round(duration * 1000, 2)})
        return response

    return app
