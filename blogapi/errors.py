"""
Error taxonomy and the JSON envelopes they are rendered into.

Authentication failures answer with a bare ``{"error": ...}`` body; every
other failure uses ``{"success": false, "error": ...}``.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthError(ApiError):
    status_code = 401
    default_message = 'Authentication failed'


class MissingAuthHeader(AuthError):
    default_message = 'No authorization header'


class MissingToken(AuthError):
    default_message = 'No token provided'


class InvalidToken(AuthError):
    default_message = 'Invalid token'


class AuthenticationFailed(AuthError):
    default_message = 'Authentication failed'


class ValidationError(ApiError):
    status_code = 400
    default_message = 'Invalid request'


class DuplicateUser(ApiError):
    status_code = 400
    default_message = 'User already exists with this email. Please login instead.'


class NotFound(ApiError):
    status_code = 404
    default_message = 'Not found'


class Forbidden(ApiError):
    status_code = 403
    default_message = 'Unauthorized: Admin access required'


class InternalError(ApiError):
    status_code = 500


async def auth_error_handler(request: Request, exc: AuthError):
    return JSONResponse({'error': exc.message}, status_code=exc.status_code)


async def api_error_handler(request: Request, exc: ApiError):
    return JSONResponse({'success': False, 'error': exc.message}, status_code=exc.status_code)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.warning({'msg': 'invalid_request_body', 'path': request.url.path, 'errors': len(exc.errors())})
    return JSONResponse({'success': False, 'error': 'Invalid request body'}, status_code=400)


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception({'msg': 'unhandled_error', 'path': request.url.path})
    return JSONResponse({'success': False, 'error': str(exc) or exc.__class__.__name__}, status_code=500)


def register_exception_handlers(app: FastAPI):
    # most specific class wins, so AuthError is matched before ApiError
    app.add_exception_handler(AuthError, auth_error_handler)
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
