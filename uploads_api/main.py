from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path
from urllib.parse import unquote

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from .config import settings
from .errors import FileOpError, IOFailure
from .routers import directories, disk, files, uploads

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)
logger = logging.getLogger(__name__)

_SECURITY_HEADERS = {
    'Content-Security-Policy': "default-src 'self'; script-src 'self' 'unsafe-inline'; style-src 'self' 'unsafe-inline'; img-src 'self' data:",
    'X-Content-Type-Options': 'nosniff',
    'X-Frame-Options': 'SAMEORIGIN',
    'X-XSS-Protection': '1; mode=block',
    'Referrer-Policy': 'same-origin',
}

_GENERIC_ERROR = 'Internal server error. Please try again.'
_UPLOAD_PATH = '/api/upload'

_rate_limit_bucket: dict[str, dict[str, float]] = {}
_rate_limit_lock = asyncio.Lock()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    root = Path(settings.uploads_dir)
    root.mkdir(parents=True, exist_ok=True)
    logger.info('Serving uploads from %s', root.resolve())
    yield


app = FastAPI(title=settings.app_name, lifespan=lifespan)


def _parse_cors_origins(value: str) -> list[str]:
    return [origin.strip() for origin in value.split(',') if origin.strip()]


cors_origins = _parse_cors_origins(settings.cors_origins)
if cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_methods=['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS'],
        allow_headers=['Content-Type', 'Authorization'],
    )


def _apply_security_headers(response):
    for key, value in _SECURITY_HEADERS.items():
        response.headers[key] = value
    return response


def _error_response(status_code: int, detail: str, kind: str | None = None) -> JSONResponse:
    body = {'detail': detail}
    if kind:
        body['kind'] = kind
    return JSONResponse(body, status_code=status_code)


def _client_ip(request: Request) -> str:
    xff = request.headers.get('x-forwarded-for', '')
    if xff:
        return xff.split(',')[0].strip()
    return request.client.host if request.client else 'unknown'


def _has_traversal(request: Request) -> bool:
    raw_path = request.scope.get('raw_path') or request.url.path.encode()
    candidates = (unquote(raw_path.decode('latin-1')), unquote(request.url.query))
    return any('../' in value or '..\\' in value for value in candidates)


def _body_too_large(request: Request) -> bool:
    try:
        length = int(request.headers.get('content-length', '0'))
    except ValueError:
        return False
    limit = settings.max_body_bytes
    if request.url.path.rstrip('/') == _UPLOAD_PATH:
        # multipart framing on top of the file itself
        limit = settings.max_upload_bytes + settings.max_body_bytes
    return length > limit


async def _allow_request(ip: str) -> bool:
    capacity = float(settings.rate_limit_max_requests)
    refill_per_second = capacity / settings.rate_limit_window_sec
    now = time.monotonic()
    async with _rate_limit_lock:
        bucket = _rate_limit_bucket.get(ip)
        if bucket is None:
            _rate_limit_bucket[ip] = {'tokens': capacity - 1.0, 'updated_at': now}
            return True

        elapsed = max(0.0, now - bucket['updated_at'])
        bucket['tokens'] = min(capacity, bucket['tokens'] + elapsed * refill_per_second)
        bucket['updated_at'] = now

        if bucket['tokens'] < 1.0:
            return False

        bucket['tokens'] -= 1.0
        return True


@app.middleware('http')
async def security_middleware(request: Request, call_next):
    if _body_too_large(request):
        return _apply_security_headers(_error_response(413, 'Request is too large', 'payload_too_large'))

    if _has_traversal(request):
        return _apply_security_headers(_error_response(403, 'Forbidden path', 'forbidden_path'))

    if request.url.path.startswith('/api') and request.method != 'OPTIONS':
        allowed = await _allow_request(_client_ip(request))
        if not allowed:
            return _apply_security_headers(_error_response(429, 'Too many requests, please try again later'))

    response = await call_next(request)
    return _apply_security_headers(response)


@app.exception_handler(FileOpError)
async def file_op_error_handler(request: Request, exc: FileOpError):
    if isinstance(exc, IOFailure):
        logger.error('I/O failure on %s %s', request.method, request.url.path, exc_info=exc)
        return _error_response(exc.status_code, _GENERIC_ERROR, exc.kind)
    logger.info('%s %s -> %d %s', request.method, request.url.path, exc.status_code, exc.message)
    return _error_response(exc.status_code, exc.message, exc.kind)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(_request: Request, exc: RequestValidationError):
    return JSONResponse(
        {'detail': 'Validation error', 'kind': 'validation_error', 'errors': jsonable_encoder(exc.errors())},
        status_code=400,
    )


@app.exception_handler(404)
async def not_found_handler(_request: Request, _exc: Exception):
    return _error_response(404, 'Requested resource not found', 'not_found')


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error('Unhandled error on %s %s', request.method, request.url.path, exc_info=exc)
    return _error_response(500, _GENERIC_ERROR, 'io_failure')


@app.get('/api')
def api_root():
    return {'message': f'API is running on port {settings.app_port}'}


@app.get('/healthz')
def healthz():
    return {'ok': True}


app.include_router(files.router)
app.include_router(directories.router)
app.include_router(uploads.router)
app.include_router(disk.router)
app.mount(settings.static_url_prefix, StaticFiles(directory=settings.uploads_dir, check_dir=False), name='uploads')
