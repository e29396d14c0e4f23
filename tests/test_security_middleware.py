from __future__ import annotations

import json

import pytest
from fastapi import HTTPException
from fastapi.responses import JSONResponse
from starlette.requests import Request

from uploads_api import deps, main


def _make_request(
    method: str,
    path: str,
    *,
    ip: str = '127.0.0.1',
    query: str = '',
    headers: dict[str, str] | None = None,
    body: bytes = b'',
) -> Request:
    raw_headers = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    scope = {
        'type': 'http',
        'http_version': '1.1',
        'method': method,
        'scheme': 'http',
        'path': path,
        'raw_path': path.encode(),
        'query_string': query.encode(),
        'headers': raw_headers,
        'client': (ip, 12345),
        'server': ('testserver', 80),
    }

    async def _receive():
        return {'type': 'http.request', 'body': body, 'more_body': False}

    return Request(scope, _receive)


async def _ok(_request: Request):
    return JSONResponse({'ok': True})


@pytest.fixture(autouse=True)
def _reset_rate_limit():
    main._rate_limit_bucket.clear()
    yield
    main._rate_limit_bucket.clear()


@pytest.mark.asyncio
async def test_security_headers_added_on_success_response():
    response = await main.security_middleware(_make_request('GET', '/api/files'), _ok)

    assert response.status_code == 200
    assert response.headers['Content-Security-Policy'].startswith("default-src 'self'")
    assert response.headers['X-Frame-Options'] == 'SAMEORIGIN'
    assert response.headers['X-Content-Type-Options'] == 'nosniff'
    assert response.headers['X-XSS-Protection'] == '1; mode=block'
    assert response.headers['Referrer-Policy'] == 'same-origin'


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ('path', 'query'),
    [('/api/files/../config', ''), ('/api/files..\\config', ''), ('/api/files', 'path=..%2F..%2Fetc')],
)
async def test_traversal_sequences_are_blocked(path, query):
    response = await main.security_middleware(_make_request('GET', path, query=query), _ok)

    assert response.status_code == 403
    assert json.loads(response.body)['kind'] == 'forbidden_path'
    assert response.headers['X-Frame-Options'] == 'SAMEORIGIN'


@pytest.mark.asyncio
async def test_safe_paths_pass_through():
    response = await main.security_middleware(_make_request('GET', '/api/files', query='path=documents'), _ok)

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_oversized_body_is_rejected(monkeypatch):
    monkeypatch.setattr(main.settings, 'max_body_bytes', 100)
    request = _make_request('POST', '/api/directory', headers={'content-length': '101'})

    response = await main.security_middleware(request, _ok)

    assert response.status_code == 413
    assert json.loads(response.body)['detail'] == 'Request is too large'


@pytest.mark.asyncio
async def test_upload_route_uses_upload_limit(monkeypatch):
    monkeypatch.setattr(main.settings, 'max_body_bytes', 100)
    monkeypatch.setattr(main.settings, 'max_upload_bytes', 10_000)
    request = _make_request('POST', '/api/upload', headers={'content-length': '5000'})

    response = await main.security_middleware(request, _ok)

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_rate_limit_blocks_after_configured_requests(monkeypatch):
    monkeypatch.setattr(main.settings, 'rate_limit_max_requests', 5)
    ip = '10.10.10.10'

    allowed = [await main._allow_request(ip) for _ in range(5)]
    blocked = await main._allow_request(ip)

    assert all(allowed)
    assert blocked is False


@pytest.mark.asyncio
async def test_rate_limited_request_gets_429(monkeypatch):
    monkeypatch.setattr(main.settings, 'rate_limit_max_requests', 1)
    await main._allow_request('10.0.0.9')

    response = await main.security_middleware(_make_request('GET', '/api/files', ip='10.0.0.9'), _ok)

    assert response.status_code == 429


def test_operator_keys_detected():
    assert deps.has_operator_keys({'name': {'$gt': ''}})
    assert deps.has_operator_keys([{'a.b': 1}])
    assert not deps.has_operator_keys({'path': 'docs', 'name': 'a.txt'})


@pytest.mark.asyncio
async def test_screen_payload_rejects_operator_keys():
    request = _make_request(
        'POST',
        '/api/directory',
        headers={'content-type': 'application/json'},
        body=b'{"path": "", "name": {"$ne": null}}',
    )

    with pytest.raises(HTTPException) as exc:
        await deps.screen_payload(request)

    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_screen_payload_allows_plain_body():
    request = _make_request(
        'POST',
        '/api/directory',
        headers={'content-type': 'application/json'},
        body=b'{"path": "", "name": "docs"}',
    )

    assert await deps.screen_payload(request) is None
