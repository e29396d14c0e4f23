from __future__ import annotations

import json
from functools import lru_cache
from typing import Any

from fastapi import HTTPException, Request, status

from .config import settings
from .services.disk_usage import DiskUsageReporter
from .services.file_ops import FileOps


@lru_cache(maxsize=1)
def get_file_ops() -> FileOps:
    return FileOps(settings.uploads_dir, static_prefix=settings.static_url_prefix)


@lru_cache(maxsize=1)
def get_disk_reporter() -> DiskUsageReporter:
    return DiskUsageReporter(
        settings.uploads_dir,
        mode=settings.disk_usage_mode,
        total_bytes=settings.disk_total_bytes,
        used_fraction=settings.disk_used_fraction,
    )


def has_operator_keys(value: Any) -> bool:
    """True if any mapping key looks like a query operator ($gt) or dotted path."""
    if isinstance(value, dict):
        for key, item in value.items():
            if isinstance(key, str) and (key.startswith('$') or '.' in key):
                return True
            if has_operator_keys(item):
                return True
    elif isinstance(value, list):
        return any(has_operator_keys(item) for item in value)
    return False


async def screen_payload(request: Request):
    if request.method in {'GET', 'HEAD', 'OPTIONS'}:
        return

    content_type = request.headers.get('content-type', '')
    if not content_type.startswith('application/json'):
        return

    body = await request.body()
    if not body:
        return
    try:
        payload = json.loads(body)
    except ValueError:
        return

    if has_operator_keys(payload):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Invalid request payload')
