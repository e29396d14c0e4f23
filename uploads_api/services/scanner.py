from __future__ import annotations

import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from urllib.parse import quote

from ..models import Entry
from . import path_guard
from .file_types import classify

logger = logging.getLogger(__name__)

DEFAULT_STATIC_PREFIX = '/uploads'


def display_path(rel: str) -> str:
    return rel or '/'


def thumbnail_url(rel: str, name: str, static_prefix: str = DEFAULT_STATIC_PREFIX) -> str:
    parts = [p for p in rel.split('/') if p] + [name]
    return static_prefix.rstrip('/') + '/' + '/'.join(quote(p) for p in parts)


def build_entry(
    target: Path,
    rel: str,
    static_prefix: str = DEFAULT_STATIC_PREFIX,
    entry_id: str | None = None,
) -> Entry:
    """Describe ``target``, which lives in the directory ``rel`` of the sandbox."""
    stat = target.stat()
    is_dir = target.is_dir()
    category = 'folder' if is_dir else classify(target.name)
    entry = Entry(
        id=entry_id or str(uuid.uuid4()),
        name=target.name,
        path=display_path(rel),
        size=0 if is_dir else stat.st_size,
        modified_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        is_directory=is_dir,
        type=category,
    )
    if category == 'image':
        entry.thumbnail_url = thumbnail_url(rel, target.name, static_prefix)
    return entry


def scan(root: str | Path, rel: str, static_prefix: str = DEFAULT_STATIC_PREFIX) -> list[Entry]:
    directory = path_guard.resolve(root, rel)
    entries: list[Entry] = []
    for child in directory.iterdir():
        try:
            entries.append(build_entry(child, rel, static_prefix))
        except FileNotFoundError:
            logger.debug('Entry %s disappeared while listing', child.name)
    return entries


def compute_recursive_size(path: str | Path) -> int:
    total = 0
    try:
        with os.scandir(path) as it:
            children = list(it)
    except OSError as exc:
        logger.warning('Skipping unreadable directory %s: %s', path, exc)
        return 0

    for child in children:
        try:
            if child.is_dir(follow_symlinks=False):
                total += compute_recursive_size(child.path)
            else:
                total += child.stat().st_size
        except OSError as exc:
            logger.warning('Skipping unreadable entry %s: %s', child.path, exc)
    return total
