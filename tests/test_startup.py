from __future__ import annotations

import asyncio

from uploads_api import main


def _run_lifespan_startup():
    async def _cycle():
        async with main.lifespan(main.app):
            pass

    asyncio.run(_cycle())


def test_startup_creates_uploads_dir(monkeypatch, tmp_path):
    uploads_dir = tmp_path / 'nested' / 'uploads'
    monkeypatch.setattr(main.settings, 'uploads_dir', str(uploads_dir))

    _run_lifespan_startup()

    assert uploads_dir.is_dir()


def test_startup_keeps_existing_uploads(monkeypatch, tmp_path):
    (tmp_path / 'keep.txt').write_text('data')
    monkeypatch.setattr(main.settings, 'uploads_dir', str(tmp_path))

    _run_lifespan_startup()

    assert (tmp_path / 'keep.txt').read_text() == 'data'
