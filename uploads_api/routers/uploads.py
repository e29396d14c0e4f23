from __future__ import annotations

import logging
import os
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from starlette.concurrency import run_in_threadpool

from ..config import settings
from ..deps import get_file_ops
from ..errors import IOFailure, NoFileProvided, PayloadTooLarge
from ..models import StoredUpload
from ..schemas import UploadResponse
from ..services.file_ops import FileOps

logger = logging.getLogger(__name__)

router = APIRouter(prefix='/api/upload', tags=['uploads'])

CHUNK_SIZE = 1024 * 1024


def _discard(target):
    if target.is_file():
        target.unlink(missing_ok=True)


@router.post('', response_model=UploadResponse, response_model_exclude_none=True)
async def upload_file(
    path: str = Query(default=''),
    file: Optional[UploadFile] = File(default=None),
    ops: FileOps = Depends(get_file_ops),
):
    if file is None or not file.filename:
        raise NoFileProvided()

    target = await run_in_threadpool(ops.prepare_upload, path, file.filename)
    written = 0
    try:
        with target.open('wb') as f:
            while chunk := await file.read(CHUNK_SIZE):
                written += len(chunk)
                if written > settings.max_upload_bytes:
                    raise PayloadTooLarge('File is too large')
                f.write(chunk)
            f.flush()
            os.fsync(f.fileno())
    except PayloadTooLarge:
        _discard(target)
        raise
    except OSError as exc:
        logger.exception('Writing upload %s failed', file.filename)
        _discard(target)
        raise IOFailure() from exc

    stored = StoredUpload(original_name=file.filename, stored_path=target, size=written)
    entry = await run_in_threadpool(ops.save_upload, path, stored)
    return UploadResponse(success=True, file=entry)
