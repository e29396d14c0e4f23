from __future__ import annotations

from fastapi import APIRouter, Depends

from ..deps import get_file_ops, screen_payload
from ..schemas import ItemResponse, MkdirRequest
from ..services.file_ops import FileOps

router = APIRouter(prefix='/api/directory', tags=['directories'])


@router.post('', response_model=ItemResponse, response_model_exclude_none=True, dependencies=[Depends(screen_payload)])
def create_directory(payload: MkdirRequest, ops: FileOps = Depends(get_file_ops)):
    entry = ops.create_directory(payload.path, payload.name)
    return ItemResponse(success=True, item=entry)
