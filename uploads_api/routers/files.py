from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from ..deps import get_file_ops, screen_payload
from ..models import DirectoryListing
from ..schemas import DeleteResponse, ItemResponse, RenameRequest
from ..services.file_ops import FileOps

router = APIRouter(prefix='/api/files', tags=['files'])


@router.get('', response_model=DirectoryListing, response_model_exclude_none=True)
def list_files(path: str = Query(default=''), ops: FileOps = Depends(get_file_ops)):
    return ops.list_directory(path)


@router.delete('/{item_id}', response_model=DeleteResponse)
def delete_item(item_id: UUID, path: str = Query(min_length=1), ops: FileOps = Depends(get_file_ops)):
    deleted = ops.delete_entry(path, entry_id=str(item_id))
    return DeleteResponse(success=True, item=deleted)


@router.put(
    '/{item_id}',
    response_model=ItemResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(screen_payload)],
)
def rename_item(
    item_id: UUID,
    payload: RenameRequest,
    path: str = Query(min_length=1),
    directory: str = Query(default='', alias='dir'),
    ops: FileOps = Depends(get_file_ops),
):
    entry = ops.rename_entry(directory, path, payload.new_name, entry_id=str(item_id))
    return ItemResponse(success=True, item=entry)
