from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .models import DeletedEntry, DiskUsageReport, Entry


class MkdirRequest(BaseModel):
    path: str = ''
    name: str = Field(min_length=1)


class RenameRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    new_name: str = Field(min_length=1)


class ItemResponse(BaseModel):
    success: bool
    item: Entry


class DeleteResponse(BaseModel):
    success: bool
    item: DeletedEntry


class UploadResponse(BaseModel):
    success: bool
    file: Entry


class DiskSpaceResponse(BaseModel):
    success: bool
    data: DiskUsageReport
