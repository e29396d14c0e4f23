from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

Category = Literal['image', 'video', 'audio', 'document', 'archive', 'code', 'folder', 'file']


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Entry(_CamelModel):
    id: str
    name: str
    path: str
    size: int
    modified_at: datetime
    is_directory: bool
    type: Category
    thumbnail_url: Optional[str] = None


class DirectoryListing(_CamelModel):
    path: str
    files: list[Entry]
    parent_path: Optional[str] = None


class DeletedEntry(_CamelModel):
    id: str
    path: str
    is_directory: bool


class DiskUsageReport(_CamelModel):
    total_space: int
    free_space: int
    used_space: int
    uploads_dir_size: int
    source: Literal['synthetic', 'host']


@dataclass(frozen=True)
class StoredUpload:
    original_name: str
    stored_path: Path
    size: int
