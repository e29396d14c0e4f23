from __future__ import annotations

import logging
import posixpath
import shutil
import uuid
from pathlib import Path

from ..errors import AlreadyExists, ForbiddenPath, InvalidName, IOFailure, NoFileProvided, NotFound
from ..models import DeletedEntry, DirectoryListing, Entry, StoredUpload
from . import path_guard, scanner

logger = logging.getLogger(__name__)


def validate_path(requested_path: str, root: str | Path) -> Path:
    return path_guard.resolve(root, requested_path)


def validate_filename(name: str) -> str:
    if not name or name == '.' or '/' in name or '\\' in name or '..' in name:
        raise InvalidName('Invalid file name')
    return name


def parent_of(rel: str) -> str | None:
    stripped = rel.strip('/')
    if not stripped:
        return None
    parent = posixpath.dirname(stripped)
    return parent or '/'


def sort_entries(entries: list[Entry]) -> list[Entry]:
    return sorted(entries, key=lambda e: (not e.is_directory, e.name.casefold(), e.name))


class FileOps:
    def __init__(self, root: str | Path, static_prefix: str = scanner.DEFAULT_STATIC_PREFIX):
        self.root = Path(root).resolve()
        self.static_prefix = static_prefix

    def safe_path(self, rel: str) -> Path:
        return validate_path(rel, self.root)

    def list_directory(self, rel: str) -> DirectoryListing:
        target = self.safe_path(rel)
        if not target.exists():
            self._io(target.mkdir, parents=True, exist_ok=True)
        elif not target.is_dir():
            raise NotFound('Directory not found')

        entries = sort_entries(self._io(scanner.scan, self.root, rel, self.static_prefix))
        return DirectoryListing(path=scanner.display_path(rel), files=entries, parent_path=parent_of(rel))

    def create_directory(self, parent_rel: str, name: str) -> Entry:
        if not name:
            raise InvalidName('Directory name is required')

        target = self.safe_path(posixpath.join(parent_rel, name))
        if target.exists():
            raise AlreadyExists('A directory with this name already exists')

        self._io(target.mkdir, parents=True, exist_ok=False)
        entry = scanner.build_entry(target, parent_rel, self.static_prefix)
        # Nested names like 'a/b' still report the requested name under its parent.
        entry.name = name
        return entry

    def delete_entry(self, rel: str, entry_id: str | None = None) -> DeletedEntry:
        target = self.safe_path(rel)
        if target == self.root:
            raise ForbiddenPath('The uploads root cannot be deleted')
        if not target.exists() and not target.is_symlink():
            raise NotFound()

        is_dir = target.is_dir() and not target.is_symlink()
        if is_dir:
            self._io(shutil.rmtree, target)
        else:
            self._io(target.unlink)
        logger.info('Deleted %s', rel)
        return DeletedEntry(id=entry_id or str(uuid.uuid4()), path=rel, is_directory=is_dir)

    def rename_entry(self, containing_dir: str, old_name: str, new_name: str, entry_id: str | None = None) -> Entry:
        if not new_name:
            raise InvalidName('New name is required')
        if old_name.strip('/') in {'', '.', '..'}:
            raise InvalidName('Invalid source name')

        source = self.safe_path(posixpath.join(containing_dir, old_name))
        destination = self.safe_path(posixpath.join(containing_dir, new_name))
        parent = self.safe_path(containing_dir)
        if source == parent or source in parent.parents:
            raise InvalidName('Invalid source name')
        if not source.exists():
            raise NotFound()
        if destination.exists():
            raise AlreadyExists()

        self._io(source.rename, destination)
        logger.info('Renamed %s to %s in %s', old_name, new_name, scanner.display_path(containing_dir))
        entry = scanner.build_entry(destination, containing_dir, self.static_prefix, entry_id=entry_id)
        entry.name = new_name
        return entry

    def prepare_upload(self, rel: str, original_name: str) -> Path:
        """Validate an upload destination and return the file path to write to."""
        validate_filename(original_name)
        directory = self.safe_path(rel)
        target = self.safe_path(posixpath.join(rel, original_name))
        if target.is_dir():
            raise AlreadyExists('A directory with this name already exists')
        if not directory.exists():
            self._io(directory.mkdir, parents=True, exist_ok=True)
        return target

    def save_upload(self, rel: str, upload: StoredUpload | None) -> Entry:
        if upload is None:
            raise NoFileProvided()
        validate_filename(upload.original_name)

        stored = Path(upload.stored_path)
        expected = self.safe_path(posixpath.join(rel, upload.original_name))
        if stored != expected:
            raise ForbiddenPath()
        if not stored.exists():
            raise NoFileProvided()

        logger.info('Stored upload %s (%d bytes) in %s', upload.original_name, upload.size, scanner.display_path(rel))
        return scanner.build_entry(stored, rel, self.static_prefix)

    def _io(self, fn, *args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except FileNotFoundError as exc:
            raise NotFound() from exc
        except FileExistsError as exc:
            raise AlreadyExists() from exc
        except OSError as exc:
            logger.exception('Filesystem operation %s failed', getattr(fn, '__name__', fn))
            raise IOFailure() from exc
