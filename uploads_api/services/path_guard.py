from __future__ import annotations

import os
from pathlib import Path

from ..errors import ForbiddenPath


def resolve(root: str | Path, user_path: str) -> Path:
    """Join ``user_path`` onto ``root`` and reject results outside of it.

    Normalization is lexical: ``.`` and ``..`` are collapsed but symlinks are
    not followed, so a link inside the root that points elsewhere is accepted.
    """
    if '\x00' in user_path:
        raise ForbiddenPath()

    base = Path(os.path.abspath(root))
    candidate = Path(os.path.normpath(os.path.join(base, user_path.lstrip('/'))))
    if base != candidate and base not in candidate.parents:
        raise ForbiddenPath()
    return candidate
