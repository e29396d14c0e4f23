from __future__ import annotations

import logging
from pathlib import Path

import psutil

from ..errors import IOFailure
from ..models import DiskUsageReport
from .scanner import compute_recursive_size

logger = logging.getLogger(__name__)


class DiskUsageReporter:
    """Combine the size of the uploads tree with a total/free/used figure.

    In ``synthetic`` mode the capacity figures are placeholders derived from
    configuration, not measurements. ``host`` mode asks the OS about the
    filesystem that holds the uploads root.
    """

    def __init__(
        self,
        root: str | Path,
        mode: str = 'synthetic',
        total_bytes: int = 1_000_000_000_000,
        used_fraction: float = 0.3,
    ):
        self.root = Path(root)
        self.mode = mode
        self.total_bytes = total_bytes
        self.used_fraction = used_fraction

    def report(self) -> DiskUsageReport:
        uploads_size = compute_recursive_size(self.root)
        if self.mode == 'host':
            total, free = self._host_space()
        else:
            total = self.total_bytes
            free = total - int(total * self.used_fraction)

        return DiskUsageReport(
            total_space=total,
            free_space=free,
            used_space=total - free,
            uploads_dir_size=uploads_size,
            source='host' if self.mode == 'host' else 'synthetic',
        )

    def _host_space(self) -> tuple[int, int]:
        try:
            usage = psutil.disk_usage(str(self.root))
        except OSError as exc:
            logger.exception('Disk usage query failed for %s', self.root)
            raise IOFailure() from exc
        return usage.total, min(usage.free, usage.total)
