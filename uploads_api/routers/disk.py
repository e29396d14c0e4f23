from __future__ import annotations

from fastapi import APIRouter, Depends

from ..deps import get_disk_reporter
from ..schemas import DiskSpaceResponse
from ..services.disk_usage import DiskUsageReporter

router = APIRouter(prefix='/api/disk-space', tags=['disk'])


@router.get('', response_model=DiskSpaceResponse)
def disk_space(reporter: DiskUsageReporter = Depends(get_disk_reporter)):
    return DiskSpaceResponse(success=True, data=reporter.report())
