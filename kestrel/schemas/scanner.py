import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from .common import ApiModel, WorkerSummary


class ScanStatus(str, Enum):
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"
    NOT_FOUND = "NOT_FOUND"


class ScanCreate(ApiModel):
    # Presence is checked by the recorder so a missing field yields the
    # "Missing required fields" error rather than a schema error.
    worker_id: Optional[str] = None
    status: Optional[ScanStatus] = None
    location: Optional[str] = None
    qr_data: Optional[str] = None


class ScanFilters(ApiModel):
    worker_id: Optional[uuid.UUID] = None
    status: Optional[ScanStatus] = None
    location: Optional[str] = None
    limit: Optional[int] = Field(default=None, ge=1)


class ScanRecordResponse(ApiModel):
    id: uuid.UUID
    worker_id: Optional[uuid.UUID] = None
    status: ScanStatus
    location: Optional[str] = None
    qr_data: Optional[str] = None
    scanned_at: datetime
    worker: Optional[WorkerSummary] = None


class TodayStats(ApiModel):
    success: int = 0
    error: int = 0
    not_found: int = 0
    total: int = 0


class ScanHistoryResponse(ApiModel):
    scan_history: List[ScanRecordResponse]
    count: int
    today_stats: TodayStats
