import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

from .common import ApiModel
from .documents import DocumentResponse
from .scanner import ScanRecordResponse


class WorkerStatus(str, Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"


class WorkerCreate(ApiModel):
    name: Optional[str] = None
    employee_id: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    department: Optional[str] = None
    status: Optional[WorkerStatus] = None


class WorkerUpdate(ApiModel):
    name: Optional[str] = None
    employee_id: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    department: Optional[str] = None
    status: Optional[WorkerStatus] = None


class WorkerFilters(ApiModel):
    status: Optional[WorkerStatus] = None
    search: Optional[str] = None


class WorkerResponse(ApiModel):
    id: uuid.UUID
    employee_id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    role: str
    department: Optional[str] = None
    status: str
    last_seen: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    document_count: int = 0
    scan_count: int = 0


class WorkerDetailResponse(WorkerResponse):
    documents: List[DocumentResponse] = []
    scan_history: List[ScanRecordResponse] = []


class WorkerListResponse(ApiModel):
    workers: List[WorkerResponse]
    count: int
