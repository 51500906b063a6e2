import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

from .common import ApiModel, WorkerSummary
from ..services.expiry import CredentialStatus


class DocumentType(str, Enum):
    ID = "ID"
    LICENSE = "LICENSE"
    CERTIFICATION = "CERTIFICATION"
    TRAINING = "TRAINING"
    MEDICAL = "MEDICAL"
    INDUCTION = "INDUCTION"
    OTHER = "OTHER"


class DocumentCreate(ApiModel):
    name: Optional[str] = None
    type: Optional[DocumentType] = None
    description: Optional[str] = None
    worker_id: Optional[uuid.UUID] = None
    expiry_date: Optional[datetime] = None
    file_name: Optional[str] = None
    file_size: Optional[int] = None


class DocumentUpdate(ApiModel):
    name: Optional[str] = None
    type: Optional[DocumentType] = None
    description: Optional[str] = None
    worker_id: Optional[uuid.UUID] = None
    expiry_date: Optional[datetime] = None
    file_name: Optional[str] = None
    file_size: Optional[int] = None


class DocumentFilters(ApiModel):
    type: Optional[DocumentType] = None
    status: Optional[CredentialStatus] = None
    worker_id: Optional[uuid.UUID] = None
    search: Optional[str] = None


class DocumentResponse(ApiModel):
    id: uuid.UUID
    name: str
    type: str
    status: CredentialStatus
    description: Optional[str] = None
    worker_id: Optional[uuid.UUID] = None
    expiry_date: Optional[datetime] = None
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    uploaded_at: datetime
    updated_at: Optional[datetime] = None
    worker: Optional[WorkerSummary] = None


class DocumentListResponse(ApiModel):
    documents: List[DocumentResponse]
    count: int
