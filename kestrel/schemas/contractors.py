import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import field_validator

from .common import ApiModel
from ..services.expiry import CredentialStatus


class ContractorStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"
    PENDING = "PENDING"


class CertificationCreate(ApiModel):
    name: str
    issuer: Optional[str] = None
    certificate_number: Optional[str] = None
    issue_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None


class CertificationResponse(CertificationCreate):
    id: uuid.UUID
    status: CredentialStatus = CredentialStatus.VALID


class ContractorBase(ApiModel):
    abn: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    hourly_rate: Optional[float] = None
    daily_rate: Optional[float] = None
    emergency_rate: Optional[float] = None
    available_from: Optional[datetime] = None
    available_to: Optional[datetime] = None
    max_hours_per_week: Optional[int] = None


class ContractorCreate(ContractorBase):
    company_name: Optional[str] = None
    contact_name: Optional[str] = None
    email: Optional[str] = None
    status: Optional[ContractorStatus] = None
    skills: Optional[List[str]] = None
    is_available: Optional[bool] = None
    certifications: Optional[List[CertificationCreate]] = None


class ContractorUpdate(ContractorBase):
    company_name: Optional[str] = None
    contact_name: Optional[str] = None
    email: Optional[str] = None
    status: Optional[ContractorStatus] = None
    skills: Optional[List[str]] = None
    is_available: Optional[bool] = None


class ContractorFilters(ApiModel):
    status: Optional[ContractorStatus] = None
    search: Optional[str] = None
    available: Optional[str] = None
    skills: Optional[str] = None


class ContractorResponse(ContractorBase):
    id: uuid.UUID
    company_name: str
    contact_name: str
    email: str
    status: str
    skills: List[str] = []
    is_available: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
    certifications: List[CertificationResponse] = []

    @field_validator("skills", mode="before")
    @classmethod
    def _skills_default(cls, v):
        return v or []
