import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

from .common import ApiModel, WorkerSummary
from ..services.expiry import CredentialStatus


class SkillCategory(str, Enum):
    TECHNICAL = "TECHNICAL"
    SAFETY = "SAFETY"
    OPERATIONAL = "OPERATIONAL"
    LEADERSHIP = "LEADERSHIP"
    COMPLIANCE = "COMPLIANCE"
    OTHER = "OTHER"


class SkillLevel(str, Enum):
    BASIC = "BASIC"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"
    EXPERT = "EXPERT"


class SkillCreate(ApiModel):
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[SkillCategory] = None
    level: Optional[SkillLevel] = None
    requires_certification: Optional[bool] = None
    certification_authority: Optional[str] = None
    validity_period: Optional[int] = None


class SkillFilters(ApiModel):
    category: Optional[SkillCategory] = None
    level: Optional[SkillLevel] = None
    search: Optional[str] = None
    requires_certification: Optional[str] = None


class SkillResponse(ApiModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    category: str
    level: str
    requires_certification: bool
    certification_authority: Optional[str] = None
    validity_period: Optional[int] = None
    created_at: datetime
    worker_count: int = 0
    verified_worker_count: int = 0


class SkillSummary(ApiModel):
    id: uuid.UUID
    name: str
    category: str
    requires_certification: bool


class WorkerSkillCreate(ApiModel):
    worker_id: Optional[uuid.UUID] = None
    skill_id: Optional[uuid.UUID] = None
    level: Optional[SkillLevel] = None
    experience_years: Optional[float] = None
    verified: Optional[bool] = None
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None
    certified: Optional[bool] = None
    certification_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    certification_number: Optional[str] = None
    notes: Optional[str] = None


class WorkerSkillFilters(ApiModel):
    worker_id: Optional[uuid.UUID] = None
    skill_id: Optional[uuid.UUID] = None
    verified: Optional[str] = None
    certified: Optional[str] = None


class WorkerSkillResponse(ApiModel):
    id: uuid.UUID
    worker_id: uuid.UUID
    skill_id: uuid.UUID
    level: str
    experience_years: Optional[float] = None
    verified: bool
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None
    certified: bool
    certification_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    certification_number: Optional[str] = None
    notes: Optional[str] = None
    status: CredentialStatus = CredentialStatus.VALID
    worker: Optional[WorkerSummary] = None
    skill: Optional[SkillSummary] = None


class MatrixCell(ApiModel):
    skill_id: uuid.UUID
    skill_name: str
    skill_category: str
    level: Optional[SkillLevel] = None
    experience_years: Optional[float] = None
    verified: bool = False
    certified: bool = False
    expiry_date: Optional[datetime] = None
    # None when the worker does not hold the skill
    status: Optional[CredentialStatus] = None


class MatrixRow(ApiModel):
    worker_id: uuid.UUID
    worker_name: str
    employee_id: str
    role: str
    department: Optional[str] = None
    skills: List[MatrixCell]


class LevelBreakdown(ApiModel):
    basic: int = 0
    intermediate: int = 0
    advanced: int = 0
    expert: int = 0


class SkillDistribution(ApiModel):
    skill_id: uuid.UUID
    skill_name: str
    category: str
    total_workers: int
    verified: int
    certified: int
    level_breakdown: LevelBreakdown


class MatrixSummary(ApiModel):
    total_workers: int
    total_skills: int
    skills_distribution: List[SkillDistribution]


class SkillMatrixResponse(ApiModel):
    matrix: List[MatrixRow]
    summary: MatrixSummary
    skills: List[SkillSummary]
