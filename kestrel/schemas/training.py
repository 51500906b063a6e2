import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from .common import ApiModel, ContractorSummary, ParticipantType, WorkerSummary


class TrainingCategory(str, Enum):
    SAFETY = "SAFETY"
    TECHNICAL = "TECHNICAL"
    COMPLIANCE = "COMPLIANCE"
    LEADERSHIP = "LEADERSHIP"
    INDUCTION = "INDUCTION"
    OTHER = "OTHER"


class DeliveryMethod(str, Enum):
    IN_PERSON = "IN_PERSON"
    ONLINE = "ONLINE"
    BLENDED = "BLENDED"


class AssessmentType(str, Enum):
    PRACTICAL = "PRACTICAL"
    WRITTEN = "WRITTEN"
    ONLINE = "ONLINE"
    NONE = "NONE"


class EnrollmentStatus(str, Enum):
    ENROLLED = "ENROLLED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class Priority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


# Program Schemas
class ProgramBase(ApiModel):
    description: Optional[str] = None
    provider: Optional[str] = None
    duration: Optional[float] = None
    validity_period: Optional[int] = None
    passing_score: Optional[int] = None
    cost: Optional[float] = None
    max_participants: Optional[int] = None


class ProgramCreate(ProgramBase):
    name: Optional[str] = None
    category: Optional[TrainingCategory] = None
    is_recurring: Optional[bool] = None
    renewal_required: Optional[bool] = None
    delivery_method: Optional[DeliveryMethod] = None
    assessment_type: Optional[AssessmentType] = None


class ProgramUpdate(ProgramCreate):
    pass


class ProgramFilters(ApiModel):
    category: Optional[TrainingCategory] = None
    search: Optional[str] = None
    provider: Optional[str] = None
    delivery_method: Optional[DeliveryMethod] = None


class ProgramResponse(ProgramBase):
    id: uuid.UUID
    name: str
    category: str
    is_recurring: bool
    renewal_required: bool
    delivery_method: str
    assessment_type: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    enrollment_count: int = 0


class ProgramSummary(ApiModel):
    id: uuid.UUID
    name: str
    category: str
    duration: Optional[float] = None
    delivery_method: str


# Enrollment Schemas
class EnrollmentCreate(ApiModel):
    training_program_id: Optional[uuid.UUID] = None
    participant_type: Optional[ParticipantType] = None
    worker_id: Optional[uuid.UUID] = None
    contractor_id: Optional[uuid.UUID] = None
    status: Optional[EnrollmentStatus] = None
    priority: Optional[Priority] = None
    deadline: Optional[datetime] = None
    progress_percent: Optional[int] = Field(default=None, ge=0, le=100)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    final_score: Optional[float] = None
    passed: Optional[bool] = None
    certificate_issued: Optional[bool] = None
    notes: Optional[str] = None


class EnrollmentFilters(ApiModel):
    program_id: Optional[uuid.UUID] = None
    worker_id: Optional[uuid.UUID] = None
    contractor_id: Optional[uuid.UUID] = None
    status: Optional[EnrollmentStatus] = None
    priority: Optional[Priority] = None


class EnrollmentResponse(ApiModel):
    id: uuid.UUID
    training_program_id: uuid.UUID
    participant_type: ParticipantType
    worker_id: Optional[uuid.UUID] = None
    contractor_id: Optional[uuid.UUID] = None
    status: str
    priority: str
    deadline: Optional[datetime] = None
    progress_percent: int
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    final_score: Optional[float] = None
    passed: Optional[bool] = None
    certificate_issued: bool
    notes: Optional[str] = None
    enrolled_at: datetime
    training_program: Optional[ProgramSummary] = None
    worker: Optional[WorkerSummary] = None
    contractor: Optional[ContractorSummary] = None
