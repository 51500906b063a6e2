import uuid
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ParticipantType(str, Enum):
    WORKER = "WORKER"
    CONTRACTOR = "CONTRACTOR"


class WorkerSummary(ApiModel):
    id: uuid.UUID
    name: str
    employee_id: str
    status: Optional[str] = None
    role: Optional[str] = None


class ContractorSummary(ApiModel):
    id: uuid.UUID
    company_name: str
    contact_name: str


class MessageResponse(ApiModel):
    message: str


class ErrorResponse(ApiModel):
    error: str
    details: Optional[str] = None
