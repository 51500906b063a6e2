import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

from .common import ApiModel, ContractorSummary, ParticipantType, WorkerSummary


class EquipmentType(str, Enum):
    EXCAVATOR = "EXCAVATOR"
    DUMP_TRUCK = "DUMP_TRUCK"
    DRILL_RIG = "DRILL_RIG"
    LOADER = "LOADER"
    DOZER = "DOZER"
    GRADER = "GRADER"
    LIGHT_VEHICLE = "LIGHT_VEHICLE"
    OTHER = "OTHER"


class EquipmentStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    IN_USE = "IN_USE"
    MAINTENANCE = "MAINTENANCE"
    OUT_OF_SERVICE = "OUT_OF_SERVICE"
    RETIRED = "RETIRED"


# Equipment Schemas
class EquipmentBase(ApiModel):
    model: Optional[str] = None
    serial_number: Optional[str] = None
    registration_id: Optional[str] = None
    current_location: Optional[str] = None
    current_km: Optional[float] = None
    current_hours: Optional[float] = None
    last_service_date: Optional[datetime] = None
    next_service_date: Optional[datetime] = None
    notes: Optional[str] = None


class EquipmentCreate(EquipmentBase):
    name: Optional[str] = None
    type: Optional[EquipmentType] = None
    status: Optional[EquipmentStatus] = None
    is_available: Optional[bool] = None


class EquipmentUpdate(EquipmentBase):
    name: Optional[str] = None
    type: Optional[EquipmentType] = None
    status: Optional[EquipmentStatus] = None
    is_available: Optional[bool] = None


class EquipmentFilters(ApiModel):
    type: Optional[EquipmentType] = None
    status: Optional[EquipmentStatus] = None
    search: Optional[str] = None
    available: Optional[str] = None


class EquipmentSummary(ApiModel):
    id: uuid.UUID
    name: str
    type: str
    model: Optional[str] = None
    registration_id: Optional[str] = None


# Usage Schemas
class UsageCreate(ApiModel):
    equipment_id: Optional[uuid.UUID] = None
    operator_type: Optional[ParticipantType] = None
    worker_id: Optional[uuid.UUID] = None
    contractor_id: Optional[uuid.UUID] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    location: Optional[str] = None
    purpose: Optional[str] = None
    start_km: Optional[float] = None
    end_km: Optional[float] = None
    start_hours: Optional[float] = None
    end_hours: Optional[float] = None
    fuel_used: Optional[float] = None
    notes: Optional[str] = None


class UsageEnd(ApiModel):
    end_time: Optional[datetime] = None
    end_km: Optional[float] = None
    end_hours: Optional[float] = None
    fuel_used: Optional[float] = None
    notes: Optional[str] = None


class UsageFilters(ApiModel):
    equipment_id: Optional[uuid.UUID] = None
    worker_id: Optional[uuid.UUID] = None
    contractor_id: Optional[uuid.UUID] = None
    active: Optional[str] = None


class UsageResponse(ApiModel):
    id: uuid.UUID
    equipment_id: uuid.UUID
    operator_type: ParticipantType
    worker_id: Optional[uuid.UUID] = None
    contractor_id: Optional[uuid.UUID] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    location: Optional[str] = None
    purpose: Optional[str] = None
    start_km: Optional[float] = None
    end_km: Optional[float] = None
    start_hours: Optional[float] = None
    end_hours: Optional[float] = None
    fuel_used: Optional[float] = None
    notes: Optional[str] = None
    equipment: Optional[EquipmentSummary] = None
    worker: Optional[WorkerSummary] = None
    contractor: Optional[ContractorSummary] = None


class EquipmentResponse(EquipmentBase):
    id: uuid.UUID
    name: str
    type: str
    status: str
    is_available: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
    active_usage: List[UsageResponse] = []
