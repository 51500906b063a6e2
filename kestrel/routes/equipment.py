import uuid
from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..config import settings
from ..db import get_db
from ..errors import NotFoundError, ValidationError
from ..models.models import Equipment, EquipmentUsage
from ..schemas.common import MessageResponse
from ..schemas.equipment import (
    EquipmentCreate,
    EquipmentFilters,
    EquipmentResponse,
    EquipmentStatus,
    EquipmentType,
    EquipmentUpdate,
    UsageCreate,
    UsageEnd,
    UsageFilters,
    UsageResponse,
)
from ..services import equipment_usage
from ..services.filters import build_predicates, equals, is_true, search
from ..services.time_rules import to_naive_utc

router = APIRouter(prefix="/api/equipment", tags=["equipment"])
logger = structlog.get_logger(__name__)

SEARCH_FIELDS = (Equipment.name, Equipment.model, Equipment.serial_number, Equipment.registration_id)
DATE_FIELDS = ("last_service_date", "next_service_date")


def equipment_view(db: Session, equipment: Equipment) -> EquipmentResponse:
    active = (
        db.query(EquipmentUsage)
        .filter(EquipmentUsage.equipment_id == equipment.id, EquipmentUsage.end_time.is_(None))
        .order_by(EquipmentUsage.start_time.desc())
        .all()
    )
    view = EquipmentResponse.model_validate(equipment)
    return view.model_copy(update={"active_usage": [UsageResponse.model_validate(u) for u in active]})


def _get_equipment_or_404(db: Session, equipment_id: uuid.UUID) -> Equipment:
    equipment = db.query(Equipment).filter(Equipment.id == equipment_id).first()
    if not equipment:
        raise NotFoundError("Equipment not found")
    return equipment


def _normalise_dates(data: dict) -> dict:
    for key in DATE_FIELDS:
        if data.get(key):
            data[key] = to_naive_utc(data[key])
    return data


# ---------- USAGE ----------
@router.get("/usage", response_model=List[UsageResponse])
def list_usage(
    equipment_id: Optional[uuid.UUID] = Query(None, alias="equipmentId"),
    worker_id: Optional[uuid.UUID] = Query(None, alias="workerId"),
    contractor_id: Optional[uuid.UUID] = Query(None, alias="contractorId"),
    active: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """Usage sessions, newest first; active=true keeps only open sessions"""
    filters = UsageFilters(equipment_id=equipment_id, worker_id=worker_id, contractor_id=contractor_id, active=active)
    return equipment_usage.list_usage(db, filters)


@router.post("/usage", response_model=UsageResponse, status_code=201)
def start_usage(payload: UsageCreate, db: Session = Depends(get_db)):
    return equipment_usage.start_usage(db, payload)


@router.put("/usage/{usage_id}/end", response_model=UsageResponse)
def end_usage(usage_id: uuid.UUID, payload: UsageEnd, db: Session = Depends(get_db)):
    return equipment_usage.end_usage(db, usage_id, payload)


# ---------- EQUIPMENT ----------
@router.get("", response_model=List[EquipmentResponse])
def list_equipment(
    type: Optional[EquipmentType] = Query(None),
    status: Optional[EquipmentStatus] = Query(None),
    search_term: Optional[str] = Query(None, alias="search"),
    available: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """List equipment by name"""
    filters = EquipmentFilters(type=type, status=status, search=search_term, available=available)
    predicates = build_predicates(
        equals(Equipment.type, filters.type),
        equals(Equipment.status, filters.status),
        search(SEARCH_FIELDS, filters.search),
    )
    if is_true(filters.available):
        predicates.append(Equipment.is_available == True)  # noqa: E712
        predicates.append(Equipment.status == EquipmentStatus.AVAILABLE.value)
    items = (
        db.query(Equipment)
        .filter(*predicates)
        .order_by(Equipment.name.asc())
        .limit(settings.list_max_limit)
        .all()
    )
    return [equipment_view(db, e) for e in items]


@router.post("", response_model=EquipmentResponse, status_code=201)
def create_equipment(payload: EquipmentCreate, db: Session = Depends(get_db)):
    if not payload.name or not payload.type:
        raise ValidationError("Missing required fields: name, type")

    data = _normalise_dates(payload.model_dump(exclude={"type", "status", "is_available"}))
    equipment = Equipment(
        **data,
        type=payload.type.value,
        status=(payload.status or EquipmentStatus.AVAILABLE).value,
        is_available=True if payload.is_available is None else payload.is_available,
    )
    db.add(equipment)
    db.commit()
    db.refresh(equipment)
    logger.info("equipment_created", equipment_id=str(equipment.id), type=equipment.type)
    return equipment_view(db, equipment)


@router.get("/{equipment_id}", response_model=EquipmentResponse)
def get_equipment(equipment_id: uuid.UUID, db: Session = Depends(get_db)):
    return equipment_view(db, _get_equipment_or_404(db, equipment_id))


@router.put("/{equipment_id}", response_model=EquipmentResponse)
def update_equipment(equipment_id: uuid.UUID, payload: EquipmentUpdate, db: Session = Depends(get_db)):
    equipment = _get_equipment_or_404(db, equipment_id)

    update_data = _normalise_dates(payload.model_dump(exclude_unset=True))
    for required in ("name", "type", "status", "is_available"):
        if update_data.get(required) is None:
            update_data.pop(required, None)
    for key in ("type", "status"):
        if key in update_data:
            update_data[key] = update_data[key].value
    for key, value in update_data.items():
        setattr(equipment, key, value)

    db.commit()
    db.refresh(equipment)
    return equipment_view(db, equipment)


@router.delete("/{equipment_id}", response_model=MessageResponse)
def delete_equipment(equipment_id: uuid.UUID, db: Session = Depends(get_db)):
    equipment = _get_equipment_or_404(db, equipment_id)
    db.delete(equipment)
    db.commit()
    logger.info("equipment_deleted", equipment_id=str(equipment_id))
    return MessageResponse(message="Equipment deleted successfully")
