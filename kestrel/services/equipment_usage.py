"""
Equipment usage sessions.

A session with no end_time is active. Starting an active session puts the
equipment IN_USE; ending it makes the equipment AVAILABLE again. Readings
taken at either end are copied onto the equipment's current meters.
"""
import uuid
from typing import List

import structlog
from sqlalchemy.orm import Session, joinedload

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models.models import Equipment, EquipmentUsage
from ..schemas.equipment import EquipmentStatus, UsageCreate, UsageEnd, UsageFilters
from .filters import build_predicates, equals, is_true
from .participants import check_participant
from .time_rules import to_naive_utc, utc_now


logger = structlog.get_logger(__name__)


def _load(db: Session, usage_id: uuid.UUID) -> EquipmentUsage:
    usage = (
        db.query(EquipmentUsage)
        .options(
            joinedload(EquipmentUsage.equipment),
            joinedload(EquipmentUsage.worker),
            joinedload(EquipmentUsage.contractor),
        )
        .filter(EquipmentUsage.id == usage_id)
        .first()
    )
    if not usage:
        raise NotFoundError("Usage session not found")
    return usage


def list_usage(db: Session, filters: UsageFilters) -> List[EquipmentUsage]:
    predicates = build_predicates(
        equals(EquipmentUsage.equipment_id, filters.equipment_id),
        equals(EquipmentUsage.worker_id, filters.worker_id),
        equals(EquipmentUsage.contractor_id, filters.contractor_id),
    )
    if is_true(filters.active):
        predicates.append(EquipmentUsage.end_time.is_(None))
    return (
        db.query(EquipmentUsage)
        .options(
            joinedload(EquipmentUsage.equipment),
            joinedload(EquipmentUsage.worker),
            joinedload(EquipmentUsage.contractor),
        )
        .filter(*predicates)
        .order_by(EquipmentUsage.start_time.desc())
        .all()
    )


def start_usage(db: Session, payload: UsageCreate) -> EquipmentUsage:
    if not payload.equipment_id or not payload.start_time:
        raise ValidationError("Missing required fields: equipmentId, operatorType, startTime")
    check_participant(db, payload.operator_type, payload.worker_id, payload.contractor_id)

    equipment = db.get(Equipment, payload.equipment_id)
    if equipment is None:
        raise NotFoundError("Equipment not found")

    usage = EquipmentUsage(
        equipment_id=equipment.id,
        operator_type=payload.operator_type.value,
        worker_id=payload.worker_id,
        contractor_id=payload.contractor_id,
        start_time=to_naive_utc(payload.start_time),
        end_time=to_naive_utc(payload.end_time) if payload.end_time else None,
        location=payload.location,
        purpose=payload.purpose,
        start_km=payload.start_km,
        end_km=payload.end_km,
        start_hours=payload.start_hours,
        end_hours=payload.end_hours,
        fuel_used=payload.fuel_used,
        notes=payload.notes,
    )
    db.add(usage)

    if usage.end_time is None:
        equipment.status = EquipmentStatus.IN_USE.value
        equipment.is_available = False
        equipment.current_km = payload.start_km
        equipment.current_hours = payload.start_hours

    db.commit()
    logger.info(
        "usage_started",
        usage_id=str(usage.id),
        equipment_id=str(equipment.id),
        operator_type=usage.operator_type,
        active=usage.end_time is None,
    )
    return _load(db, usage.id)


def end_usage(db: Session, usage_id: uuid.UUID, payload: UsageEnd) -> EquipmentUsage:
    usage = _load(db, usage_id)
    if usage.end_time is not None:
        raise ConflictError("Usage session already ended")

    usage.end_time = to_naive_utc(payload.end_time) if payload.end_time else utc_now()
    if payload.end_km is not None:
        usage.end_km = payload.end_km
    if payload.end_hours is not None:
        usage.end_hours = payload.end_hours
    if payload.fuel_used is not None:
        usage.fuel_used = payload.fuel_used
    if payload.notes:
        usage.notes = payload.notes

    equipment = usage.equipment
    equipment.status = EquipmentStatus.AVAILABLE.value
    equipment.is_available = True
    if payload.end_km is not None:
        equipment.current_km = payload.end_km
    if payload.end_hours is not None:
        equipment.current_hours = payload.end_hours

    db.commit()
    logger.info("usage_ended", usage_id=str(usage_id), equipment_id=str(equipment.id))
    return _load(db, usage_id)
