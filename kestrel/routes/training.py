import uuid
from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy import case, func
from sqlalchemy.orm import Session, joinedload

from ..db import get_db
from ..errors import NotFoundError, ValidationError
from ..models.models import TrainingEnrollment, TrainingProgram
from ..schemas.common import MessageResponse
from ..schemas.training import (
    AssessmentType,
    DeliveryMethod,
    EnrollmentCreate,
    EnrollmentFilters,
    EnrollmentResponse,
    EnrollmentStatus,
    Priority,
    ProgramCreate,
    ProgramFilters,
    ProgramResponse,
    ProgramUpdate,
    TrainingCategory,
)
from ..services.participants import check_participant
from ..services.filters import build_predicates, contains, equals, search
from ..services.time_rules import to_naive_utc

router = APIRouter(prefix="/api/training", tags=["training"])
logger = structlog.get_logger(__name__)

SEARCH_FIELDS = (TrainingProgram.name, TrainingProgram.description, TrainingProgram.provider)
ENUM_FIELDS = ("category", "delivery_method", "assessment_type")
PRIORITY_RANK = case(
    {Priority.CRITICAL.value: 4, Priority.HIGH.value: 3, Priority.MEDIUM.value: 2, Priority.LOW.value: 1},
    value=TrainingEnrollment.priority,
    else_=0,
)


def _program_view(db: Session, program: TrainingProgram) -> ProgramResponse:
    count = db.query(func.count(TrainingEnrollment.id)).filter(
        TrainingEnrollment.training_program_id == program.id
    ).scalar()
    return ProgramResponse.model_validate(program).model_copy(update={"enrollment_count": count or 0})


def _get_program_or_404(db: Session, program_id: uuid.UUID) -> TrainingProgram:
    program = db.query(TrainingProgram).filter(TrainingProgram.id == program_id).first()
    if not program:
        raise NotFoundError("Training program not found")
    return program


# ---------- ENROLLMENTS ----------
@router.get("/enrollments", response_model=List[EnrollmentResponse])
def list_enrollments(
    program_id: Optional[uuid.UUID] = Query(None, alias="programId"),
    worker_id: Optional[uuid.UUID] = Query(None, alias="workerId"),
    contractor_id: Optional[uuid.UUID] = Query(None, alias="contractorId"),
    status: Optional[EnrollmentStatus] = Query(None),
    priority: Optional[Priority] = Query(None),
    db: Session = Depends(get_db),
):
    """Enrollments by priority (highest first), then deadline, then newest"""
    filters = EnrollmentFilters(
        program_id=program_id,
        worker_id=worker_id,
        contractor_id=contractor_id,
        status=status,
        priority=priority,
    )
    predicates = build_predicates(
        equals(TrainingEnrollment.training_program_id, filters.program_id),
        equals(TrainingEnrollment.worker_id, filters.worker_id),
        equals(TrainingEnrollment.contractor_id, filters.contractor_id),
        equals(TrainingEnrollment.status, filters.status),
        equals(TrainingEnrollment.priority, filters.priority),
    )
    return (
        db.query(TrainingEnrollment)
        .options(
            joinedload(TrainingEnrollment.training_program),
            joinedload(TrainingEnrollment.worker),
            joinedload(TrainingEnrollment.contractor),
        )
        .filter(*predicates)
        .order_by(
            PRIORITY_RANK.desc(),
            TrainingEnrollment.deadline.is_(None),
            TrainingEnrollment.deadline.asc(),
            TrainingEnrollment.enrolled_at.desc(),
        )
        .all()
    )


@router.post("/enrollments", response_model=EnrollmentResponse, status_code=201)
def create_enrollment(payload: EnrollmentCreate, db: Session = Depends(get_db)):
    if not payload.training_program_id:
        raise ValidationError("Missing required fields: trainingProgramId, participantType")
    _get_program_or_404(db, payload.training_program_id)
    check_participant(db, payload.participant_type, payload.worker_id, payload.contractor_id)

    enrollment = TrainingEnrollment(
        training_program_id=payload.training_program_id,
        participant_type=payload.participant_type.value,
        worker_id=payload.worker_id,
        contractor_id=payload.contractor_id,
        status=(payload.status or EnrollmentStatus.ENROLLED).value,
        priority=(payload.priority or Priority.MEDIUM).value,
        deadline=to_naive_utc(payload.deadline) if payload.deadline else None,
        progress_percent=payload.progress_percent or 0,
        started_at=to_naive_utc(payload.started_at) if payload.started_at else None,
        completed_at=to_naive_utc(payload.completed_at) if payload.completed_at else None,
        final_score=payload.final_score,
        passed=payload.passed,
        certificate_issued=bool(payload.certificate_issued),
        notes=payload.notes,
    )
    db.add(enrollment)
    db.commit()
    db.refresh(enrollment)
    logger.info(
        "enrollment_created",
        enrollment_id=str(enrollment.id),
        program_id=str(enrollment.training_program_id),
        participant_type=enrollment.participant_type,
    )
    return enrollment


# ---------- PROGRAMS ----------
@router.get("/programs", response_model=List[ProgramResponse])
def list_programs(
    category: Optional[TrainingCategory] = Query(None),
    search_term: Optional[str] = Query(None, alias="search"),
    provider: Optional[str] = Query(None),
    delivery_method: Optional[DeliveryMethod] = Query(None, alias="deliveryMethod"),
    db: Session = Depends(get_db),
):
    """List training programs by name"""
    filters = ProgramFilters(category=category, search=search_term, provider=provider, delivery_method=delivery_method)
    predicates = build_predicates(
        equals(TrainingProgram.category, filters.category),
        search(SEARCH_FIELDS, filters.search),
        contains(TrainingProgram.provider, filters.provider),
        equals(TrainingProgram.delivery_method, filters.delivery_method),
    )
    programs = db.query(TrainingProgram).filter(*predicates).order_by(TrainingProgram.name.asc()).all()
    return [_program_view(db, p) for p in programs]


@router.post("/programs", response_model=ProgramResponse, status_code=201)
def create_program(payload: ProgramCreate, db: Session = Depends(get_db)):
    if not payload.name or not payload.category:
        raise ValidationError("Missing required fields: name, category")

    program = TrainingProgram(
        **payload.model_dump(exclude={"name", "category", "is_recurring", "renewal_required", *ENUM_FIELDS}),
        name=payload.name,
        category=payload.category.value,
        is_recurring=bool(payload.is_recurring),
        renewal_required=bool(payload.renewal_required),
        delivery_method=(payload.delivery_method or DeliveryMethod.IN_PERSON).value,
        assessment_type=(payload.assessment_type or AssessmentType.PRACTICAL).value,
    )
    db.add(program)
    db.commit()
    db.refresh(program)
    logger.info("training_program_created", program_id=str(program.id), name=program.name)
    return _program_view(db, program)


@router.get("/programs/{program_id}", response_model=ProgramResponse)
def get_program(program_id: uuid.UUID, db: Session = Depends(get_db)):
    return _program_view(db, _get_program_or_404(db, program_id))


@router.put("/programs/{program_id}", response_model=ProgramResponse)
def update_program(program_id: uuid.UUID, payload: ProgramUpdate, db: Session = Depends(get_db)):
    program = _get_program_or_404(db, program_id)

    update_data = payload.model_dump(exclude_unset=True)
    for required in ("name", "is_recurring", "renewal_required", *ENUM_FIELDS):
        if update_data.get(required) is None:
            update_data.pop(required, None)
    for key in ENUM_FIELDS:
        if key in update_data:
            update_data[key] = update_data[key].value
    for key, value in update_data.items():
        setattr(program, key, value)

    db.commit()
    db.refresh(program)
    return _program_view(db, program)


@router.delete("/programs/{program_id}", response_model=MessageResponse)
def delete_program(program_id: uuid.UUID, db: Session = Depends(get_db)):
    program = _get_program_or_404(db, program_id)
    db.delete(program)
    db.commit()
    logger.info("training_program_deleted", program_id=str(program_id))
    return MessageResponse(message="Training program deleted successfully")
