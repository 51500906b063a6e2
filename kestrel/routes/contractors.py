import uuid
from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session, selectinload

from ..config import settings
from ..db import get_db
from ..errors import NotFoundError, ValidationError
from ..models.models import Contractor, ContractorCertification
from ..schemas.common import MessageResponse
from ..schemas.contractors import (
    CertificationResponse,
    ContractorCreate,
    ContractorFilters,
    ContractorResponse,
    ContractorStatus,
    ContractorUpdate,
)
from ..services.expiry import resolve_status
from ..services.filters import build_predicates, equals, flag, matches_any, search, split_values
from ..services.time_rules import to_naive_utc

router = APIRouter(prefix="/api/contractors", tags=["contractors"])
logger = structlog.get_logger(__name__)

SEARCH_FIELDS = (Contractor.company_name, Contractor.contact_name, Contractor.email)
DATE_FIELDS = ("available_from", "available_to")


def contractor_view(contractor: Contractor) -> ContractorResponse:
    view = ContractorResponse.model_validate(contractor)
    certs = [
        CertificationResponse.model_validate(c).model_copy(update={"status": resolve_status(c.expiry_date)})
        for c in contractor.certifications
    ]
    return view.model_copy(update={"certifications": certs, "skills": list(contractor.skills or [])})


def _get_contractor_or_404(db: Session, contractor_id: uuid.UUID) -> Contractor:
    contractor = db.query(Contractor).filter(Contractor.id == contractor_id).first()
    if not contractor:
        raise NotFoundError("Contractor not found")
    return contractor


@router.get("", response_model=List[ContractorResponse])
def list_contractors(
    status: Optional[ContractorStatus] = Query(None),
    search_term: Optional[str] = Query(None, alias="search"),
    available: Optional[str] = Query(None),
    skills: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """List contractors by company name; skills match on any of the comma-separated values"""
    filters = ContractorFilters(status=status, search=search_term, available=available, skills=skills)
    predicates = build_predicates(
        equals(Contractor.status, filters.status),
        search(SEARCH_FIELDS, filters.search),
        flag(Contractor.is_available, filters.available),
    )
    contractors = (
        db.query(Contractor)
        .options(selectinload(Contractor.certifications))
        .filter(*predicates)
        .order_by(Contractor.company_name.asc())
        .limit(settings.list_max_limit)
        .all()
    )
    # Skills live in a JSON column, so intersection is evaluated here
    wanted = split_values(filters.skills)
    return [contractor_view(c) for c in contractors if matches_any(c.skills, wanted)]


@router.post("", response_model=ContractorResponse, status_code=201)
def create_contractor(payload: ContractorCreate, db: Session = Depends(get_db)):
    if not payload.company_name or not payload.contact_name or not payload.email:
        raise ValidationError("Missing required fields: companyName, contactName, email")

    data = payload.model_dump(exclude={"certifications", "status", "skills", "is_available"})
    for key in DATE_FIELDS:
        if data.get(key):
            data[key] = to_naive_utc(data[key])
    contractor = Contractor(
        **data,
        status=(payload.status or ContractorStatus.ACTIVE).value,
        skills=payload.skills or [],
        is_available=True if payload.is_available is None else payload.is_available,
    )
    for cert in payload.certifications or []:
        contractor.certifications.append(ContractorCertification(
            name=cert.name,
            issuer=cert.issuer,
            certificate_number=cert.certificate_number,
            issue_date=to_naive_utc(cert.issue_date) if cert.issue_date else None,
            expiry_date=to_naive_utc(cert.expiry_date) if cert.expiry_date else None,
        ))
    db.add(contractor)
    db.commit()
    db.refresh(contractor)
    logger.info("contractor_created", contractor_id=str(contractor.id), company_name=contractor.company_name)
    return contractor_view(contractor)


@router.get("/{contractor_id}", response_model=ContractorResponse)
def get_contractor(contractor_id: uuid.UUID, db: Session = Depends(get_db)):
    return contractor_view(_get_contractor_or_404(db, contractor_id))


@router.put("/{contractor_id}", response_model=ContractorResponse)
def update_contractor(contractor_id: uuid.UUID, payload: ContractorUpdate, db: Session = Depends(get_db)):
    contractor = _get_contractor_or_404(db, contractor_id)

    update_data = payload.model_dump(exclude_unset=True)
    for required in ("company_name", "contact_name", "email", "status", "is_available"):
        if update_data.get(required) is None:
            update_data.pop(required, None)
    if "status" in update_data:
        update_data["status"] = update_data["status"].value
    for key in DATE_FIELDS:
        if update_data.get(key):
            update_data[key] = to_naive_utc(update_data[key])
    for key, value in update_data.items():
        setattr(contractor, key, value)

    db.commit()
    db.refresh(contractor)
    return contractor_view(contractor)


@router.delete("/{contractor_id}", response_model=MessageResponse)
def delete_contractor(contractor_id: uuid.UUID, db: Session = Depends(get_db)):
    contractor = _get_contractor_or_404(db, contractor_id)
    db.delete(contractor)
    db.commit()
    logger.info("contractor_deleted", contractor_id=str(contractor_id))
    return MessageResponse(message="Contractor deleted successfully")
