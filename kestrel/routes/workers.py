import uuid
from typing import Dict, List, Optional

import structlog
from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..config import settings
from ..db import get_db
from ..errors import ConflictError, NotFoundError, ValidationError
from ..models.models import Document, ScanRecord, Worker
from ..schemas.common import MessageResponse
from ..schemas.scanner import ScanRecordResponse
from ..schemas.workers import (
    WorkerCreate,
    WorkerDetailResponse,
    WorkerFilters,
    WorkerListResponse,
    WorkerResponse,
    WorkerStatus,
    WorkerUpdate,
)
from ..services.documents import document_view
from ..services.mine_pass import generate_qr_code_image, mine_pass_payload
from ..services.filters import build_predicates, equals, search
from ..services.time_rules import utc_now

router = APIRouter(prefix="/api/workers", tags=["workers"])
logger = structlog.get_logger(__name__)

SEARCH_FIELDS = (Worker.name, Worker.employee_id, Worker.role)
RECENT_SCANS = 20


def _counts(db: Session, column, worker_ids: List[uuid.UUID]) -> Dict[uuid.UUID, int]:
    if not worker_ids:
        return {}
    rows = (
        db.query(column, func.count())
        .filter(column.in_(worker_ids))
        .group_by(column)
        .all()
    )
    return {wid: n for wid, n in rows}


def _worker_response(worker: Worker, doc_counts: Dict, scan_counts: Dict) -> WorkerResponse:
    return WorkerResponse.model_validate(worker).model_copy(update={
        "document_count": doc_counts.get(worker.id, 0),
        "scan_count": scan_counts.get(worker.id, 0),
    })


def _get_worker_or_404(db: Session, worker_id: uuid.UUID) -> Worker:
    worker = db.query(Worker).filter(Worker.id == worker_id).first()
    if not worker:
        raise NotFoundError("Worker not found")
    return worker


def _detail(db: Session, worker: Worker) -> WorkerDetailResponse:
    scans = (
        db.query(ScanRecord)
        .filter(ScanRecord.worker_id == worker.id)
        .order_by(ScanRecord.scanned_at.desc())
        .limit(RECENT_SCANS)
        .all()
    )
    base = _worker_response(
        worker,
        _counts(db, Document.worker_id, [worker.id]),
        _counts(db, ScanRecord.worker_id, [worker.id]),
    )
    return WorkerDetailResponse(
        **base.model_dump(),
        documents=[document_view(d) for d in worker.documents],
        scan_history=[ScanRecordResponse.model_validate(s) for s in scans],
    )


@router.get("", response_model=WorkerListResponse)
def list_workers(
    status: Optional[WorkerStatus] = Query(None),
    search_term: Optional[str] = Query(None, alias="search"),
    db: Session = Depends(get_db),
):
    """List workers, most recently updated first"""
    filters = WorkerFilters(status=status, search=search_term)
    predicates = build_predicates(
        equals(Worker.status, filters.status),
        search(SEARCH_FIELDS, filters.search),
    )
    workers = (
        db.query(Worker)
        .filter(*predicates)
        .order_by(Worker.updated_at.desc())
        .limit(settings.list_max_limit)
        .all()
    )
    ids = [w.id for w in workers]
    doc_counts = _counts(db, Document.worker_id, ids)
    scan_counts = _counts(db, ScanRecord.worker_id, ids)
    out = [_worker_response(w, doc_counts, scan_counts) for w in workers]
    return WorkerListResponse(workers=out, count=len(out))


@router.post("", response_model=WorkerDetailResponse, status_code=201)
def create_worker(payload: WorkerCreate, db: Session = Depends(get_db)):
    """Onboard a worker; employee IDs are unique"""
    if not payload.name or not payload.employee_id or not payload.role:
        raise ValidationError("Missing required fields: name, employeeId, role")

    existing = db.query(Worker).filter(Worker.employee_id == payload.employee_id).first()
    if existing:
        raise ConflictError("Worker with this employee ID already exists", payload.employee_id)

    worker = Worker(
        name=payload.name,
        employee_id=payload.employee_id,
        email=payload.email,
        phone=payload.phone,
        role=payload.role,
        department=payload.department,
        status=(payload.status or WorkerStatus.PENDING).value,
        last_seen=utc_now(),
    )
    db.add(worker)
    db.commit()
    db.refresh(worker)
    logger.info("worker_created", worker_id=str(worker.id), employee_id=worker.employee_id)
    return _detail(db, worker)


@router.get("/{worker_id}", response_model=WorkerDetailResponse)
def get_worker(worker_id: uuid.UUID, db: Session = Depends(get_db)):
    """Worker with documents and the last 20 scans"""
    return _detail(db, _get_worker_or_404(db, worker_id))


@router.put("/{worker_id}", response_model=WorkerDetailResponse)
def update_worker(worker_id: uuid.UUID, payload: WorkerUpdate, db: Session = Depends(get_db)):
    worker = _get_worker_or_404(db, worker_id)

    update_data = payload.model_dump(exclude_unset=True)
    # required columns; empty values leave them unchanged
    for required in ("name", "employee_id", "role", "status"):
        if not update_data.get(required):
            update_data.pop(required, None)
    new_id = update_data.get("employee_id")
    if new_id and new_id != worker.employee_id:
        taken = db.query(Worker).filter(Worker.employee_id == new_id).first()
        if taken:
            raise ConflictError("Worker with this employee ID already exists", new_id)
    if "status" in update_data:
        update_data["status"] = update_data["status"].value
    for key, value in update_data.items():
        setattr(worker, key, value)

    db.commit()
    db.refresh(worker)
    return _detail(db, worker)


@router.delete("/{worker_id}", response_model=MessageResponse)
def delete_worker(worker_id: uuid.UUID, db: Session = Depends(get_db)):
    """Hard delete; documents and scan history cascade"""
    worker = _get_worker_or_404(db, worker_id)
    db.delete(worker)
    db.commit()
    logger.info("worker_deleted", worker_id=str(worker_id))
    return MessageResponse(message="Worker deleted successfully")


@router.get("/{worker_id}/pass")
def get_mine_pass(worker_id: uuid.UUID, size: int = Query(200, ge=64, le=1024), db: Session = Depends(get_db)):
    """Mine pass QR code (PNG) encoding the worker's identity payload"""
    worker = _get_worker_or_404(db, worker_id)
    payload = mine_pass_payload(worker)
    return StreamingResponse(
        generate_qr_code_image(payload, size=size),
        media_type="image/png",
        headers={"Content-Disposition": f'inline; filename="mine-pass-{worker.employee_id}.png"'},
    )
