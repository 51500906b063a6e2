"""
Credential documents.

The stored ``status`` column is only the value computed at upload time;
every read path goes through ``document_view`` which recomputes it.
"""
import uuid
from datetime import datetime
from typing import List, Optional

import structlog
from sqlalchemy.orm import Session, joinedload

from ..config import settings
from ..errors import NotFoundError, ValidationError
from ..models.models import Document, Worker
from ..schemas.documents import DocumentCreate, DocumentFilters, DocumentResponse, DocumentUpdate
from .expiry import resolve_status
from .filters import build_predicates, equals, search
from .time_rules import to_naive_utc


logger = structlog.get_logger(__name__)

SEARCH_FIELDS = (Document.name, Document.description)


def document_view(doc: Document, now: Optional[datetime] = None) -> DocumentResponse:
    """Serialise a document with its status recomputed; the ORM row is left untouched."""
    view = DocumentResponse.model_validate(doc)
    return view.model_copy(update={"status": resolve_status(doc.expiry_date, now)})


def _require_worker(db: Session, worker_id: Optional[uuid.UUID]) -> None:
    if worker_id and db.get(Worker, worker_id) is None:
        raise NotFoundError("Worker not found", f"No worker with id {worker_id}")


def get_document(db: Session, document_id: uuid.UUID) -> Document:
    doc = (
        db.query(Document)
        .options(joinedload(Document.worker))
        .filter(Document.id == document_id)
        .first()
    )
    if not doc:
        raise NotFoundError("Document not found")
    return doc


def create_document(db: Session, payload: DocumentCreate, now: Optional[datetime] = None) -> Document:
    if not payload.name or not payload.type:
        raise ValidationError("Missing required fields: name, type")
    _require_worker(db, payload.worker_id)

    expiry = to_naive_utc(payload.expiry_date) if payload.expiry_date else None
    doc = Document(
        name=payload.name,
        type=payload.type.value,
        status=resolve_status(expiry, now).value,
        description=payload.description,
        worker_id=payload.worker_id,
        expiry_date=expiry,
        file_name=payload.file_name,
        file_size=payload.file_size,
    )
    db.add(doc)
    db.commit()
    db.refresh(doc)
    logger.info("document_created", document_id=str(doc.id), type=doc.type, status=doc.status)
    return doc


def list_documents(db: Session, filters: DocumentFilters, now: Optional[datetime] = None) -> List[DocumentResponse]:
    """
    List documents newest first, statuses recomputed.

    The status filter is applied to the recomputed status, not the stored one.
    """
    predicates = build_predicates(
        equals(Document.type, filters.type),
        equals(Document.worker_id, filters.worker_id),
        search(SEARCH_FIELDS, filters.search),
    )
    docs = (
        db.query(Document)
        .options(joinedload(Document.worker))
        .filter(*predicates)
        .order_by(Document.uploaded_at.desc())
        .limit(settings.list_max_limit)
        .all()
    )
    views = [document_view(d, now) for d in docs]
    if filters.status:
        views = [v for v in views if v.status == filters.status]
    return views


def update_document(db: Session, document_id: uuid.UUID, payload: DocumentUpdate, now: Optional[datetime] = None) -> Document:
    doc = get_document(db, document_id)
    update_data = payload.model_dump(exclude_unset=True)
    # name and type are required columns; an explicit null leaves them unchanged
    for required in ("name", "type"):
        if update_data.get(required) is None:
            update_data.pop(required, None)
    if "worker_id" in update_data:
        _require_worker(db, update_data["worker_id"])
    if update_data.get("expiry_date") is not None:
        update_data["expiry_date"] = to_naive_utc(update_data["expiry_date"])
    if update_data.get("type") is not None:
        update_data["type"] = update_data["type"].value
    for key, value in update_data.items():
        setattr(doc, key, value)
    doc.status = resolve_status(doc.expiry_date, now).value

    db.commit()
    db.refresh(doc)
    return doc


def delete_document(db: Session, document_id: uuid.UUID) -> None:
    doc = get_document(db, document_id)
    db.delete(doc)
    db.commit()
    logger.info("document_deleted", document_id=str(document_id))
