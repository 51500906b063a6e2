import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..db import get_db
from ..schemas.common import MessageResponse
from ..schemas.documents import (
    DocumentCreate,
    DocumentFilters,
    DocumentListResponse,
    DocumentResponse,
    DocumentType,
    DocumentUpdate,
)
from ..services import documents as svc
from ..services.expiry import CredentialStatus

router = APIRouter(prefix="/api/documents", tags=["documents"])


@router.get("", response_model=DocumentListResponse)
def list_documents(
    type: Optional[DocumentType] = Query(None),
    status: Optional[CredentialStatus] = Query(None),
    worker_id: Optional[uuid.UUID] = Query(None, alias="workerId"),
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """List documents with freshly computed expiry status"""
    filters = DocumentFilters(type=type, status=status, worker_id=worker_id, search=search)
    docs = svc.list_documents(db, filters)
    return DocumentListResponse(documents=docs, count=len(docs))


@router.post("", response_model=DocumentResponse, status_code=201)
def create_document(payload: DocumentCreate, db: Session = Depends(get_db)):
    return svc.document_view(svc.create_document(db, payload))


@router.get("/{document_id}", response_model=DocumentResponse)
def get_document(document_id: uuid.UUID, db: Session = Depends(get_db)):
    return svc.document_view(svc.get_document(db, document_id))


@router.put("/{document_id}", response_model=DocumentResponse)
def update_document(document_id: uuid.UUID, payload: DocumentUpdate, db: Session = Depends(get_db)):
    return svc.document_view(svc.update_document(db, document_id, payload))


@router.delete("/{document_id}", response_model=MessageResponse)
def delete_document(document_id: uuid.UUID, db: Session = Depends(get_db)):
    svc.delete_document(db, document_id)
    return MessageResponse(message="Document deleted successfully")
