import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..config import settings
from ..db import get_db
from ..schemas.scanner import (
    ScanCreate,
    ScanFilters,
    ScanHistoryResponse,
    ScanRecordResponse,
    ScanStatus,
    TodayStats,
)
from ..services import scans

router = APIRouter(prefix="/api/scanner", tags=["scanner"])


@router.post("", response_model=ScanRecordResponse, status_code=201)
def record_scan(payload: ScanCreate, db: Session = Depends(get_db)):
    """Record a scan attempt; failed scans are recorded too"""
    record = scans.record_scan(
        db,
        worker_id=payload.worker_id,
        status=payload.status,
        location=payload.location,
        qr_data=payload.qr_data,
    )
    return record


@router.get("", response_model=ScanHistoryResponse)
def list_scans(
    worker_id: Optional[uuid.UUID] = Query(None, alias="workerId"),
    status: Optional[ScanStatus] = Query(None),
    location: Optional[str] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=settings.list_max_limit),
    db: Session = Depends(get_db),
):
    """Scan history with today's per-outcome counts"""
    filters = ScanFilters(worker_id=worker_id, status=status, location=location, limit=limit)
    records, stats = scans.list_scans(db, filters)
    return ScanHistoryResponse(
        scan_history=[ScanRecordResponse.model_validate(r) for r in records],
        count=len(records),
        today_stats=TodayStats(**stats),
    )
