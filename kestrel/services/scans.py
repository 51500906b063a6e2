"""
Scan audit recording.

Every scan attempt produces exactly one append-only ScanRecord, whatever its
outcome. A SUCCESS scan must reference an existing worker, whose last_seen is
bumped in the same transaction as the audit insert.
"""
import uuid
from datetime import datetime
from typing import Dict, List, Optional, Tuple

import structlog
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..config import settings
from ..errors import InternalError, NotFoundError, ValidationError
from ..models.models import ScanRecord, Worker
from ..schemas.scanner import ScanFilters, ScanStatus
from .filters import build_predicates, contains, equals
from .time_rules import start_of_local_day, to_naive_utc, utc_now


logger = structlog.get_logger(__name__)


def _parse_worker_id(raw) -> Optional[uuid.UUID]:
    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(str(raw))
    except (TypeError, ValueError):
        return None


def record_scan(
    db: Session,
    worker_id,
    status,
    location: Optional[str] = None,
    qr_data: Optional[str] = None,
    now: Optional[datetime] = None,
) -> ScanRecord:
    """
    Record one scan attempt.

    Args:
        db: Database session
        worker_id: Scanned worker identity (required)
        status: SUCCESS|ERROR|NOT_FOUND (required)
        location: Where the scan happened
        qr_data: Raw scanned payload
        now: Scan instant (defaults to the current time)

    Returns:
        The persisted ScanRecord with its worker loaded (if resolved)

    Raises:
        ValidationError: worker_id or status missing
        NotFoundError: SUCCESS scan for a worker that does not exist
        InternalError: the write failed
    """
    if not worker_id or not status:
        raise ValidationError("Missing required fields: workerId, status")

    try:
        status = ScanStatus(status)
    except ValueError:
        raise ValidationError("Invalid scan status", f"{status!r} is not one of SUCCESS, ERROR, NOT_FOUND")
    scanned_at = to_naive_utc(now) if now else utc_now()

    parsed_id = _parse_worker_id(worker_id)
    worker = db.get(Worker, parsed_id) if parsed_id else None

    if status == ScanStatus.SUCCESS:
        if worker is None:
            raise NotFoundError("Worker not found", f"No worker with id {worker_id}")
        worker.last_seen = scanned_at

    record = ScanRecord(
        worker_id=worker.id if worker else None,
        status=status.value,
        location=location,
        qr_data=qr_data,
        scanned_at=scanned_at,
    )
    db.add(record)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("scan_record_failed", worker_id=str(worker_id), status=status.value, error=str(e))
        raise InternalError("Failed to record scan", str(e))
    db.refresh(record)

    logger.info(
        "scan_recorded",
        scan_id=str(record.id),
        worker_id=str(record.worker_id) if record.worker_id else None,
        status=record.status,
        location=location,
    )
    return record


def get_today_stats(db: Session, now: Optional[datetime] = None) -> Dict[str, int]:
    """Per-outcome scan counts since local midnight, ignoring any list filters."""
    since = start_of_local_day(now)
    rows = (
        db.query(ScanRecord.status, func.count(ScanRecord.id))
        .filter(ScanRecord.scanned_at >= since)
        .group_by(ScanRecord.status)
        .all()
    )
    counts = {s: c for s, c in rows}
    return {
        "success": counts.get(ScanStatus.SUCCESS.value, 0),
        "error": counts.get(ScanStatus.ERROR.value, 0),
        "not_found": counts.get(ScanStatus.NOT_FOUND.value, 0),
        "total": sum(counts.values()),
    }


def list_scans(
    db: Session,
    filters: ScanFilters,
    now: Optional[datetime] = None,
) -> Tuple[List[ScanRecord], Dict[str, int]]:
    """
    Filtered scan history (newest first) plus today's dashboard counts.

    Returns:
        (records, today_stats)
    """
    limit = min(filters.limit or settings.scan_history_default_limit, settings.list_max_limit)
    predicates = build_predicates(
        equals(ScanRecord.worker_id, filters.worker_id),
        equals(ScanRecord.status, filters.status),
        contains(ScanRecord.location, filters.location),
    )
    records = (
        db.query(ScanRecord)
        .options(joinedload(ScanRecord.worker))
        .filter(*predicates)
        .order_by(ScanRecord.scanned_at.desc())
        .limit(limit)
        .all()
    )
    return records, get_today_stats(db, now)
