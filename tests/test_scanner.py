import uuid
from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from kestrel.errors import InternalError, NotFoundError, ValidationError
from kestrel.models.models import ScanRecord, Worker
from kestrel.services import scans
from kestrel.services.time_rules import start_of_local_day


def _worker(db, employee_id="EMP100"):
    worker = Worker(employee_id=employee_id, name="Mike Wilson", role="Equipment Operator", status="ACTIVE")
    db.add(worker)
    db.commit()
    db.refresh(worker)
    return worker


def test_success_scan_updates_last_seen(client, make_worker, db):
    worker = make_worker()
    resp = client.post("/api/scanner", json={"workerId": worker["id"], "status": "SUCCESS", "location": "Main Gate"})

    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "SUCCESS"
    assert body["workerId"] == worker["id"]
    assert body["worker"]["employeeId"] == "EMP001"

    row = db.get(Worker, uuid.UUID(worker["id"]))
    scanned_at = datetime.fromisoformat(body["scannedAt"]).replace(tzinfo=None)
    assert row.last_seen == scanned_at


def test_error_scan_does_not_touch_last_seen(db):
    worker = _worker(db)
    before = datetime(2024, 1, 1)
    worker.last_seen = before
    db.commit()

    record = scans.record_scan(db, str(worker.id), "ERROR", location="Workshop")

    assert record.status == "ERROR"
    assert record.worker_id == worker.id
    db.refresh(worker)
    assert worker.last_seen == before


def test_not_found_scan_for_unknown_worker_is_recorded(client, db):
    resp = client.post("/api/scanner", json={"workerId": "not-a-real-id", "status": "NOT_FOUND", "qrData": "garbage"})

    assert resp.status_code == 201
    body = resp.json()
    assert body["workerId"] is None
    assert body["qrData"] == "garbage"
    assert db.query(ScanRecord).count() == 1


def test_success_scan_for_unknown_worker_is_404(client, db):
    resp = client.post("/api/scanner", json={"workerId": str(uuid.uuid4()), "status": "SUCCESS"})

    assert resp.status_code == 404
    assert resp.json()["error"] == "Worker not found"
    assert db.query(ScanRecord).count() == 0


@pytest.mark.parametrize("body", [
    {"status": "SUCCESS"},
    {"workerId": "abc"},
    {"workerId": "", "status": "ERROR"},
    {},
])
def test_missing_fields_are_rejected_without_a_row(client, db, body):
    resp = client.post("/api/scanner", json=body)

    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing required fields: workerId, status"
    assert db.query(ScanRecord).count() == 0


def test_invalid_status_is_rejected(client, db):
    resp = client.post("/api/scanner", json={"workerId": "abc", "status": "MAYBE"})

    assert resp.status_code == 400
    assert db.query(ScanRecord).count() == 0


def test_invalid_status_in_service(db):
    with pytest.raises(ValidationError):
        scans.record_scan(db, "abc", "MAYBE")


def test_service_raises_not_found(db):
    with pytest.raises(NotFoundError):
        scans.record_scan(db, str(uuid.uuid4()), "SUCCESS")


def test_history_is_newest_first_and_limited(client, db):
    worker = _worker(db)
    base = datetime.utcnow() - timedelta(minutes=10)
    for i in range(5):
        scans.record_scan(db, str(worker.id), "SUCCESS", location=f"Gate {i}", now=base + timedelta(minutes=i))

    resp = client.get("/api/scanner", params={"limit": 3})

    assert resp.status_code == 200
    body = resp.json()
    assert body["count"] == 3
    assert [r["location"] for r in body["scanHistory"]] == ["Gate 4", "Gate 3", "Gate 2"]


def test_history_filters(client, db):
    worker = _worker(db)
    other = _worker(db, employee_id="EMP200")
    scans.record_scan(db, str(worker.id), "SUCCESS", location="Main Gate")
    scans.record_scan(db, str(worker.id), "ERROR", location="Workshop")
    scans.record_scan(db, str(other.id), "SUCCESS", location="main gate east")

    by_worker = client.get("/api/scanner", params={"workerId": str(worker.id)}).json()
    assert by_worker["count"] == 2

    by_status = client.get("/api/scanner", params={"status": "ERROR"}).json()
    assert [r["location"] for r in by_status["scanHistory"]] == ["Workshop"]

    by_location = client.get("/api/scanner", params={"location": "MAIN GATE"}).json()
    assert by_location["count"] == 2


def test_today_stats_ignore_filters_and_limit(client, db):
    worker = _worker(db)
    now = datetime.utcnow()
    yesterday = start_of_local_day(now) - timedelta(hours=1)

    scans.record_scan(db, str(worker.id), "SUCCESS", now=yesterday)
    scans.record_scan(db, str(worker.id), "SUCCESS", now=now)
    scans.record_scan(db, str(worker.id), "ERROR", now=now)
    scans.record_scan(db, "unknown", "NOT_FOUND", now=now)

    body = client.get("/api/scanner", params={"status": "ERROR", "limit": 1}).json()

    assert body["count"] == 1
    assert body["todayStats"] == {"success": 1, "error": 1, "notFound": 1, "total": 3}


def test_start_of_local_day_uses_site_timezone():
    # 2025-06-01 17:00 UTC is 2025-06-02 01:00 in Perth (UTC+8)
    midnight = start_of_local_day(datetime(2025, 6, 1, 17, 0), "Australia/Perth")
    assert midnight == datetime(2025, 6, 1, 16, 0)


class _FailingSession:
    """Wraps a real session but fails on commit."""

    def __init__(self, session):
        self._session = session
        self.rolled_back = False

    def get(self, *args, **kwargs):
        return self._session.get(*args, **kwargs)

    def add(self, obj):
        self._session.add(obj)

    def commit(self):
        raise OperationalError("INSERT INTO scan_history", {}, Exception("disk I/O error"))

    def rollback(self):
        self.rolled_back = True
        self._session.rollback()


def test_storage_failure_is_internal_error_and_rolls_back(db):
    worker = _worker(db)
    worker.last_seen = datetime(2024, 1, 1)
    db.commit()
    failing = _FailingSession(db)

    with pytest.raises(InternalError):
        scans.record_scan(failing, str(worker.id), "SUCCESS")

    assert failing.rolled_back
    db.refresh(worker)
    assert worker.last_seen == datetime(2024, 1, 1)
    assert db.query(ScanRecord).count() == 0


def test_location_filter_matches_underscore_literally(client, db):
    worker = _worker(db)
    scans.record_scan(db, str(worker.id), "SUCCESS", location="Main Gate")
    scans.record_scan(db, str(worker.id), "SUCCESS", location="Pit_2")

    body = client.get("/api/scanner", params={"location": "_"}).json()

    assert [r["location"] for r in body["scanHistory"]] == ["Pit_2"]


def test_worker_search_matches_percent_literally(client, make_worker):
    make_worker(employee_id="EMP001", name="Jane")
    make_worker(employee_id="EMP002", name="100% Safe")

    body = client.get("/api/workers", params={"search": "%"}).json()

    assert [w["name"] for w in body["workers"]] == ["100% Safe"]


def test_history_limit_is_capped(client):
    resp = client.get("/api/scanner", params={"limit": 100000})

    assert resp.status_code == 400
