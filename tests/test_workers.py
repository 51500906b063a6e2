import json
import uuid

from kestrel.models.models import Document, ScanRecord, Worker
from kestrel.services.mine_pass import mine_pass_payload


def test_create_worker_defaults(client, make_worker):
    worker = make_worker()

    assert worker["status"] == "PENDING"
    assert worker["lastSeen"] is not None
    assert worker["documents"] == []
    assert worker["scanHistory"] == []


def test_create_worker_missing_fields(client, db):
    resp = client.post("/api/workers", json={"name": "No Id", "role": "Driller"})

    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing required fields: name, employeeId, role"
    assert db.query(Worker).count() == 0


def test_duplicate_employee_id_conflicts(client, make_worker, db):
    make_worker(employee_id="EMP001")
    resp = client.post("/api/workers", json={"employeeId": "EMP001", "name": "Someone Else", "role": "Driller"})

    assert resp.status_code == 409
    assert resp.json()["error"] == "Worker with this employee ID already exists"
    assert db.query(Worker).count() == 1


def test_list_filters_by_status_and_search(client, make_worker):
    make_worker(employee_id="EMP001", name="John Smith", role="Site Supervisor", status="ACTIVE")
    make_worker(employee_id="EMP002", name="Sarah Johnson", role="Safety Officer", status="ACTIVE")
    make_worker(employee_id="EMP003", name="Mike Wilson", role="Equipment Operator")

    active = client.get("/api/workers", params={"status": "ACTIVE"}).json()
    assert active["count"] == 2

    by_role = client.get("/api/workers", params={"search": "safety"}).json()
    assert [w["employeeId"] for w in by_role["workers"]] == ["EMP002"]

    by_employee_id = client.get("/api/workers", params={"search": "emp003"}).json()
    assert [w["name"] for w in by_employee_id["workers"]] == ["Mike Wilson"]

    everyone = client.get("/api/workers").json()
    assert everyone["count"] == 3


def test_list_includes_counts(client, make_worker):
    worker = make_worker()
    client.post("/api/documents", json={"name": "Medical.pdf", "type": "MEDICAL", "workerId": worker["id"]})
    client.post("/api/scanner", json={"workerId": worker["id"], "status": "SUCCESS"})
    client.post("/api/scanner", json={"workerId": worker["id"], "status": "ERROR"})

    listed = client.get("/api/workers").json()["workers"][0]

    assert listed["documentCount"] == 1
    assert listed["scanCount"] == 2


def test_get_worker_detail(client, make_worker):
    worker = make_worker()
    client.post("/api/scanner", json={"workerId": worker["id"], "status": "SUCCESS", "location": "Main Gate"})

    resp = client.get(f"/api/workers/{worker['id']}")

    assert resp.status_code == 200
    detail = resp.json()
    assert detail["employeeId"] == "EMP001"
    assert [s["location"] for s in detail["scanHistory"]] == ["Main Gate"]


def test_get_unknown_worker_is_404(client):
    resp = client.get(f"/api/workers/{uuid.uuid4()}")

    assert resp.status_code == 404
    assert resp.json() == {"error": "Worker not found", "details": None}


def test_update_worker(client, make_worker):
    worker = make_worker()

    resp = client.put(f"/api/workers/{worker['id']}", json={"status": "ACTIVE", "department": "Operations", "name": ""})

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ACTIVE"
    assert body["department"] == "Operations"
    assert body["name"] == "John Smith"


def test_delete_worker_cascades(client, make_worker, db):
    worker = make_worker()
    client.post("/api/documents", json={"name": "Licence.pdf", "type": "LICENSE", "workerId": worker["id"]})
    client.post("/api/scanner", json={"workerId": worker["id"], "status": "SUCCESS"})

    resp = client.delete(f"/api/workers/{worker['id']}")

    assert resp.status_code == 200
    assert resp.json() == {"message": "Worker deleted successfully"}
    assert db.query(Worker).count() == 0
    assert db.query(Document).count() == 0
    assert db.query(ScanRecord).count() == 0


def test_request_id_header_is_echoed(client):
    resp = client.get("/api/workers", headers={"X-Request-ID": "abc-123"})

    assert resp.headers["X-Request-ID"] == "abc-123"


def test_mine_pass_png(client, make_worker):
    worker = make_worker()

    resp = client.get(f"/api/workers/{worker['id']}/pass", params={"size": 128})

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "image/png"
    assert resp.content[:8] == b"\x89PNG\r\n\x1a\n"
    assert client.get(f"/api/workers/{uuid.uuid4()}/pass").status_code == 404


def test_mine_pass_payload_round_trips_through_scanner(client, make_worker, db):
    worker = make_worker()
    row = db.get(Worker, uuid.UUID(worker["id"]))
    payload = mine_pass_payload(row, timestamp_ms=1700000000000)

    assert json.loads(payload) == {
        "id": worker["id"],
        "name": "John Smith",
        "employeeId": "EMP001",
        "status": "PENDING",
        "timestamp": 1700000000000,
    }

    resp = client.post("/api/scanner", json={"workerId": worker["id"], "status": "SUCCESS", "qrData": payload})
    assert resp.json()["qrData"] == payload


def test_update_worker_ignores_empty_employee_id(client, make_worker):
    worker = make_worker()

    cleared = client.put(f"/api/workers/{worker['id']}", json={"employeeId": None, "role": "Driller"})
    assert cleared.status_code == 200
    assert cleared.json()["employeeId"] == "EMP001"
    assert cleared.json()["role"] == "Driller"

    renamed = client.put(f"/api/workers/{worker['id']}", json={"employeeId": "EMP009"})
    assert renamed.json()["employeeId"] == "EMP009"


def test_update_worker_to_taken_employee_id_conflicts(client, make_worker):
    make_worker(employee_id="EMP001")
    other = make_worker(employee_id="EMP002", name="Sarah Johnson")

    resp = client.put(f"/api/workers/{other['id']}", json={"employeeId": "EMP001"})

    assert resp.status_code == 409
    assert resp.json()["error"] == "Worker with this employee ID already exists"
