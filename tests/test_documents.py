import uuid
from datetime import datetime, timedelta

from kestrel.models.models import Document


def _iso(dt):
    return dt.replace(microsecond=0).isoformat()


def test_create_document_computes_status(client, make_worker):
    worker = make_worker()
    expiry = datetime.utcnow() + timedelta(days=10)

    resp = client.post("/api/documents", json={
        "name": "Driver Licence.jpg",
        "type": "LICENSE",
        "workerId": worker["id"],
        "expiryDate": _iso(expiry),
    })

    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "EXPIRING"
    assert body["worker"]["employeeId"] == "EMP001"


def test_create_document_without_expiry_is_valid(client):
    resp = client.post("/api/documents", json={"name": "Site Induction Template.pdf", "type": "OTHER"})

    assert resp.status_code == 201
    assert resp.json()["status"] == "VALID"
    assert resp.json()["workerId"] is None


def test_create_document_missing_fields(client, db):
    resp = client.post("/api/documents", json={"name": "Nameless type"})

    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing required fields: name, type"
    assert db.query(Document).count() == 0


def test_create_document_for_unknown_worker(client, db):
    resp = client.post("/api/documents", json={"name": "x.pdf", "type": "ID", "workerId": str(uuid.uuid4())})

    assert resp.status_code == 404
    assert db.query(Document).count() == 0


def test_status_is_recomputed_on_read(client, db):
    # Stored as VALID a long time ago; it has since expired
    doc = Document(
        name="First Aid Training.pdf",
        type="TRAINING",
        status="VALID",
        expiry_date=datetime.utcnow() - timedelta(days=3),
    )
    db.add(doc)
    db.commit()

    detail = client.get(f"/api/documents/{doc.id}").json()
    assert detail["status"] == "EXPIRED"

    listed = client.get("/api/documents").json()
    assert [d["status"] for d in listed["documents"]] == ["EXPIRED"]

    # The stored default is left alone by reads
    db.refresh(doc)
    assert doc.status == "VALID"


def test_status_filter_uses_recomputed_status(client, db):
    now = datetime.utcnow()
    db.add_all([
        Document(name="stale.pdf", type="MEDICAL", status="VALID", expiry_date=now - timedelta(days=1)),
        Document(name="soon.pdf", type="MEDICAL", status="VALID", expiry_date=now + timedelta(days=5)),
        Document(name="later.pdf", type="MEDICAL", status="EXPIRED", expiry_date=now + timedelta(days=90)),
    ])
    db.commit()

    expired = client.get("/api/documents", params={"status": "EXPIRED"}).json()
    assert [d["name"] for d in expired["documents"]] == ["stale.pdf"]

    valid = client.get("/api/documents", params={"status": "VALID"}).json()
    assert [d["name"] for d in valid["documents"]] == ["later.pdf"]
    assert valid["count"] == 1


def test_list_filters(client, make_worker):
    worker = make_worker()
    client.post("/api/documents", json={"name": "Medical Clearance.pdf", "type": "MEDICAL", "workerId": worker["id"]})
    client.post("/api/documents", json={"name": "Template.pdf", "type": "OTHER", "description": "site medical form"})

    by_type = client.get("/api/documents", params={"type": "MEDICAL"}).json()
    assert [d["name"] for d in by_type["documents"]] == ["Medical Clearance.pdf"]

    by_worker = client.get("/api/documents", params={"workerId": worker["id"]}).json()
    assert by_worker["count"] == 1

    by_search = client.get("/api/documents", params={"search": "MEDICAL"}).json()
    assert by_search["count"] == 2


def test_update_document_recomputes_status(client):
    created = client.post("/api/documents", json={"name": "Permit.pdf", "type": "CERTIFICATION"}).json()
    expiry = datetime.utcnow() - timedelta(days=2)

    resp = client.put(f"/api/documents/{created['id']}", json={"expiryDate": _iso(expiry), "name": None})

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "EXPIRED"
    assert body["name"] == "Permit.pdf"


def test_delete_document(client, db):
    created = client.post("/api/documents", json={"name": "Old.pdf", "type": "OTHER"}).json()

    resp = client.delete(f"/api/documents/{created['id']}")

    assert resp.status_code == 200
    assert db.query(Document).count() == 0
    assert client.get(f"/api/documents/{created['id']}").status_code == 404
