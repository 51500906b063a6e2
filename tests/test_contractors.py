import uuid
from datetime import datetime, timedelta


def _contractor(client, company, skills, **extra):
    body = {
        "companyName": company,
        "contactName": "David Thompson",
        "email": f"ops@{company.lower().replace(' ', '')}.com.au",
        "skills": skills,
        **extra,
    }
    resp = client.post("/api/contractors", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_create_contractor_defaults(client):
    created = _contractor(client, "Elite Mining Solutions", ["Site Safety"])

    assert created["status"] == "ACTIVE"
    assert created["isAvailable"] is True
    assert created["skills"] == ["Site Safety"]
    assert created["certifications"] == []


def test_create_contractor_missing_fields(client):
    resp = client.post("/api/contractors", json={"companyName": "No Contact"})

    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing required fields: companyName, contactName, email"


def test_certification_status_is_derived(client):
    soon = (datetime.utcnow() + timedelta(days=20)).replace(microsecond=0).isoformat()
    lapsed = (datetime.utcnow() - timedelta(days=20)).replace(microsecond=0).isoformat()

    created = _contractor(client, "Outback Plant Hire", [], certifications=[
        {"name": "High Risk Work License - Crane", "expiryDate": soon},
        {"name": "Heavy Equipment Operator License", "expiryDate": lapsed},
    ])

    statuses = {c["name"]: c["status"] for c in created["certifications"]}
    assert statuses == {
        "High Risk Work License - Crane": "EXPIRING",
        "Heavy Equipment Operator License": "EXPIRED",
    }


def test_available_flag_only_on_true(client):
    _contractor(client, "Alpha", [], isAvailable=True)
    _contractor(client, "Bravo", [], isAvailable=False)

    assert len(client.get("/api/contractors", params={"available": "true"}).json()) == 1
    assert len(client.get("/api/contractors", params={"available": "false"}).json()) == 2
    assert len(client.get("/api/contractors").json()) == 2


def test_skills_match_any(client):
    _contractor(client, "Alpha", ["Crane Operation", "Site Management"])
    _contractor(client, "Bravo", ["Drill Operation", "First Aid"])
    _contractor(client, "Charlie", ["Excavator Operation"])

    names = [c["companyName"] for c in client.get("/api/contractors", params={"skills": "First Aid,Crane Operation"}).json()]

    assert names == ["Alpha", "Bravo"]


def test_search_and_status(client):
    _contractor(client, "Professional Mining Services", [], status="PENDING")
    _contractor(client, "Elite Mining Solutions", [])

    pending = client.get("/api/contractors", params={"status": "PENDING"}).json()
    assert [c["companyName"] for c in pending] == ["Professional Mining Services"]

    found = client.get("/api/contractors", params={"search": "elite"}).json()
    assert [c["companyName"] for c in found] == ["Elite Mining Solutions"]


def test_update_and_delete(client):
    created = _contractor(client, "Alpha", [])

    updated = client.put(f"/api/contractors/{created['id']}", json={"isAvailable": False, "skills": ["Blasting"]}).json()
    assert updated["isAvailable"] is False
    assert updated["skills"] == ["Blasting"]

    assert client.delete(f"/api/contractors/{created['id']}").status_code == 200
    assert client.get(f"/api/contractors/{created['id']}").status_code == 404


def test_unknown_contractor_is_404(client):
    assert client.get(f"/api/contractors/{uuid.uuid4()}").status_code == 404
