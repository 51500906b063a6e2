"""
Seed the local database with sample workers, documents, contractors,
equipment, skills and a training program.

Usage:
  python scripts/seed_test_data.py

This script is idempotent: running it multiple times will upsert the same
records based on unique fields (employee_id for workers, company_name for
contractors, registration_id for equipment, name for skills and programs).
"""

from datetime import datetime, timedelta

from kestrel.db import SessionLocal, Base, engine
from kestrel.models.models import (
    Worker,
    Document,
    ScanRecord,
    Contractor,
    ContractorCertification,
    Equipment,
    Skill,
    WorkerSkill,
    TrainingProgram,
    TrainingEnrollment,
)
from kestrel.services.expiry import resolve_status


def _apply(row, fields: dict) -> None:
    for k, v in fields.items():
        if hasattr(row, k):
            setattr(row, k, v)


def ensure_worker(session, employee_id: str, name: str, role: str, **kwargs) -> Worker:
    worker = session.query(Worker).filter(Worker.employee_id == employee_id).first()
    if worker:
        worker.name = name
        worker.role = role
        _apply(worker, kwargs)
        session.add(worker)
        session.flush()
        return worker
    worker = Worker(employee_id=employee_id, name=name, role=role, **{k: v for k, v in kwargs.items() if hasattr(Worker, k)})
    session.add(worker)
    session.flush()
    return worker


def ensure_document(session, name: str, type_: str, worker: Worker | None = None, **kwargs) -> Document:
    q = session.query(Document).filter(Document.name == name)
    q = q.filter(Document.worker_id == worker.id) if worker else q.filter(Document.worker_id.is_(None))
    doc = q.first()
    if not doc:
        doc = Document(name=name, worker_id=worker.id if worker else None)
    doc.type = type_
    _apply(doc, kwargs)
    doc.status = resolve_status(doc.expiry_date).value
    session.add(doc)
    session.flush()
    return doc


def ensure_contractor(session, company_name: str, contact_name: str, email: str, **kwargs) -> Contractor:
    row = session.query(Contractor).filter(Contractor.company_name == company_name).first()
    if not row:
        row = Contractor(company_name=company_name, contact_name=contact_name, email=email)
    row.contact_name = contact_name
    row.email = email
    _apply(row, kwargs)
    session.add(row)
    session.flush()
    return row


def ensure_certification(session, contractor: Contractor, name: str, **kwargs) -> ContractorCertification:
    row = (
        session.query(ContractorCertification)
        .filter(ContractorCertification.contractor_id == contractor.id, ContractorCertification.name == name)
        .first()
    )
    if not row:
        row = ContractorCertification(contractor_id=contractor.id, name=name)
    _apply(row, kwargs)
    session.add(row)
    session.flush()
    return row


def ensure_equipment(session, registration_id: str, name: str, type_: str, **kwargs) -> Equipment:
    row = session.query(Equipment).filter(Equipment.registration_id == registration_id).first()
    if not row:
        row = Equipment(registration_id=registration_id, name=name, type=type_)
    row.name = name
    row.type = type_
    _apply(row, kwargs)
    session.add(row)
    session.flush()
    return row


def ensure_skill(session, name: str, category: str, **kwargs) -> Skill:
    row = session.query(Skill).filter(Skill.name == name).first()
    if not row:
        row = Skill(name=name, category=category)
    row.category = category
    _apply(row, kwargs)
    session.add(row)
    session.flush()
    return row


def ensure_worker_skill(session, worker: Worker, skill: Skill, **kwargs) -> WorkerSkill:
    row = (
        session.query(WorkerSkill)
        .filter(WorkerSkill.worker_id == worker.id, WorkerSkill.skill_id == skill.id)
        .first()
    )
    if not row:
        row = WorkerSkill(worker_id=worker.id, skill_id=skill.id)
    _apply(row, kwargs)
    session.add(row)
    session.flush()
    return row


def ensure_program(session, name: str, category: str, **kwargs) -> TrainingProgram:
    row = session.query(TrainingProgram).filter(TrainingProgram.name == name).first()
    if not row:
        row = TrainingProgram(name=name, category=category)
    row.category = category
    _apply(row, kwargs)
    session.add(row)
    session.flush()
    return row


def ensure_enrollment(session, program: TrainingProgram, worker: Worker, **kwargs) -> TrainingEnrollment:
    row = (
        session.query(TrainingEnrollment)
        .filter(TrainingEnrollment.training_program_id == program.id, TrainingEnrollment.worker_id == worker.id)
        .first()
    )
    if not row:
        row = TrainingEnrollment(training_program_id=program.id, participant_type="WORKER", worker_id=worker.id)
    _apply(row, kwargs)
    session.add(row)
    session.flush()
    return row


def main() -> None:
    # Ensure tables exist (safe for SQLite dev)
    Base.metadata.create_all(bind=engine)

    now = datetime.utcnow()
    session = SessionLocal()
    try:
        # Workers
        john = ensure_worker(
            session, "EMP001", "John Smith", "Site Supervisor",
            email="john.smith@kestrelmining.com", phone="+61 400 123 456",
            status="ACTIVE", department="Operations", last_seen=now,
        )
        sarah = ensure_worker(
            session, "EMP002", "Sarah Johnson", "Safety Officer",
            email="sarah.johnson@kestrelmining.com", phone="+61 400 123 457",
            status="ACTIVE", department="Safety", last_seen=now - timedelta(minutes=30),
        )
        mike = ensure_worker(
            session, "EMP003", "Mike Wilson", "Equipment Operator",
            email="mike.wilson@kestrelmining.com", phone="+61 400 123 458",
            status="PENDING", department="Operations", last_seen=now - timedelta(days=1),
        )
        ensure_worker(
            session, "EMP004", "Lisa Chen", "Training Coordinator",
            email="lisa.chen@kestrelmining.com",
            status="INACTIVE", department="HR", last_seen=now - timedelta(days=3),
        )

        # Documents (expiries relative to today so every status is represented)
        ensure_document(
            session, "Mining Safety Certificate.pdf", "CERTIFICATION", john,
            description="Annual mining safety certification",
            file_name="mining-safety-cert.pdf", file_size=2048576,
            expiry_date=now + timedelta(days=200),
        )
        ensure_document(
            session, "Medical Clearance.pdf", "MEDICAL", john,
            description="Annual medical fitness assessment",
            file_name="medical-clearance.pdf", file_size=1024000,
            expiry_date=now + timedelta(days=120),
        )
        ensure_document(
            session, "Driver License.jpg", "ID", sarah,
            description="Heavy vehicle driver license",
            file_name="driver-license.jpg", file_size=1536000,
            expiry_date=now + timedelta(days=14),
        )
        ensure_document(
            session, "First Aid Training.pdf", "TRAINING", mike,
            description="Basic first aid and CPR training",
            file_name="first-aid-training.pdf", file_size=3145728,
            expiry_date=now - timedelta(days=45),
        )
        ensure_document(
            session, "Site Induction Template.pdf", "OTHER",
            description="Standard site induction template",
            file_name="site-induction-template.pdf", file_size=5242880,
        )

        # Scan history is append-only; only seed it once
        if not session.query(ScanRecord).first():
            session.add_all([
                ScanRecord(worker_id=john.id, status="SUCCESS", location="Main Gate", scanned_at=now - timedelta(hours=2)),
                ScanRecord(worker_id=sarah.id, status="SUCCESS", location="Main Gate", scanned_at=now - timedelta(minutes=30)),
                ScanRecord(worker_id=mike.id, status="ERROR", location="Main Gate", scanned_at=now - timedelta(days=1)),
            ])
            session.flush()

        # Contractors
        elite = ensure_contractor(
            session, "Elite Mining Solutions", "David Thompson", "david@elitemining.com.au",
            abn="12345678901", phone="+61 8 9876 5432",
            address="123 Industrial Drive, Perth WA 6000", status="ACTIVE",
            hourly_rate=85.50, daily_rate=680.00, emergency_rate=120.00,
            skills=["Heavy Equipment Operation", "Site Safety", "Excavator Operation"],
            is_available=True, max_hours_per_week=50,
        )
        outback = ensure_contractor(
            session, "Outback Plant Hire", "Michelle Roberts", "michelle@outbackplant.com.au",
            abn="98765432109", phone="+61 8 9123 4567",
            address="456 Mining Road, Kalgoorlie WA 6430", status="ACTIVE",
            hourly_rate=95.00, daily_rate=760.00, emergency_rate=140.00,
            skills=["Crane Operation", "Equipment Maintenance", "Site Management"],
            is_available=False, available_from=now + timedelta(days=30), max_hours_per_week=45,
        )
        ensure_contractor(
            session, "Professional Mining Services", "Robert Chen", "rob@promining.com.au",
            phone="+61 8 9555 1234", status="PENDING",
            hourly_rate=75.00, daily_rate=600.00,
            skills=["Drill Operation", "Safety Training", "First Aid"],
            is_available=True, max_hours_per_week=40,
        )
        ensure_certification(
            session, elite, "Heavy Equipment Operator License",
            issuer="Department of Mines WA", certificate_number="HEO-2024-001",
            issue_date=now - timedelta(days=340), expiry_date=now + timedelta(days=25),
        )
        ensure_certification(
            session, outback, "High Risk Work License - Crane",
            issuer="WorkSafe WA", certificate_number="HRWL-CR-2023-456",
            issue_date=now - timedelta(days=600), expiry_date=now + timedelta(days=500),
        )

        # Equipment
        ensure_equipment(
            session, "EXC-001", "CAT 320D Excavator", "EXCAVATOR",
            model="320D", serial_number="CAT320D001", status="AVAILABLE", is_available=True,
            current_location="Site A - Main Pit", current_km=15420, current_hours=1840.5,
        )
        ensure_equipment(
            session, "DT-001", "Liebherr T 264 Dump Truck", "DUMP_TRUCK",
            model="T 264", serial_number="LIE264001", status="AVAILABLE", is_available=True,
            current_location="Site A - Haul Road", current_km=48210, current_hours=6120.0,
        )

        # Skills
        excavator = ensure_skill(
            session, "Excavator Operation", "OPERATIONAL",
            level="INTERMEDIATE", requires_certification=True,
            certification_authority="Department of Mines WA", validity_period=36,
        )
        first_aid = ensure_skill(session, "First Aid", "SAFETY", requires_certification=True, validity_period=36)
        ensure_worker_skill(
            session, mike, excavator,
            level="INTERMEDIATE", experience_years=4, verified=True, verified_by="John Smith",
            verified_at=now - timedelta(days=60), certified=True,
            certification_date=now - timedelta(days=400), expiry_date=now + timedelta(days=700),
        )
        ensure_worker_skill(
            session, sarah, first_aid,
            level="ADVANCED", experience_years=8, certified=True,
            certification_date=now - timedelta(days=1080), expiry_date=now + timedelta(days=10),
        )

        # Training
        induction = ensure_program(
            session, "Site Safety Induction", "INDUCTION",
            description="Mandatory induction for all personnel entering site",
            provider="Kestrel Mining", duration=4, validity_period=12,
            is_recurring=True, renewal_required=True, assessment_type="WRITTEN", passing_score=80,
        )
        ensure_enrollment(session, induction, mike, priority="HIGH", deadline=now + timedelta(days=7))

        session.commit()
        print("Seed completed: workers, documents, contractors, equipment, skills and training upserted.")
    finally:
        session.close()


if __name__ == "__main__":
    main()
