import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    String,
    DateTime,
    Boolean,
    ForeignKey,
    Integer,
    Float,
    Numeric,
    JSON,
    Text,
    Index,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship, Mapped, mapped_column

from ..db import Base


def uuid_pk() -> Mapped[uuid.UUID]:
    return mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)


# =====================
# Workforce
# =====================

class Worker(Base):
    __tablename__ = "workers"

    id: Mapped[uuid.UUID] = uuid_pk()
    employee_id: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255))
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    role: Mapped[str] = mapped_column(String(100), nullable=False)
    department: Mapped[Optional[str]] = mapped_column(String(100))
    status: Mapped[str] = mapped_column(String(50), default="PENDING", index=True)  # PENDING|ACTIVE|INACTIVE|SUSPENDED
    last_seen: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)

    documents = relationship("Document", back_populates="worker", cascade="all, delete-orphan", order_by="Document.uploaded_at.desc()")
    scan_history = relationship("ScanRecord", back_populates="worker", cascade="all, delete-orphan", order_by="ScanRecord.scanned_at.desc()")
    skills = relationship("WorkerSkill", back_populates="worker", cascade="all, delete-orphan")


class Document(Base):
    """Credential documents: licences, certifications, medicals, inductions"""
    __tablename__ = "documents"

    id: Mapped[uuid.UUID] = uuid_pk()
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)  # ID|LICENSE|CERTIFICATION|TRAINING|MEDICAL|INDUCTION|OTHER
    # Default computed at upload time only; readers recompute from expiry_date
    status: Mapped[str] = mapped_column(String(50), default="VALID", index=True)  # VALID|EXPIRING|EXPIRED
    description: Mapped[Optional[str]] = mapped_column(Text)
    worker_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("workers.id", ondelete="CASCADE"), index=True)
    expiry_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), index=True)
    file_name: Mapped[Optional[str]] = mapped_column(String(255))
    file_size: Mapped[Optional[int]] = mapped_column(Integer)
    uploaded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)

    worker = relationship("Worker", back_populates="documents")


class ScanRecord(Base):
    """Append-only audit trail of QR / badge scans"""
    __tablename__ = "scan_history"

    id: Mapped[uuid.UUID] = uuid_pk()
    worker_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("workers.id", ondelete="CASCADE"), index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)  # SUCCESS|ERROR|NOT_FOUND
    location: Mapped[Optional[str]] = mapped_column(String(255))
    qr_data: Mapped[Optional[str]] = mapped_column(Text)  # Raw scanned payload
    scanned_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, nullable=False, index=True)

    worker = relationship("Worker", back_populates="scan_history")

    __table_args__ = (
        Index('idx_scan_status_time', 'status', 'scanned_at'),
    )


# =====================
# Contractors
# =====================

class Contractor(Base):
    __tablename__ = "contractors"

    id: Mapped[uuid.UUID] = uuid_pk()
    company_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    abn: Mapped[Optional[str]] = mapped_column(String(20))
    contact_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    address: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(50), default="ACTIVE", index=True)  # ACTIVE|INACTIVE|SUSPENDED|PENDING
    hourly_rate: Mapped[Optional[float]] = mapped_column(Numeric(10, 2))
    daily_rate: Mapped[Optional[float]] = mapped_column(Numeric(10, 2))
    emergency_rate: Mapped[Optional[float]] = mapped_column(Numeric(10, 2))
    skills: Mapped[Optional[list]] = mapped_column(JSON, default=list)  # Array of skill names
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    available_from: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    available_to: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    max_hours_per_week: Mapped[Optional[int]] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)

    certifications = relationship(
        "ContractorCertification",
        back_populates="contractor",
        cascade="all, delete-orphan",
        order_by="ContractorCertification.expiry_date.asc()",
    )


class ContractorCertification(Base):
    __tablename__ = "contractor_certifications"

    id: Mapped[uuid.UUID] = uuid_pk()
    contractor_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("contractors.id", ondelete="CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    issuer: Mapped[Optional[str]] = mapped_column(String(255))
    certificate_number: Mapped[Optional[str]] = mapped_column(String(100))
    issue_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    expiry_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)

    contractor = relationship("Contractor", back_populates="certifications")


# =====================
# Equipment
# =====================

class Equipment(Base):
    """Mobile plant and light vehicles"""
    __tablename__ = "equipment"

    id: Mapped[uuid.UUID] = uuid_pk()
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)  # EXCAVATOR|DUMP_TRUCK|DRILL_RIG|LOADER|DOZER|GRADER|LIGHT_VEHICLE|OTHER
    model: Mapped[Optional[str]] = mapped_column(String(255))
    serial_number: Mapped[Optional[str]] = mapped_column(String(255), index=True)
    registration_id: Mapped[Optional[str]] = mapped_column(String(100), index=True)
    status: Mapped[str] = mapped_column(String(50), default="AVAILABLE", index=True)  # AVAILABLE|IN_USE|MAINTENANCE|OUT_OF_SERVICE|RETIRED
    is_available: Mapped[bool] = mapped_column(Boolean, default=True)
    current_location: Mapped[Optional[str]] = mapped_column(String(255))
    current_km: Mapped[Optional[float]] = mapped_column(Float)
    current_hours: Mapped[Optional[float]] = mapped_column(Float)
    last_service_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    next_service_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)

    usage = relationship("EquipmentUsage", back_populates="equipment", cascade="all, delete-orphan", order_by="EquipmentUsage.start_time.desc()")

    __table_args__ = (
        Index('idx_equipment_type_status', 'type', 'status'),
    )


class EquipmentUsage(Base):
    """Operating sessions; end_time is null while the session is active"""
    __tablename__ = "equipment_usage"

    id: Mapped[uuid.UUID] = uuid_pk()
    equipment_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("equipment.id", ondelete="CASCADE"), nullable=False, index=True)
    operator_type: Mapped[str] = mapped_column(String(20), nullable=False)  # WORKER|CONTRACTOR
    worker_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("workers.id", ondelete="SET NULL"), index=True)
    contractor_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("contractors.id", ondelete="SET NULL"), index=True)
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    end_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), index=True)
    location: Mapped[Optional[str]] = mapped_column(String(255))
    purpose: Mapped[Optional[str]] = mapped_column(String(255))
    start_km: Mapped[Optional[float]] = mapped_column(Float)
    end_km: Mapped[Optional[float]] = mapped_column(Float)
    start_hours: Mapped[Optional[float]] = mapped_column(Float)
    end_hours: Mapped[Optional[float]] = mapped_column(Float)
    fuel_used: Mapped[Optional[float]] = mapped_column(Float)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)

    equipment = relationship("Equipment", back_populates="usage")
    worker = relationship("Worker")
    contractor = relationship("Contractor")

    __table_args__ = (
        Index('idx_usage_equipment_active', 'equipment_id', 'end_time'),
    )


# =====================
# Skills
# =====================

class Skill(Base):
    __tablename__ = "skills"

    id: Mapped[uuid.UUID] = uuid_pk()
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    category: Mapped[str] = mapped_column(String(50), nullable=False, index=True)  # TECHNICAL|SAFETY|OPERATIONAL|LEADERSHIP|COMPLIANCE|OTHER
    level: Mapped[str] = mapped_column(String(50), default="BASIC", index=True)  # BASIC|INTERMEDIATE|ADVANCED|EXPERT
    requires_certification: Mapped[bool] = mapped_column(Boolean, default=False)
    certification_authority: Mapped[Optional[str]] = mapped_column(String(255))
    validity_period: Mapped[Optional[int]] = mapped_column(Integer)  # Months
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)

    worker_skills = relationship("WorkerSkill", back_populates="skill", cascade="all, delete-orphan")


class WorkerSkill(Base):
    __tablename__ = "worker_skills"

    id: Mapped[uuid.UUID] = uuid_pk()
    worker_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("workers.id", ondelete="CASCADE"), nullable=False, index=True)
    skill_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("skills.id", ondelete="CASCADE"), nullable=False, index=True)
    level: Mapped[str] = mapped_column(String(50), default="BASIC")
    experience_years: Mapped[Optional[float]] = mapped_column(Float)
    verified: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    verified_by: Mapped[Optional[str]] = mapped_column(String(255))
    verified_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    certified: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    certification_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    expiry_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    certification_number: Mapped[Optional[str]] = mapped_column(String(100))
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)

    worker = relationship("Worker", back_populates="skills")
    skill = relationship("Skill", back_populates="worker_skills")


# =====================
# Training
# =====================

class TrainingProgram(Base):
    __tablename__ = "training_programs"

    id: Mapped[uuid.UUID] = uuid_pk()
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    category: Mapped[str] = mapped_column(String(50), nullable=False, index=True)  # SAFETY|TECHNICAL|COMPLIANCE|LEADERSHIP|INDUCTION|OTHER
    provider: Mapped[Optional[str]] = mapped_column(String(255))
    duration: Mapped[Optional[float]] = mapped_column(Float)  # Hours
    validity_period: Mapped[Optional[int]] = mapped_column(Integer)  # Months
    is_recurring: Mapped[bool] = mapped_column(Boolean, default=False)
    renewal_required: Mapped[bool] = mapped_column(Boolean, default=False)
    delivery_method: Mapped[str] = mapped_column(String(50), default="IN_PERSON", index=True)  # IN_PERSON|ONLINE|BLENDED
    assessment_type: Mapped[str] = mapped_column(String(50), default="PRACTICAL")  # PRACTICAL|WRITTEN|ONLINE|NONE
    passing_score: Mapped[Optional[int]] = mapped_column(Integer)
    cost: Mapped[Optional[float]] = mapped_column(Numeric(10, 2))
    max_participants: Mapped[Optional[int]] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow)

    enrollments = relationship("TrainingEnrollment", back_populates="training_program", cascade="all, delete-orphan")


class TrainingEnrollment(Base):
    __tablename__ = "training_enrollments"

    id: Mapped[uuid.UUID] = uuid_pk()
    training_program_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("training_programs.id", ondelete="CASCADE"), nullable=False, index=True)
    participant_type: Mapped[str] = mapped_column(String(20), nullable=False)  # WORKER|CONTRACTOR
    worker_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("workers.id", ondelete="CASCADE"), index=True)
    contractor_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), ForeignKey("contractors.id", ondelete="CASCADE"), index=True)
    status: Mapped[str] = mapped_column(String(50), default="ENROLLED", index=True)  # ENROLLED|IN_PROGRESS|COMPLETED|FAILED|CANCELLED
    priority: Mapped[str] = mapped_column(String(20), default="MEDIUM", index=True)  # LOW|MEDIUM|HIGH|CRITICAL
    deadline: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    progress_percent: Mapped[int] = mapped_column(Integer, default=0)
    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    final_score: Mapped[Optional[float]] = mapped_column(Float)
    passed: Mapped[Optional[bool]] = mapped_column(Boolean)
    certificate_issued: Mapped[bool] = mapped_column(Boolean, default=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    enrolled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)

    training_program = relationship("TrainingProgram", back_populates="enrollments")
    worker = relationship("Worker")
    contractor = relationship("Contractor")
