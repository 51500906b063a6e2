import uuid
from typing import Dict, List, Optional

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ..db import get_db
from ..errors import ConflictError, NotFoundError, ValidationError
from ..models.models import Skill, Worker, WorkerSkill
from ..schemas.skills import (
    LevelBreakdown,
    MatrixCell,
    MatrixRow,
    MatrixSummary,
    SkillCategory,
    SkillCreate,
    SkillDistribution,
    SkillFilters,
    SkillLevel,
    SkillMatrixResponse,
    SkillResponse,
    SkillSummary,
    WorkerSkillCreate,
    WorkerSkillFilters,
    WorkerSkillResponse,
)
from ..services.expiry import resolve_status
from ..services.filters import build_predicates, contains, equals, flag, search
from ..services.time_rules import to_naive_utc

router = APIRouter(prefix="/api/skills", tags=["skills"])
logger = structlog.get_logger(__name__)

SEARCH_FIELDS = (Skill.name, Skill.description)


def _holder_counts(db: Session, skill_ids: List[uuid.UUID], verified_only: bool = False) -> Dict[uuid.UUID, int]:
    if not skill_ids:
        return {}
    query = db.query(WorkerSkill.skill_id, func.count(WorkerSkill.id)).filter(WorkerSkill.skill_id.in_(skill_ids))
    if verified_only:
        query = query.filter(WorkerSkill.verified == True)  # noqa: E712
    return {sid: n for sid, n in query.group_by(WorkerSkill.skill_id).all()}


def worker_skill_view(ws: WorkerSkill) -> WorkerSkillResponse:
    return WorkerSkillResponse.model_validate(ws).model_copy(update={"status": resolve_status(ws.expiry_date)})


# ---------- MATRIX ----------
def _matrix_cell(skill: Skill, ws: Optional[WorkerSkill]) -> MatrixCell:
    if ws is None:
        return MatrixCell(skill_id=skill.id, skill_name=skill.name, skill_category=skill.category)
    return MatrixCell(
        skill_id=skill.id,
        skill_name=skill.name,
        skill_category=skill.category,
        level=ws.level,
        experience_years=ws.experience_years,
        verified=ws.verified,
        certified=ws.certified,
        expiry_date=ws.expiry_date,
        status=resolve_status(ws.expiry_date),
    )


@router.get("/matrix", response_model=SkillMatrixResponse)
def skills_matrix(
    department: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    skill_category: Optional[SkillCategory] = Query(None, alias="skillCategory"),
    db: Session = Depends(get_db),
):
    """Active workers against every skill, with per-skill holder counts"""
    predicates = build_predicates(
        equals(Worker.department, department),
        contains(Worker.role, role),
    )
    workers = (
        db.query(Worker)
        .filter(Worker.status == "ACTIVE", *predicates)
        .order_by(Worker.department.asc(), Worker.role.asc(), Worker.name.asc())
        .all()
    )
    skills = (
        db.query(Skill)
        .filter(*build_predicates(equals(Skill.category, skill_category)))
        .order_by(Skill.category.asc(), Skill.name.asc())
        .all()
    )

    held: Dict[uuid.UUID, Dict[uuid.UUID, WorkerSkill]] = {w.id: {} for w in workers}
    if workers and skills:
        rows = (
            db.query(WorkerSkill)
            .filter(
                WorkerSkill.worker_id.in_(list(held)),
                WorkerSkill.skill_id.in_([s.id for s in skills]),
            )
            .all()
        )
        for ws in rows:
            held[ws.worker_id][ws.skill_id] = ws

    matrix = [
        MatrixRow(
            worker_id=w.id,
            worker_name=w.name,
            employee_id=w.employee_id,
            role=w.role,
            department=w.department,
            skills=[_matrix_cell(s, held[w.id].get(s.id)) for s in skills],
        )
        for w in workers
    ]

    distribution = []
    for s in skills:
        holders = [held[w.id][s.id] for w in workers if s.id in held[w.id]]
        distribution.append(SkillDistribution(
            skill_id=s.id,
            skill_name=s.name,
            category=s.category,
            total_workers=len(holders),
            verified=sum(1 for ws in holders if ws.verified),
            certified=sum(1 for ws in holders if ws.certified),
            level_breakdown=LevelBreakdown(**{
                lvl.value.lower(): sum(1 for ws in holders if ws.level == lvl.value) for lvl in SkillLevel
            }),
        ))

    return SkillMatrixResponse(
        matrix=matrix,
        summary=MatrixSummary(
            total_workers=len(workers),
            total_skills=len(skills),
            skills_distribution=distribution,
        ),
        skills=[SkillSummary.model_validate(s) for s in skills],
    )


# ---------- WORKER SKILLS ----------
@router.get("/worker", response_model=List[WorkerSkillResponse])
def list_worker_skills(
    worker_id: Optional[uuid.UUID] = Query(None, alias="workerId"),
    skill_id: Optional[uuid.UUID] = Query(None, alias="skillId"),
    verified: Optional[str] = Query(None),
    certified: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """Worker skill records ordered by worker then skill name"""
    filters = WorkerSkillFilters(worker_id=worker_id, skill_id=skill_id, verified=verified, certified=certified)
    predicates = build_predicates(
        equals(WorkerSkill.worker_id, filters.worker_id),
        equals(WorkerSkill.skill_id, filters.skill_id),
        flag(WorkerSkill.verified, filters.verified),
        flag(WorkerSkill.certified, filters.certified),
    )
    rows = (
        db.query(WorkerSkill)
        .join(Worker, WorkerSkill.worker_id == Worker.id)
        .join(Skill, WorkerSkill.skill_id == Skill.id)
        .options(joinedload(WorkerSkill.worker), joinedload(WorkerSkill.skill))
        .filter(*predicates)
        .order_by(Worker.name.asc(), Skill.name.asc())
        .all()
    )
    return [worker_skill_view(ws) for ws in rows]


@router.post("/worker", response_model=WorkerSkillResponse, status_code=201)
def create_worker_skill(payload: WorkerSkillCreate, db: Session = Depends(get_db)):
    if not payload.worker_id or not payload.skill_id:
        raise ValidationError("Missing required fields: workerId, skillId")
    if db.get(Worker, payload.worker_id) is None:
        raise NotFoundError("Worker not found")
    if db.get(Skill, payload.skill_id) is None:
        raise NotFoundError("Skill not found")

    ws = WorkerSkill(
        worker_id=payload.worker_id,
        skill_id=payload.skill_id,
        level=(payload.level or SkillLevel.BASIC).value,
        experience_years=payload.experience_years,
        verified=bool(payload.verified),
        verified_by=payload.verified_by,
        verified_at=to_naive_utc(payload.verified_at) if payload.verified_at else None,
        certified=bool(payload.certified),
        certification_date=to_naive_utc(payload.certification_date) if payload.certification_date else None,
        expiry_date=to_naive_utc(payload.expiry_date) if payload.expiry_date else None,
        certification_number=payload.certification_number,
        notes=payload.notes,
    )
    db.add(ws)
    db.commit()
    db.refresh(ws)
    logger.info("worker_skill_created", worker_id=str(ws.worker_id), skill_id=str(ws.skill_id))
    return worker_skill_view(ws)


# ---------- SKILLS ----------
@router.get("", response_model=List[SkillResponse])
def list_skills(
    category: Optional[SkillCategory] = Query(None),
    level: Optional[SkillLevel] = Query(None),
    search_term: Optional[str] = Query(None, alias="search"),
    requires_certification: Optional[str] = Query(None, alias="requiresCertification"),
    db: Session = Depends(get_db),
):
    """List skills by name with holder counts"""
    filters = SkillFilters(
        category=category,
        level=level,
        search=search_term,
        requires_certification=requires_certification,
    )
    predicates = build_predicates(
        equals(Skill.category, filters.category),
        equals(Skill.level, filters.level),
        search(SEARCH_FIELDS, filters.search),
        flag(Skill.requires_certification, filters.requires_certification),
    )
    skills = db.query(Skill).filter(*predicates).order_by(Skill.name.asc()).all()
    ids = [s.id for s in skills]
    holders = _holder_counts(db, ids)
    verified = _holder_counts(db, ids, verified_only=True)
    return [
        SkillResponse.model_validate(s).model_copy(update={
            "worker_count": holders.get(s.id, 0),
            "verified_worker_count": verified.get(s.id, 0),
        })
        for s in skills
    ]


@router.post("", response_model=SkillResponse, status_code=201)
def create_skill(payload: SkillCreate, db: Session = Depends(get_db)):
    if not payload.name or not payload.category:
        raise ValidationError("Missing required fields: name, category")
    if db.query(Skill).filter(Skill.name == payload.name).first():
        raise ConflictError("Skill with this name already exists", payload.name)

    skill = Skill(
        name=payload.name,
        description=payload.description,
        category=payload.category.value,
        level=(payload.level or SkillLevel.BASIC).value,
        requires_certification=bool(payload.requires_certification),
        certification_authority=payload.certification_authority,
        validity_period=payload.validity_period,
    )
    db.add(skill)
    db.commit()
    db.refresh(skill)
    logger.info("skill_created", skill_id=str(skill.id), name=skill.name)
    return SkillResponse.model_validate(skill)
