"""Validation of WORKER/CONTRACTOR tagged references (usage operators, trainees)."""
import uuid
from typing import Optional

from sqlalchemy.orm import Session

from ..errors import NotFoundError, ValidationError
from ..models.models import Contractor, Worker
from ..schemas.common import ParticipantType


def check_participant(
    db: Session,
    participant_type: Optional[ParticipantType],
    worker_id: Optional[uuid.UUID],
    contractor_id: Optional[uuid.UUID],
) -> None:
    """
    Exactly one of worker_id / contractor_id must be given, matching the
    tag, and it must exist.
    """
    if participant_type is None:
        raise ValidationError("Missing required field: operatorType / participantType")
    if participant_type == ParticipantType.WORKER:
        if not worker_id or contractor_id:
            raise ValidationError("WORKER requires workerId and no contractorId")
        if db.get(Worker, worker_id) is None:
            raise NotFoundError("Worker not found")
    else:
        if not contractor_id or worker_id:
            raise ValidationError("CONTRACTOR requires contractorId and no workerId")
        if db.get(Contractor, contractor_id) is None:
            raise NotFoundError("Contractor not found")
