import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from feedback360.core.access import require_employee
from feedback360.core.cycles import require_active_cycle
from feedback360.core.security import get_current_user
from feedback360.core.upsert import upsert_for_employee_cycle
from feedback360.db.session import get_db
from feedback360.models.know_about_me import KAM_FIELDS, KnowAboutMe
from feedback360.models.user import User
from feedback360.schemas.know_about_me import KnowAboutMeIn, KnowAboutMeOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["know-about-me"])


@router.get("/know-about-me", response_model=KnowAboutMeOut | None)
def get_know_about_me(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    employee = require_employee(db, current_user)
    active = require_active_cycle(db)

    kam = (
        db.query(KnowAboutMe)
        .filter(KnowAboutMe.employee_id == employee.id, KnowAboutMe.appraisal_cycle_id == active.id)
        .one_or_none()
    )
    return KnowAboutMeOut.model_validate(kam) if kam else None


@router.post("/know-about-me", response_model=KnowAboutMeOut)
def save_know_about_me(
    payload: KnowAboutMeIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create or overwrite the caller's self-assessment for the active cycle."""
    employee = require_employee(db, current_user)
    active = require_active_cycle(db)

    values = payload.model_dump(include=set(KAM_FIELDS))
    kam = upsert_for_employee_cycle(db, KnowAboutMe, employee.id, active.id, values, KAM_FIELDS)
    db.commit()

    logger.info("Know About Me saved", extra={"employee_id": str(employee.id), "cycle_id": str(active.id)})
    return KnowAboutMeOut.model_validate(kam)
