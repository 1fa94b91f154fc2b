import logging

from sqlalchemy.orm import Session

from feedback360.core.errors import StateConflict
from feedback360.models.appraisal_cycle import AppraisalCycle

logger = logging.getLogger(__name__)


def get_active_cycle(db: Session) -> AppraisalCycle | None:
    return db.query(AppraisalCycle).filter(AppraisalCycle.is_active.is_(True)).first()


def require_active_cycle(db: Session) -> AppraisalCycle:
    cycle = get_active_cycle(db)
    if not cycle:
        raise StateConflict("No active appraisal cycle", "no_active_cycle")
    return cycle


def activate_cycle(db: Session, cycle: AppraisalCycle) -> AppraisalCycle:
    """
    Make ``cycle`` the only active cycle. Other cycles are switched off and
    flushed first so the single-active index never sees two rows; the caller
    commits both changes together.
    """
    others = (
        db.query(AppraisalCycle)
        .filter(AppraisalCycle.is_active.is_(True), AppraisalCycle.id != cycle.id)
        .all()
    )
    for other in others:
        other.is_active = False
    db.flush()

    cycle.is_active = True
    db.flush()

    logger.info(
        "Appraisal cycle activated",
        extra={"cycle_id": str(cycle.id), "deactivated": [str(o.id) for o in others]},
    )
    return cycle
