import logging
from typing import Any

from fastapi import APIRouter, Body, Depends
from pydantic import ValidationError
from sqlalchemy import update
from sqlalchemy.orm import Session

from feedback360.core.access import require_employee
from feedback360.core.cycles import require_active_cycle
from feedback360.core.errors import Forbidden, NotFound, StateConflict, validation_failed_from
from feedback360.core.security import get_current_user
from feedback360.db.session import get_db
from feedback360.models.feedback_request import FeedbackRequest
from feedback360.models.peer_feedback import PeerFeedback
from feedback360.models.user import User
from feedback360.schemas.feedback import FeedbackRequestRef, PeerFeedbackCreate, PeerFeedbackOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["peer-feedback"])


def _already_submitted() -> StateConflict:
    return StateConflict("Feedback has already been submitted", "already_submitted")


@router.post("/peer-feedback", response_model=PeerFeedbackOut)
def submit_peer_feedback(
    body: dict[str, Any] | None = Body(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Fulfil a feedback request assigned to the caller.

    Checks run in a fixed order: caller employee, active cycle, request,
    ownership, cycle match, still pending. Only then is the body validated.
    """
    employee = require_employee(db, current_user)
    active = require_active_cycle(db)

    try:
        ref = FeedbackRequestRef.model_validate(body or {})
    except ValidationError as exc:
        raise validation_failed_from(exc)

    fr = db.get(FeedbackRequest, ref.feedback_request_id)
    if not fr:
        raise NotFound("Feedback request not found")
    if fr.reviewer_employee_id != employee.id:
        raise Forbidden("You are not authorized to submit this feedback", code="not_authorized")
    if fr.appraisal_cycle_id != active.id:
        raise StateConflict("This feedback request is not for the current appraisal cycle", "wrong_cycle")
    if fr.status == "submitted":
        raise _already_submitted()

    try:
        payload = PeerFeedbackCreate.model_validate(body)
    except ValidationError as exc:
        raise validation_failed_from(exc)

    # Flip pending -> submitted first; losing a race shows up as zero rows
    result = db.execute(
        update(FeedbackRequest)
        .where(FeedbackRequest.id == fr.id, FeedbackRequest.status == "pending")
        .values(status="submitted")
    )
    if result.rowcount != 1:
        db.rollback()
        raise _already_submitted()

    fb = PeerFeedback(
        feedback_request_id=fr.id,
        reviewer_id=employee.id,
        target_employee_id=fr.target_employee_id,
        appraisal_cycle_id=active.id,
        technical_skills=payload.technical_skills,
        communication=payload.communication,
        teamwork=payload.teamwork,
        problem_solving=payload.problem_solving,
        leadership=payload.leadership,
        strengths=payload.strengths,
        areas_of_improvement=payload.areas_of_improvement,
        additional_comments=payload.additional_comments or None,
    )
    db.add(fb)
    db.commit()
    db.refresh(fb)

    logger.info(
        "Peer feedback submitted",
        extra={"feedback_request_id": str(fr.id), "reviewer_id": str(employee.id), "cycle_id": str(active.id)},
    )
    return PeerFeedbackOut.model_validate(fb)
