import logging
from typing import Any

from fastapi import APIRouter, Body, Depends
from pydantic import ValidationError
from sqlalchemy.orm import Session

from feedback360.api.employees import employees_with_relations
from feedback360.core.access import MANAGER_ROLES, assert_can_manager_review, get_employee_for_user, require_manager_role
from feedback360.core.clock import utcnow
from feedback360.core.cycles import get_active_cycle, require_active_cycle
from feedback360.core.errors import NotFound, validation_failed_from
from feedback360.core.notifications import Mailer, get_mailer, send_feedback_assignment_email
from feedback360.core.security import ManagerSession, get_current_user, require_manager_session
from feedback360.core.upsert import assert_not_reopening, upsert_for_employee_cycle
from feedback360.db.session import get_db
from feedback360.models.employee import Employee
from feedback360.models.feedback_request import FeedbackRequest
from feedback360.models.manager_review import ManagerReview
from feedback360.models.peer_feedback import PeerFeedback
from feedback360.models.user import User
from feedback360.schemas.employee import EmployeeOut, EmployeeWithRelationsOut
from feedback360.schemas.feedback import (
    AssignFeedbackRequest,
    AssignFeedbackResponse,
    EmailResult,
    FeedbackAssignmentOut,
    FeedbackRequestOut,
)
from feedback360.schemas.review import ManagerReviewCreate, ManagerReviewOut, ReviewTarget, TeamMemberOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["manager"])

MANAGER_REVIEW_FIELDS = (
    "performance_rating",
    "goals_achieved",
    "areas_of_growth",
    "training_needs",
    "promotion_readiness",
    "overall_comments",
    "status",
)


@router.get("/manager/team-members", response_model=list[TeamMemberOut])
def team_members(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Direct reports of the caller with their review for the active cycle."""
    employee = get_employee_for_user(db, current_user)
    if not employee or employee.role not in MANAGER_ROLES:
        return []

    active = get_active_cycle(db)
    members = db.query(Employee).filter(Employee.manager_id == employee.id).order_by(Employee.name).all()

    out = []
    for m in members:
        review = None
        has_feedback = False
        if active:
            review = (
                db.query(ManagerReview)
                .filter(ManagerReview.employee_id == m.id, ManagerReview.appraisal_cycle_id == active.id)
                .one_or_none()
            )
            has_feedback = db.query(
                db.query(PeerFeedback)
                .filter(PeerFeedback.target_employee_id == m.id, PeerFeedback.appraisal_cycle_id == active.id)
                .exists()
            ).scalar()
        out.append(TeamMemberOut(
            employee=EmployeeOut.model_validate(m),
            review=ManagerReviewOut.model_validate(review) if review else None,
            has_peer_feedback=bool(has_feedback),
        ))
    return out


@router.post("/manager-reviews", response_model=ManagerReviewOut)
def submit_manager_review(
    body: dict[str, Any] | None = Body(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    manager = require_manager_role(db, current_user)
    active = require_active_cycle(db)

    try:
        target_ref = ReviewTarget.model_validate(body or {})
    except ValidationError as exc:
        raise validation_failed_from(exc)

    # Ownership before content: a review of someone else's report is 403 whatever it says
    assert_can_manager_review(manager, db.get(Employee, target_ref.employee_id))

    try:
        payload = ManagerReviewCreate.model_validate(body)
    except ValidationError as exc:
        raise validation_failed_from(exc)

    assert_not_reopening(db, ManagerReview, payload.employee_id, active.id, payload.status)

    values = payload.model_dump(include=set(MANAGER_REVIEW_FIELDS))
    values["training_needs"] = payload.training_needs or None
    values["manager_id"] = manager.id
    update_columns = list(MANAGER_REVIEW_FIELDS) + ["manager_id"]
    if payload.status == "completed":
        values["submitted_at"] = utcnow()
        update_columns.append("submitted_at")

    review = upsert_for_employee_cycle(db, ManagerReview, payload.employee_id, active.id, values, update_columns)
    db.commit()

    logger.info(
        "Manager review saved",
        extra={"review_id": str(review.id), "manager_id": str(manager.id), "status": review.status},
    )
    return ManagerReviewOut.model_validate(review)


@router.get("/manager/all-employees", response_model=list[EmployeeWithRelationsOut])
def all_employees(
    db: Session = Depends(get_db),
    _: ManagerSession = Depends(require_manager_session),
):
    return employees_with_relations(db)


@router.post("/manager/assign-feedback", response_model=AssignFeedbackResponse)
def assign_feedback(
    payload: AssignFeedbackRequest,
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
    _: ManagerSession = Depends(require_manager_session),
):
    """
    Ask each reviewer for feedback about the target in the active cycle.

    The target itself, unknown reviewers and pairs already assigned in this
    cycle are skipped. Emails go out after the requests are committed; a
    failed send is reported per reviewer and does not undo the assignment.
    """
    active = require_active_cycle(db)

    target = db.get(Employee, payload.target_employee_id)
    if not target:
        raise NotFound("Target employee not found")

    existing = {
        reviewer_id
        for (reviewer_id,) in db.query(FeedbackRequest.reviewer_employee_id).filter(
            FeedbackRequest.appraisal_cycle_id == active.id,
            FeedbackRequest.target_employee_id == target.id,
        )
    }

    created: list[tuple[FeedbackRequest, Employee]] = []
    seen = set()
    for reviewer_id in payload.reviewer_employee_ids:
        if reviewer_id == target.id or reviewer_id in existing or reviewer_id in seen:
            continue
        seen.add(reviewer_id)

        reviewer = db.get(Employee, reviewer_id)
        if not reviewer:
            continue

        fr = FeedbackRequest(
            target_employee_id=target.id,
            reviewer_employee_id=reviewer.id,
            appraisal_cycle_id=active.id,
            status="pending",
        )
        db.add(fr)
        created.append((fr, reviewer))

    db.commit()

    email_results = []
    for _fr, reviewer in created:
        sent = send_feedback_assignment_email(mailer, reviewer.email, reviewer.name, target.name)
        email_results.append(EmailResult(reviewer_id=reviewer.id, reviewer=reviewer.name, email_sent=sent))

    logger.info(
        "Feedback assigned",
        extra={
            "target_id": str(target.id),
            "cycle_id": str(active.id),
            "created_count": len(created),
            "emails_failed": sum(1 for r in email_results if not r.email_sent),
        },
    )
    return AssignFeedbackResponse(
        message=f"Feedback assigned successfully to {len(created)} reviewer(s)",
        requests=[FeedbackRequestOut.model_validate(fr) for fr, _reviewer in created],
        email_results=email_results,
    )


@router.get("/manager/feedback-assignments", response_model=list[FeedbackAssignmentOut])
def feedback_assignments(
    db: Session = Depends(get_db),
    _: ManagerSession = Depends(require_manager_session),
):
    active = get_active_cycle(db)
    if not active:
        return []

    requests = (
        db.query(FeedbackRequest)
        .filter(FeedbackRequest.appraisal_cycle_id == active.id)
        .order_by(FeedbackRequest.created_at.desc())
        .all()
    )
    employees = {e.id: e for e in db.query(Employee).all()}

    out = []
    for r in requests:
        item = FeedbackAssignmentOut.model_validate(r)
        target = employees.get(r.target_employee_id)
        reviewer = employees.get(r.reviewer_employee_id)
        item.target_employee = EmployeeOut.model_validate(target) if target else None
        item.reviewer_employee = EmployeeOut.model_validate(reviewer) if reviewer else None
        out.append(item)
    return out
