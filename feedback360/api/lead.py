import logging
import uuid
from typing import Any

from fastapi import APIRouter, Body, Depends, status
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from feedback360.core.access import (
    assert_can_lead_review,
    assert_valid_reporting_line,
    get_employee_for_user,
    require_lead,
)
from feedback360.core.aggregation import report_stats
from feedback360.core.clock import utcnow
from feedback360.core.cycles import activate_cycle, get_active_cycle, require_active_cycle
from feedback360.core.errors import NotFound, StateConflict, validation_failed_from
from feedback360.core.security import get_current_user
from feedback360.core.upsert import assert_not_reopening, upsert_for_employee_cycle
from feedback360.db.session import get_db
from feedback360.models.appraisal_cycle import AppraisalCycle
from feedback360.models.employee import Employee
from feedback360.models.feedback_request import FeedbackRequest
from feedback360.models.lead_review import LeadReview
from feedback360.models.manager_review import ManagerReview
from feedback360.models.peer_feedback import PeerFeedback
from feedback360.models.user import User
from feedback360.schemas.appraisal_cycle import CycleCreate, CycleOut, CycleUpdate
from feedback360.schemas.employee import EmployeeCreate, EmployeeOut, EmployeeUpdate
from feedback360.schemas.feedback import FeedbackRequestCreate, FeedbackRequestOut, PeerFeedbackOut
from feedback360.schemas.reports import RatingBucket, ReportOut
from feedback360.schemas.review import (
    LeadAppraisalOut,
    LeadReviewCreate,
    LeadReviewOut,
    ManagerReviewWithManagerOut,
    ReviewTarget,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["lead"])

LEAD_REVIEW_FIELDS = (
    "final_rating",
    "increment_percentage",
    "promotion_decision",
    "remarks",
    "status",
)

# Columns that may not be cleared through a PATCH
REQUIRED_EMPLOYEE_FIELDS = ("name", "role", "department")


@router.get("/lead/appraisals", response_model=list[LeadAppraisalOut])
def lead_appraisals(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Everyone the caller leads or manages, with all reviews for the active cycle."""
    lead = get_employee_for_user(db, current_user)
    if not lead or lead.role != "lead":
        return []

    active = get_active_cycle(db)
    people = (
        db.query(Employee)
        .filter((Employee.lead_id == lead.id) | (Employee.manager_id == lead.id))
        .order_by(Employee.name)
        .all()
    )

    out = []
    for emp in people:
        manager_review = None
        lead_review = None
        peer_feedback: list[PeerFeedbackOut] = []
        if active:
            mr = (
                db.query(ManagerReview)
                .filter(ManagerReview.employee_id == emp.id, ManagerReview.appraisal_cycle_id == active.id)
                .one_or_none()
            )
            if mr:
                manager_review = ManagerReviewWithManagerOut.model_validate(mr)
                reviewer = db.get(Employee, mr.manager_id)
                manager_review.manager = EmployeeOut.model_validate(reviewer) if reviewer else None
            lr = (
                db.query(LeadReview)
                .filter(LeadReview.employee_id == emp.id, LeadReview.appraisal_cycle_id == active.id)
                .one_or_none()
            )
            lead_review = LeadReviewOut.model_validate(lr) if lr else None
            peer_feedback = [
                PeerFeedbackOut.model_validate(pf)
                for pf in db.query(PeerFeedback)
                .filter(PeerFeedback.target_employee_id == emp.id, PeerFeedback.appraisal_cycle_id == active.id)
                .order_by(PeerFeedback.submitted_at.desc())
                .all()
            ]
        out.append(LeadAppraisalOut(
            employee=EmployeeOut.model_validate(emp),
            manager_review=manager_review,
            peer_feedback=peer_feedback,
            lead_review=lead_review,
        ))
    return out


@router.post("/lead-reviews", response_model=LeadReviewOut)
def submit_lead_review(
    body: dict[str, Any] | None = Body(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    lead = require_lead(db, current_user)
    active = require_active_cycle(db)

    try:
        target_ref = ReviewTarget.model_validate(body or {})
    except ValidationError as exc:
        raise validation_failed_from(exc)

    assert_can_lead_review(lead, db.get(Employee, target_ref.employee_id))

    try:
        payload = LeadReviewCreate.model_validate(body)
    except ValidationError as exc:
        raise validation_failed_from(exc)

    assert_not_reopening(db, LeadReview, payload.employee_id, active.id, payload.status)

    values = payload.model_dump(include=set(LEAD_REVIEW_FIELDS))
    values["increment_percentage"] = payload.increment_percentage or None
    values["lead_id"] = lead.id
    update_columns = list(LEAD_REVIEW_FIELDS) + ["lead_id"]
    if payload.status == "completed":
        values["submitted_at"] = utcnow()
        update_columns.append("submitted_at")

    review = upsert_for_employee_cycle(db, LeadReview, payload.employee_id, active.id, values, update_columns)
    db.commit()

    logger.info(
        "Lead review saved",
        extra={"review_id": str(review.id), "lead_id": str(lead.id), "status": review.status},
    )
    return LeadReviewOut.model_validate(review)


@router.get("/reports", response_model=ReportOut)
def reports(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_lead(db, current_user)
    active = get_active_cycle(db)
    stats = report_stats(db)

    return ReportOut(
        active_cycle=CycleOut.model_validate(active) if active else None,
        total_employees=stats.total_employees,
        completed_feedback=stats.completed_feedback,
        pending_feedback=stats.pending_feedback,
        completed_manager_reviews=stats.completed_manager_reviews,
        pending_manager_reviews=stats.pending_manager_reviews,
        completed_lead_reviews=stats.completed_lead_reviews,
        pending_lead_reviews=stats.pending_lead_reviews,
        average_rating=stats.average_rating,
        rating_distribution=[RatingBucket(**b) for b in stats.rating_distribution],
    )


@router.post("/admin/employees", response_model=EmployeeOut, status_code=status.HTTP_201_CREATED)
def create_employee(
    payload: EmployeeCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_lead(db, current_user)

    email = payload.email.lower()
    if db.query(Employee).filter(Employee.email == email).one_or_none():
        raise StateConflict("Employee with this email already exists", "duplicate_email")

    assert_valid_reporting_line(db, None, payload.manager_id, "manager_id")
    assert_valid_reporting_line(db, None, payload.lead_id, "lead_id")

    # Someone who already signed in with this email is linked straight away
    user = db.query(User).filter(User.email == email).one_or_none()

    emp = Employee(**payload.model_dump(exclude={"email"}), email=email, user_id=user.id if user else None)
    db.add(emp)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise StateConflict("Employee with this email already exists", "duplicate_email")

    logger.info("Employee created", extra={"employee_id": str(emp.id), "role": emp.role})
    return EmployeeOut.model_validate(emp)


@router.patch("/admin/employees/{employee_id}", response_model=EmployeeOut)
def update_employee(
    employee_id: uuid.UUID,
    payload: EmployeeUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_lead(db, current_user)

    emp = db.get(Employee, employee_id)
    if not emp:
        raise NotFound("Employee not found")

    changes = payload.model_dump(exclude_unset=True)
    for field in REQUIRED_EMPLOYEE_FIELDS:
        if field in changes and changes[field] is None:
            del changes[field]

    if "manager_id" in changes:
        assert_valid_reporting_line(db, emp.id, changes["manager_id"], "manager_id")
    if "lead_id" in changes:
        assert_valid_reporting_line(db, emp.id, changes["lead_id"], "lead_id")

    for k, v in changes.items():
        setattr(emp, k, v)

    db.commit()
    logger.info("Employee updated", extra={"employee_id": str(emp.id), "fields": sorted(changes)})
    return EmployeeOut.model_validate(emp)


@router.post("/admin/appraisal-cycles", response_model=CycleOut, status_code=status.HTTP_201_CREATED)
def create_cycle(
    payload: CycleCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_lead(db, current_user)

    c = AppraisalCycle(
        name=payload.name,
        year=payload.year,
        start_date=payload.start_date,
        end_date=payload.end_date,
        is_active=False,
    )
    db.add(c)
    db.flush()  # c.id is needed to exclude it when deactivating the others

    if payload.is_active:
        activate_cycle(db, c)

    db.commit()
    logger.info("Appraisal cycle created", extra={"cycle_id": str(c.id), "active": c.is_active})
    return CycleOut.model_validate(c)


@router.patch("/admin/appraisal-cycles/{cycle_id}", response_model=CycleOut)
def update_cycle(
    cycle_id: uuid.UUID,
    payload: CycleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_lead(db, current_user)

    c = db.get(AppraisalCycle, cycle_id)
    if not c:
        raise NotFound("Cycle not found")

    changes = payload.model_dump(exclude_unset=True)
    is_active = changes.pop("is_active", None)
    for k, v in changes.items():
        if v is not None:
            setattr(c, k, v)

    if c.end_date < c.start_date:
        raise StateConflict("endDate must be on or after startDate", "invalid_dates")

    if is_active is True:
        activate_cycle(db, c)
    elif is_active is False:
        c.is_active = False

    db.commit()
    return CycleOut.model_validate(c)


@router.post("/admin/feedback-requests", response_model=FeedbackRequestOut, status_code=status.HTTP_201_CREATED)
def create_feedback_request(
    payload: FeedbackRequestCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_lead(db, current_user)
    active = require_active_cycle(db)

    if payload.target_employee_id == payload.reviewer_employee_id:
        raise StateConflict("An employee cannot review themselves", "self_review")
    if not db.get(Employee, payload.target_employee_id):
        raise NotFound("Target employee not found")
    if not db.get(Employee, payload.reviewer_employee_id):
        raise NotFound("Reviewer not found")

    duplicate = (
        db.query(FeedbackRequest)
        .filter(
            FeedbackRequest.appraisal_cycle_id == active.id,
            FeedbackRequest.target_employee_id == payload.target_employee_id,
            FeedbackRequest.reviewer_employee_id == payload.reviewer_employee_id,
        )
        .one_or_none()
    )
    if duplicate:
        raise StateConflict("This reviewer is already assigned to this employee", "already_assigned")

    fr = FeedbackRequest(
        target_employee_id=payload.target_employee_id,
        reviewer_employee_id=payload.reviewer_employee_id,
        appraisal_cycle_id=active.id,
        status="pending",
    )
    db.add(fr)
    db.commit()
    return FeedbackRequestOut.model_validate(fr)
