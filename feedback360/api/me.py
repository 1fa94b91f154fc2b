from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from feedback360.core.access import get_employee_for_user
from feedback360.core.aggregation import dashboard_stats
from feedback360.core.cycles import get_active_cycle
from feedback360.core.security import get_current_user
from feedback360.db.session import get_db
from feedback360.models.appraisal_cycle import AppraisalCycle
from feedback360.models.employee import Employee
from feedback360.models.feedback_request import FeedbackRequest
from feedback360.models.lead_review import LeadReview
from feedback360.models.user import User
from feedback360.schemas.appraisal_cycle import CycleOut
from feedback360.schemas.employee import EmployeeOut
from feedback360.schemas.feedback import FeedbackRequestWithTargetOut
from feedback360.schemas.reports import DashboardOut
from feedback360.schemas.review import LeadReviewWithCycleOut, MyRatingsOut

router = APIRouter(prefix="/api", tags=["me"])

RECENT_REQUESTS_LIMIT = 5


def requests_with_targets(db: Session, reviewer_id, status: str | None = None) -> list[FeedbackRequestWithTargetOut]:
    query = db.query(FeedbackRequest).filter(FeedbackRequest.reviewer_employee_id == reviewer_id)
    if status:
        query = query.filter(FeedbackRequest.status == status)
    requests = query.order_by(FeedbackRequest.created_at.desc()).all()

    target_ids = {r.target_employee_id for r in requests}
    targets = {e.id: e for e in db.query(Employee).filter(Employee.id.in_(target_ids)).all()} if target_ids else {}

    out = []
    for r in requests:
        item = FeedbackRequestWithTargetOut.model_validate(r)
        target = targets.get(r.target_employee_id)
        item.target_employee = EmployeeOut.model_validate(target) if target else None
        out.append(item)
    return out


@router.get("/me/employee", response_model=EmployeeOut | None)
def my_employee(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """The employee record linked to the signed-in user, or null."""
    employee = get_employee_for_user(db, current_user)
    return EmployeeOut.model_validate(employee) if employee else None


@router.get("/dashboard", response_model=DashboardOut)
def dashboard(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    employee = get_employee_for_user(db, current_user)
    active = get_active_cycle(db)
    active_out = CycleOut.model_validate(active) if active else None

    if not employee:
        return DashboardOut(
            employee=None,
            pending_feedback_count=0,
            completed_feedback_count=0,
            my_latest_rating=None,
            active_cycle=active_out,
            recent_feedback_requests=[],
        )

    stats = dashboard_stats(db, employee.id)
    pending = requests_with_targets(db, employee.id, status="pending")

    return DashboardOut(
        employee=EmployeeOut.model_validate(employee),
        pending_feedback_count=stats.pending_feedback_count,
        completed_feedback_count=stats.completed_feedback_count,
        my_latest_rating=stats.my_latest_rating,
        active_cycle=active_out,
        recent_feedback_requests=pending[:RECENT_REQUESTS_LIMIT],
    )


@router.get("/feedback-requests/my-tasks", response_model=list[FeedbackRequestWithTargetOut])
def my_tasks(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Feedback requests where the caller is the reviewer, across all cycles."""
    employee = get_employee_for_user(db, current_user)
    if not employee:
        return []
    return requests_with_targets(db, employee.id)


@router.get("/my-ratings", response_model=MyRatingsOut)
def my_ratings(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    employee = get_employee_for_user(db, current_user)
    if not employee:
        return MyRatingsOut(reviews=[], average_rating=None)

    reviews = (
        db.query(LeadReview)
        .filter(LeadReview.employee_id == employee.id, LeadReview.status == "completed")
        .order_by(LeadReview.submitted_at.desc().nulls_last(), LeadReview.created_at.desc())
        .all()
    )
    cycle_ids = {r.appraisal_cycle_id for r in reviews}
    cycles = {c.id: c for c in db.query(AppraisalCycle).filter(AppraisalCycle.id.in_(cycle_ids)).all()} if cycle_ids else {}

    items = []
    for r in reviews:
        item = LeadReviewWithCycleOut.model_validate(r)
        cycle = cycles.get(r.appraisal_cycle_id)
        item.appraisal_cycle = CycleOut.model_validate(cycle) if cycle else None
        items.append(item)

    average = sum(r.final_rating for r in reviews) / len(reviews) if reviews else None
    return MyRatingsOut(reviews=items, average_rating=average)
