import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from feedback360.api.employees import employees_with_relations
from feedback360.core.aggregation import cross_reviewer_average, feedback_activity, peer_feedback_average
from feedback360.core.cycles import get_active_cycle
from feedback360.core.errors import NotFound
from feedback360.core.security import AdminSession, require_admin_session
from feedback360.db.session import get_db
from feedback360.models.employee import Employee
from feedback360.models.know_about_me import KnowAboutMe
from feedback360.models.lead_review import LeadReview
from feedback360.models.manager_review import ManagerReview
from feedback360.models.peer_feedback import PeerFeedback
from feedback360.schemas.appraisal_cycle import CycleOut
from feedback360.schemas.employee import EmployeeOut, EmployeeWithRelationsOut
from feedback360.schemas.feedback import FeedbackRequestOut, PeerFeedbackOut, PeerFeedbackWithReviewerOut
from feedback360.schemas.know_about_me import KnowAboutMeOut
from feedback360.schemas.reports import (
    ActivityRequestOut,
    EmployeeActivityOut,
    EmployeeReportOut,
    FeedbackActivityOut,
)
from feedback360.schemas.review import LeadReviewOut, ManagerReviewOut

router = APIRouter(prefix="/api/admin", tags=["admin"])


def _employee_out(e: Employee | None) -> EmployeeOut | None:
    return EmployeeOut.model_validate(e) if e else None


@router.get("/employees-full", response_model=list[EmployeeWithRelationsOut])
def employees_full(
    db: Session = Depends(get_db),
    _: AdminSession = Depends(require_admin_session),
):
    return employees_with_relations(db)


@router.get("/feedback-activity", response_model=FeedbackActivityOut)
def admin_feedback_activity(
    db: Session = Depends(get_db),
    _: AdminSession = Depends(require_admin_session),
):
    active = get_active_cycle(db)
    if not active:
        return FeedbackActivityOut(employees=[], cycle=None)

    rows = []
    for row in feedback_activity(db, active.id):
        requests = [
            ActivityRequestOut(
                **FeedbackRequestOut.model_validate(r.request).model_dump(),
                reviewer=_employee_out(r.reviewer),
                submitted=r.submitted,
                submitted_at=r.submitted_at,
            )
            for r in row.feedback_requests
        ]
        rows.append(EmployeeActivityOut(
            employee=EmployeeOut.model_validate(row.employee),
            manager=_employee_out(row.manager),
            total_assigned=row.total_assigned,
            total_completed=row.total_completed,
            latest_feedback_at=row.latest_feedback_at,
            feedback_requests=requests,
        ))
    return FeedbackActivityOut(employees=rows, cycle=CycleOut.model_validate(active))


@router.get("/employee-report/{employee_id}", response_model=EmployeeReportOut)
def employee_report(
    employee_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: AdminSession = Depends(require_admin_session),
):
    """
    Everything recorded about one employee for the active cycle: peer
    feedback with per-submission and cross-reviewer averages, the manager
    and lead reviews, and the Know About Me form.
    """
    emp = db.get(Employee, employee_id)
    if not emp:
        raise NotFound("Employee not found")

    active = get_active_cycle(db)
    manager = db.get(Employee, emp.manager_id) if emp.manager_id else None
    lead = db.get(Employee, emp.lead_id) if emp.lead_id else None

    feedbacks: list[PeerFeedback] = []
    manager_review = lead_review = kam = None
    if active:
        feedbacks = (
            db.query(PeerFeedback)
            .filter(PeerFeedback.target_employee_id == emp.id, PeerFeedback.appraisal_cycle_id == active.id)
            .order_by(PeerFeedback.submitted_at.desc())
            .all()
        )
        manager_review = (
            db.query(ManagerReview)
            .filter(ManagerReview.employee_id == emp.id, ManagerReview.appraisal_cycle_id == active.id)
            .one_or_none()
        )
        lead_review = (
            db.query(LeadReview)
            .filter(LeadReview.employee_id == emp.id, LeadReview.appraisal_cycle_id == active.id)
            .one_or_none()
        )
        kam = (
            db.query(KnowAboutMe)
            .filter(KnowAboutMe.employee_id == emp.id, KnowAboutMe.appraisal_cycle_id == active.id)
            .one_or_none()
        )

    reviewer_ids = {f.reviewer_id for f in feedbacks}
    reviewers = {e.id: e for e in db.query(Employee).filter(Employee.id.in_(reviewer_ids)).all()} if reviewer_ids else {}

    peer_feedback = [
        PeerFeedbackWithReviewerOut(
            **PeerFeedbackOut.model_validate(f).model_dump(),
            reviewer=_employee_out(reviewers.get(f.reviewer_id)),
            average_rating=peer_feedback_average(f.ratings),
        )
        for f in feedbacks
    ]

    return EmployeeReportOut(
        employee=EmployeeOut.model_validate(emp),
        manager=_employee_out(manager),
        lead=_employee_out(lead),
        peer_feedback=peer_feedback,
        peer_average=cross_reviewer_average(feedbacks),
        manager_review=ManagerReviewOut.model_validate(manager_review) if manager_review else None,
        lead_review=LeadReviewOut.model_validate(lead_review) if lead_review else None,
        kam_data=KnowAboutMeOut.model_validate(kam) if kam else None,
        active_cycle=CycleOut.model_validate(active) if active else None,
    )
