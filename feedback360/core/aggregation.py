"""
Read-side aggregation over the review tables: averages, dashboard counters,
the admin feedback-activity board and the lead report.
"""
import uuid
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable

from sqlalchemy import func
from sqlalchemy.orm import Session

from feedback360.models.employee import Employee
from feedback360.models.feedback_request import FeedbackRequest
from feedback360.models.lead_review import LeadReview
from feedback360.models.manager_review import ManagerReview
from feedback360.models.peer_feedback import PeerFeedback


def _mean(values: list[float]) -> float:
    return sum(values) / len(values)


def peer_feedback_average(ratings: Iterable[int]) -> float:
    """Mean of one submission's five ratings, rounded to one decimal for display."""
    values = list(ratings)
    if not values:
        raise ValueError("ratings must not be empty")
    return round(_mean(values), 1)


def cross_reviewer_average(feedbacks: Iterable[PeerFeedback]) -> float | None:
    """
    Average peer rating across reviewers.

    Each reviewer counts once: their submissions are averaged first, then the
    per-reviewer means are averaged. Rounding happens only at the end.
    """
    by_reviewer: dict[uuid.UUID, list[float]] = defaultdict(list)
    for fb in feedbacks:
        by_reviewer[fb.reviewer_id].append(_mean(list(fb.ratings)))

    if not by_reviewer:
        return None
    return round(_mean([_mean(means) for means in by_reviewer.values()]), 1)


def latest_completed_lead_review(db: Session, employee_id: uuid.UUID) -> LeadReview | None:
    return (
        db.query(LeadReview)
        .filter(LeadReview.employee_id == employee_id, LeadReview.status == "completed")
        .order_by(LeadReview.submitted_at.desc().nulls_last(), LeadReview.created_at.desc())
        .first()
    )


@dataclass
class DashboardStats:
    pending_feedback_count: int
    completed_feedback_count: int
    my_latest_rating: int | None


def dashboard_stats(db: Session, employee_id: uuid.UUID) -> DashboardStats:
    counts = dict(
        db.query(FeedbackRequest.status, func.count(FeedbackRequest.id))
        .filter(FeedbackRequest.reviewer_employee_id == employee_id)
        .group_by(FeedbackRequest.status)
        .all()
    )
    latest = latest_completed_lead_review(db, employee_id)
    return DashboardStats(
        pending_feedback_count=counts.get("pending", 0),
        completed_feedback_count=counts.get("submitted", 0),
        my_latest_rating=latest.final_rating if latest else None,
    )


@dataclass
class ActivityRequest:
    request: FeedbackRequest
    reviewer: Employee | None
    submitted: bool
    submitted_at: datetime | None


@dataclass
class EmployeeActivity:
    employee: Employee
    manager: Employee | None
    total_assigned: int
    total_completed: int
    latest_feedback_at: datetime | None
    feedback_requests: list[ActivityRequest] = field(default_factory=list)


def feedback_activity(db: Session, cycle_id: uuid.UUID) -> list[EmployeeActivity]:
    """
    One row per employee who is the target of at least one request in the cycle.

    Rows with feedback come first, most recent submission first; the rest
    follow ordered by completed count.
    """
    requests = (
        db.query(FeedbackRequest)
        .filter(FeedbackRequest.appraisal_cycle_id == cycle_id)
        .order_by(FeedbackRequest.created_at)
        .all()
    )
    if not requests:
        return []

    submitted_at_by_request = dict(
        db.query(PeerFeedback.feedback_request_id, PeerFeedback.submitted_at)
        .filter(PeerFeedback.appraisal_cycle_id == cycle_id)
        .all()
    )
    employees = {e.id: e for e in db.query(Employee).all()}

    by_target: dict[uuid.UUID, list[FeedbackRequest]] = defaultdict(list)
    for req in requests:
        by_target[req.target_employee_id].append(req)

    rows: list[EmployeeActivity] = []
    for target_id, target_requests in by_target.items():
        emp = employees.get(target_id)
        if emp is None:
            continue

        enriched = [
            ActivityRequest(
                request=req,
                reviewer=employees.get(req.reviewer_employee_id),
                submitted=req.id in submitted_at_by_request,
                submitted_at=submitted_at_by_request.get(req.id),
            )
            for req in target_requests
        ]
        submitted_times = [r.submitted_at for r in enriched if r.submitted_at]

        rows.append(EmployeeActivity(
            employee=emp,
            manager=employees.get(emp.manager_id) if emp.manager_id else None,
            total_assigned=len(enriched),
            total_completed=sum(1 for r in enriched if r.submitted),
            latest_feedback_at=max(submitted_times) if submitted_times else None,
            feedback_requests=enriched,
        ))

    with_latest = sorted(
        (r for r in rows if r.latest_feedback_at), key=lambda r: r.latest_feedback_at, reverse=True
    )
    without_latest = sorted(
        (r for r in rows if not r.latest_feedback_at), key=lambda r: r.total_completed, reverse=True
    )
    return with_latest + without_latest


@dataclass
class ReportStats:
    total_employees: int
    completed_feedback: int
    pending_feedback: int
    completed_manager_reviews: int
    pending_manager_reviews: int
    completed_lead_reviews: int
    pending_lead_reviews: int
    average_rating: float | None
    rating_distribution: list[dict[str, int]]


def _status_counts(db: Session, column) -> dict[str, int]:
    return dict(db.query(column, func.count()).group_by(column).all())


def report_stats(db: Session) -> ReportStats:
    """Organisation-wide counters. Not scoped to a cycle."""
    total_employees = db.query(func.count(Employee.id)).scalar() or 0
    requests = _status_counts(db, FeedbackRequest.status)
    manager = _status_counts(db, ManagerReview.status)
    lead = _status_counts(db, LeadReview.status)

    ratings = [
        r for (r,) in db.query(LeadReview.final_rating).filter(LeadReview.status == "completed").all()
    ]
    distribution = {n: 0 for n in range(1, 6)}
    for r in ratings:
        if r in distribution:
            distribution[r] += 1

    return ReportStats(
        total_employees=total_employees,
        completed_feedback=requests.get("submitted", 0),
        pending_feedback=requests.get("pending", 0),
        completed_manager_reviews=manager.get("completed", 0),
        pending_manager_reviews=sum(v for k, v in manager.items() if k != "completed"),
        completed_lead_reviews=lead.get("completed", 0),
        pending_lead_reviews=sum(v for k, v in lead.items() if k != "completed"),
        average_rating=_mean(ratings) if ratings else None,
        rating_distribution=[{"rating": n, "count": c} for n, c in distribution.items()],
    )
