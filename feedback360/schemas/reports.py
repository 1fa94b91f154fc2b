from datetime import datetime

from feedback360.schemas.appraisal_cycle import CycleOut
from feedback360.schemas.base import CamelModel
from feedback360.schemas.employee import EmployeeOut
from feedback360.schemas.feedback import FeedbackRequestOut, FeedbackRequestWithTargetOut, PeerFeedbackWithReviewerOut
from feedback360.schemas.know_about_me import KnowAboutMeOut
from feedback360.schemas.review import LeadReviewOut, ManagerReviewOut


class DashboardOut(CamelModel):
    employee: EmployeeOut | None
    pending_feedback_count: int
    completed_feedback_count: int
    my_latest_rating: int | None
    active_cycle: CycleOut | None
    recent_feedback_requests: list[FeedbackRequestWithTargetOut]


class RatingBucket(CamelModel):
    rating: int
    count: int


class ReportOut(CamelModel):
    active_cycle: CycleOut | None
    total_employees: int
    completed_feedback: int
    pending_feedback: int
    completed_manager_reviews: int
    pending_manager_reviews: int
    completed_lead_reviews: int
    pending_lead_reviews: int
    average_rating: float | None
    rating_distribution: list[RatingBucket]


class ActivityRequestOut(FeedbackRequestOut):
    reviewer: EmployeeOut | None
    submitted: bool
    submitted_at: datetime | None


class EmployeeActivityOut(CamelModel):
    employee: EmployeeOut
    manager: EmployeeOut | None
    total_assigned: int
    total_completed: int
    latest_feedback_at: datetime | None
    feedback_requests: list[ActivityRequestOut]


class FeedbackActivityOut(CamelModel):
    employees: list[EmployeeActivityOut]
    cycle: CycleOut | None


class EmployeeReportOut(CamelModel):
    employee: EmployeeOut
    manager: EmployeeOut | None
    lead: EmployeeOut | None
    peer_feedback: list[PeerFeedbackWithReviewerOut]
    peer_average: float | None
    manager_review: ManagerReviewOut | None
    lead_review: LeadReviewOut | None
    kam_data: KnowAboutMeOut | None
    active_cycle: CycleOut | None
