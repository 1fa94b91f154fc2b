import uuid
from datetime import datetime
from typing import Literal

from pydantic import Field

from feedback360.schemas.appraisal_cycle import CycleOut
from feedback360.schemas.base import CamelModel
from feedback360.schemas.employee import EmployeeOut
from feedback360.schemas.feedback import PeerFeedbackOut

ReviewStatus = Literal["pending", "in_progress", "completed"]


class ReviewTarget(CamelModel):
    employee_id: uuid.UUID


class ManagerReviewCreate(ReviewTarget):
    performance_rating: int = Field(ge=1, le=5)
    goals_achieved: str = Field(min_length=10)
    areas_of_growth: str = Field(min_length=10)
    training_needs: str | None = None
    promotion_readiness: str = Field(min_length=1, max_length=100)
    overall_comments: str = Field(min_length=10)
    status: ReviewStatus = "completed"


class ManagerReviewOut(CamelModel):
    id: uuid.UUID
    manager_id: uuid.UUID
    employee_id: uuid.UUID
    appraisal_cycle_id: uuid.UUID
    performance_rating: int
    goals_achieved: str
    areas_of_growth: str
    training_needs: str | None
    promotion_readiness: str
    overall_comments: str
    status: str
    submitted_at: datetime | None
    created_at: datetime
    updated_at: datetime


class ManagerReviewWithManagerOut(ManagerReviewOut):
    manager: EmployeeOut | None = None


class LeadReviewCreate(ReviewTarget):
    final_rating: int = Field(ge=1, le=5)
    increment_percentage: str | None = Field(default=None, max_length=50)
    promotion_decision: str = Field(min_length=1, max_length=100)
    remarks: str = Field(min_length=10)
    status: ReviewStatus = "completed"


class LeadReviewOut(CamelModel):
    id: uuid.UUID
    lead_id: uuid.UUID
    employee_id: uuid.UUID
    appraisal_cycle_id: uuid.UUID
    final_rating: int
    increment_percentage: str | None
    promotion_decision: str
    remarks: str
    status: str
    submitted_at: datetime | None
    created_at: datetime
    updated_at: datetime


class LeadReviewWithCycleOut(LeadReviewOut):
    appraisal_cycle: CycleOut | None = None


class TeamMemberOut(CamelModel):
    employee: EmployeeOut
    review: ManagerReviewOut | None = None
    has_peer_feedback: bool


class LeadAppraisalOut(CamelModel):
    employee: EmployeeOut
    manager_review: ManagerReviewWithManagerOut | None = None
    peer_feedback: list[PeerFeedbackOut]
    lead_review: LeadReviewOut | None = None


class MyRatingsOut(CamelModel):
    reviews: list[LeadReviewWithCycleOut]
    average_rating: float | None
