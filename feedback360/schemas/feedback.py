import uuid
from datetime import datetime
from typing import Annotated

from pydantic import Field

from feedback360.schemas.base import CamelModel
from feedback360.schemas.employee import EmployeeOut

Rating = Annotated[int, Field(ge=1, le=5)]


class FeedbackRequestOut(CamelModel):
    id: uuid.UUID
    target_employee_id: uuid.UUID
    reviewer_employee_id: uuid.UUID
    appraisal_cycle_id: uuid.UUID
    status: str
    created_at: datetime


class FeedbackRequestWithTargetOut(FeedbackRequestOut):
    target_employee: EmployeeOut | None = None


class FeedbackAssignmentOut(FeedbackRequestOut):
    target_employee: EmployeeOut | None = None
    reviewer_employee: EmployeeOut | None = None


class FeedbackRequestCreate(CamelModel):
    target_employee_id: uuid.UUID
    reviewer_employee_id: uuid.UUID


class FeedbackRequestRef(CamelModel):
    """Just enough of a peer-feedback body to run the ownership checks."""
    feedback_request_id: uuid.UUID


class PeerFeedbackCreate(FeedbackRequestRef):
    technical_skills: Rating
    communication: Rating
    teamwork: Rating
    problem_solving: Rating
    leadership: Rating
    strengths: str = Field(min_length=10)
    areas_of_improvement: str = Field(min_length=10)
    additional_comments: str | None = None


class PeerFeedbackOut(CamelModel):
    id: uuid.UUID
    feedback_request_id: uuid.UUID
    reviewer_id: uuid.UUID
    target_employee_id: uuid.UUID
    appraisal_cycle_id: uuid.UUID
    technical_skills: int
    communication: int
    teamwork: int
    problem_solving: int
    leadership: int
    strengths: str
    areas_of_improvement: str
    additional_comments: str | None
    submitted_at: datetime


class PeerFeedbackWithReviewerOut(PeerFeedbackOut):
    reviewer: EmployeeOut | None = None
    average_rating: float


class AssignFeedbackRequest(CamelModel):
    target_employee_id: uuid.UUID
    reviewer_employee_ids: list[uuid.UUID] = Field(min_length=1)


class EmailResult(CamelModel):
    reviewer_id: uuid.UUID
    reviewer: str
    email_sent: bool


class AssignFeedbackResponse(CamelModel):
    message: str
    requests: list[FeedbackRequestOut]
    email_results: list[EmailResult]
