import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from feedback360.core.clock import utcnow
from feedback360.db.base import Base


class FeedbackRequest(Base):
    __tablename__ = "feedback_requests"
    __table_args__ = (
        UniqueConstraint(
            "appraisal_cycle_id", "reviewer_employee_id", "target_employee_id",
            name="uq_feedback_request_cycle_reviewer_target",
        ),
        CheckConstraint("status IN ('pending','submitted')", name="ck_feedback_requests_status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    target_employee_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("employees.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    reviewer_employee_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("employees.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    appraisal_cycle_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("appraisal_cycles.id", ondelete="CASCADE"), nullable=False, index=True
    )

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
