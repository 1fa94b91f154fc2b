import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from feedback360.core.clock import utcnow
from feedback360.db.base import Base


class LeadReview(Base):
    __tablename__ = "lead_reviews"
    __table_args__ = (
        UniqueConstraint("employee_id", "appraisal_cycle_id", name="uq_lead_review_employee_cycle"),
        CheckConstraint("status IN ('pending','in_progress','completed')", name="ck_lead_reviews_status"),
        CheckConstraint("final_rating BETWEEN 1 AND 5", name="ck_lead_reviews_rating"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    lead_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("employees.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("employees.id", ondelete="RESTRICT"), nullable=False
    )
    appraisal_cycle_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("appraisal_cycles.id", ondelete="CASCADE"), nullable=False
    )

    final_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    increment_percentage: Mapped[str | None] = mapped_column(String(50), nullable=True)
    promotion_decision: Mapped[str] = mapped_column(String(100), nullable=False)
    remarks: Mapped[str] = mapped_column(Text, nullable=False)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")

    submitted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
