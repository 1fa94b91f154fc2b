import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from feedback360.core.clock import utcnow
from feedback360.db.base import Base

REVIEW_STATUSES = ("pending", "in_progress", "completed")


class ManagerReview(Base):
    __tablename__ = "manager_reviews"
    __table_args__ = (
        UniqueConstraint("employee_id", "appraisal_cycle_id", name="uq_manager_review_employee_cycle"),
        CheckConstraint("status IN ('pending','in_progress','completed')", name="ck_manager_reviews_status"),
        CheckConstraint("performance_rating BETWEEN 1 AND 5", name="ck_manager_reviews_rating"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    manager_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("employees.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("employees.id", ondelete="RESTRICT"), nullable=False
    )
    appraisal_cycle_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("appraisal_cycles.id", ondelete="CASCADE"), nullable=False
    )

    performance_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    goals_achieved: Mapped[str] = mapped_column(Text, nullable=False)
    areas_of_growth: Mapped[str] = mapped_column(Text, nullable=False)
    training_needs: Mapped[str | None] = mapped_column(Text, nullable=True)
    promotion_readiness: Mapped[str] = mapped_column(String(100), nullable=False)
    overall_comments: Mapped[str] = mapped_column(Text, nullable=False)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")

    submitted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
