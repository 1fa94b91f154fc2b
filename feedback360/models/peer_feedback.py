import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from feedback360.core.clock import utcnow
from feedback360.db.base import Base

RATING_DIMENSIONS = ("technical_skills", "communication", "teamwork", "problem_solving", "leadership")


class PeerFeedback(Base):
    __tablename__ = "peer_feedback"
    __table_args__ = (
        UniqueConstraint("feedback_request_id", name="uq_peer_feedback_request"),
        *(
            CheckConstraint(f"{dim} BETWEEN 1 AND 5", name=f"ck_peer_feedback_{dim}")
            for dim in RATING_DIMENSIONS
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    feedback_request_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("feedback_requests.id", ondelete="CASCADE"), nullable=False
    )
    reviewer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("employees.id", ondelete="RESTRICT"), nullable=False
    )
    target_employee_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("employees.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    appraisal_cycle_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("appraisal_cycles.id", ondelete="CASCADE"), nullable=False, index=True
    )

    technical_skills: Mapped[int] = mapped_column(Integer, nullable=False)
    communication: Mapped[int] = mapped_column(Integer, nullable=False)
    teamwork: Mapped[int] = mapped_column(Integer, nullable=False)
    problem_solving: Mapped[int] = mapped_column(Integer, nullable=False)
    leadership: Mapped[int] = mapped_column(Integer, nullable=False)

    strengths: Mapped[str] = mapped_column(Text, nullable=False)
    areas_of_improvement: Mapped[str] = mapped_column(Text, nullable=False)
    additional_comments: Mapped[str | None] = mapped_column(Text, nullable=True)

    submitted_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    @property
    def ratings(self) -> tuple[int, ...]:
        return tuple(getattr(self, dim) for dim in RATING_DIMENSIONS)
