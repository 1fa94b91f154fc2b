import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from feedback360.core.clock import utcnow
from feedback360.db.base import Base

KAM_FIELDS = (
    "project_contributions",
    "role_and_responsibilities",
    "key_achievements",
    "learnings",
    "certifications",
    "technologies_worked_on",
    "mentorship",
    "volunteering_activities",
    "leadership_roles",
    "team_building_activities",
    "problems_solved",
    "strengths",
    "extra_efforts",
    "improvements",
)


class KnowAboutMe(Base):
    __tablename__ = "know_about_me"
    __table_args__ = (
        UniqueConstraint("employee_id", "appraisal_cycle_id", name="uq_know_about_me_employee_cycle"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    employee_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False
    )
    appraisal_cycle_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("appraisal_cycles.id", ondelete="CASCADE"), nullable=False
    )

    project_contributions: Mapped[str | None] = mapped_column(Text, nullable=True)
    role_and_responsibilities: Mapped[str | None] = mapped_column(Text, nullable=True)
    key_achievements: Mapped[str | None] = mapped_column(Text, nullable=True)
    learnings: Mapped[str | None] = mapped_column(Text, nullable=True)
    certifications: Mapped[str | None] = mapped_column(Text, nullable=True)
    technologies_worked_on: Mapped[str | None] = mapped_column(Text, nullable=True)
    mentorship: Mapped[str | None] = mapped_column(Text, nullable=True)
    volunteering_activities: Mapped[str | None] = mapped_column(Text, nullable=True)
    leadership_roles: Mapped[str | None] = mapped_column(Text, nullable=True)
    team_building_activities: Mapped[str | None] = mapped_column(Text, nullable=True)
    problems_solved: Mapped[str | None] = mapped_column(Text, nullable=True)
    strengths: Mapped[str | None] = mapped_column(Text, nullable=True)
    extra_efforts: Mapped[str | None] = mapped_column(Text, nullable=True)
    improvements: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
