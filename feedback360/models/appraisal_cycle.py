import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Uuid, true
from sqlalchemy.orm import Mapped, mapped_column

from feedback360.core.clock import utcnow
from feedback360.db.base import Base


class AppraisalCycle(Base):
    __tablename__ = "appraisal_cycles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)


# DB invariant: at most one active cycle
Index(
    "uq_appraisal_cycles_single_active",
    AppraisalCycle.is_active,
    unique=True,
    postgresql_where=AppraisalCycle.is_active == true(),
    sqlite_where=AppraisalCycle.is_active == true(),
)
