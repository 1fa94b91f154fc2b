import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from feedback360.core.clock import utcnow
from feedback360.db.base import Base

EMPLOYEE_ROLES = ("employee", "manager", "lead")


class Employee(Base):
    __tablename__ = "employees"
    __table_args__ = (
        CheckConstraint("role IN ('employee','manager','lead')", name="ck_employees_role"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True, nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="employee")
    designation: Mapped[str | None] = mapped_column(String(200), nullable=True)
    department: Mapped[str] = mapped_column(String(200), nullable=False)
    project_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    profile_image: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Reporting lines are plain id references; "my manager" is a lookup
    manager_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True, index=True
    )
    lead_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("employees.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # Set when the employee first signs in with their email
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    user = relationship("User")
