import uuid
from datetime import datetime
from typing import Annotated, Literal

from pydantic import AfterValidator, EmailStr, Field

from feedback360.schemas.base import CamelModel

EmployeeRole = Literal["employee", "manager", "lead"]


def _single_line(value: str | None) -> str | None:
    # Names end up in email headers
    if value is not None and ("\r" in value or "\n" in value):
        raise ValueError("must not contain line breaks")
    return value


EmployeeName = Annotated[str, Field(min_length=1, max_length=200), AfterValidator(_single_line)]


class EmployeeOut(CamelModel):
    id: uuid.UUID
    name: str
    email: str
    role: str
    designation: str | None
    department: str
    project_name: str | None
    profile_image: str | None
    manager_id: uuid.UUID | None
    lead_id: uuid.UUID | None
    user_id: uuid.UUID | None
    created_at: datetime


class EmployeeWithRelationsOut(EmployeeOut):
    manager: EmployeeOut | None = None
    lead: EmployeeOut | None = None


class EmployeeCreate(CamelModel):
    name: EmployeeName
    email: EmailStr
    role: EmployeeRole = "employee"
    designation: str | None = Field(default=None, max_length=200)
    department: str = Field(min_length=1, max_length=200)
    project_name: str | None = Field(default=None, max_length=200)
    profile_image: str | None = Field(default=None, max_length=500)
    manager_id: uuid.UUID | None = None
    lead_id: uuid.UUID | None = None


class EmployeeUpdate(CamelModel):
    """Partial update. Only fields present in the body are applied."""
    name: EmployeeName | None = None
    role: EmployeeRole | None = None
    designation: str | None = Field(default=None, max_length=200)
    department: str | None = Field(default=None, min_length=1, max_length=200)
    project_name: str | None = Field(default=None, max_length=200)
    profile_image: str | None = Field(default=None, max_length=500)
    manager_id: uuid.UUID | None = None
    lead_id: uuid.UUID | None = None
