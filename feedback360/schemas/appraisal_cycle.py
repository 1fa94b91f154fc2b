import uuid
from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator, Field, model_validator

from feedback360.schemas.base import CamelModel


def _naive_utc(value: datetime) -> datetime:
    # Stored columns are naive UTC
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


UtcDateTime = Annotated[datetime, AfterValidator(_naive_utc)]


class CycleOut(CamelModel):
    id: uuid.UUID
    name: str
    year: int
    start_date: datetime
    end_date: datetime
    is_active: bool
    created_at: datetime


class CycleCreate(CamelModel):
    name: str = Field(min_length=1, max_length=200)
    year: int = Field(ge=2000, le=2100)
    start_date: UtcDateTime
    end_date: UtcDateTime
    is_active: bool = False

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("endDate must be on or after startDate")
        return self


class CycleUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    year: int | None = Field(default=None, ge=2000, le=2100)
    start_date: UtcDateTime | None = None
    end_date: UtcDateTime | None = None
    is_active: bool | None = None
