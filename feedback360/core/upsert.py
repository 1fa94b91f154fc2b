import uuid
from typing import Any, TypeVar

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from feedback360.core.clock import utcnow
from feedback360.core.errors import StateConflict

T = TypeVar("T")

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def upsert_for_employee_cycle(
    db: Session,
    model: type[T],
    employee_id: uuid.UUID,
    cycle_id: uuid.UUID,
    values: dict[str, Any],
    update_columns: list[str] | tuple[str, ...],
) -> T:
    """
    Insert-or-update the single row of ``model`` for (employee, cycle).

    Relies on the table's unique constraint on (employee_id, appraisal_cycle_id):
    a concurrent second submit turns into an update instead of a duplicate.
    created_at is kept from the first insert, updated_at is refreshed.
    """
    dialect = db.get_bind().dialect.name
    insert = _DIALECT_INSERTS.get(dialect)
    if insert is None:
        raise RuntimeError(f"Upsert is not supported on the {dialect!r} dialect")

    now = utcnow()
    stmt = insert(model).values(
        id=uuid.uuid4(),
        employee_id=employee_id,
        appraisal_cycle_id=cycle_id,
        created_at=now,
        updated_at=now,
        **values,
    )
    set_ = {col: stmt.excluded[col] for col in update_columns}
    set_["updated_at"] = stmt.excluded.updated_at
    stmt = stmt.on_conflict_do_update(index_elements=["employee_id", "appraisal_cycle_id"], set_=set_)
    db.execute(stmt)

    # The ORM did not see the write; reload over any stale identity-map copy
    return db.execute(
        select(model)
        .where(model.employee_id == employee_id, model.appraisal_cycle_id == cycle_id)
        .execution_options(populate_existing=True)
    ).scalar_one()


def assert_not_reopening(
    db: Session,
    model: type[T],
    employee_id: uuid.UUID,
    cycle_id: uuid.UUID,
    status: str,
) -> None:
    """A completed review stays completed for its cycle; it can only be resubmitted as completed."""
    existing_status = db.execute(
        select(model.status).where(model.employee_id == employee_id, model.appraisal_cycle_id == cycle_id)
    ).scalar_one_or_none()
    if existing_status == "completed" and status != "completed":
        raise StateConflict("This review has already been completed", "already_completed")
