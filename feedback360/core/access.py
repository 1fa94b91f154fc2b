import uuid

from sqlalchemy.orm import Session

from feedback360.core.errors import Forbidden, NotFound, StateConflict
from feedback360.models.employee import Employee
from feedback360.models.user import User

MANAGER_ROLES = ("manager", "lead")


def get_employee_for_user(db: Session, user: User) -> Employee | None:
    return db.query(Employee).filter(Employee.user_id == user.id).one_or_none()


def require_employee(db: Session, user: User) -> Employee:
    emp = get_employee_for_user(db, user)
    if not emp:
        raise NotFound("Employee not found")
    return emp


def require_lead(db: Session, user: User) -> Employee:
    emp = get_employee_for_user(db, user)
    if not emp or emp.role != "lead":
        raise Forbidden("Not authorized")
    return emp


def require_manager_role(db: Session, user: User) -> Employee:
    emp = get_employee_for_user(db, user)
    if not emp or emp.role not in MANAGER_ROLES:
        raise Forbidden("Not authorized")
    return emp


def assert_can_manager_review(manager: Employee, target: Employee | None):
    if not target or target.manager_id != manager.id:
        raise Forbidden("You can only review your direct reports")


def assert_can_lead_review(lead: Employee, target: Employee | None):
    if not target or (target.lead_id != lead.id and target.manager_id != lead.id):
        raise Forbidden("You can only review employees under your leadership")


def assert_valid_reporting_line(db: Session, employee_id: uuid.UUID | None, superior_id: uuid.UUID | None, attr: str):
    """
    Reject a manager_id / lead_id that points at an unknown employee, at the
    employee itself, or at someone who already reports (transitively, along
    the same attribute) to the employee.
    """
    if superior_id is None:
        return

    label = "Manager" if attr == "manager_id" else "Lead"
    superior = db.get(Employee, superior_id)
    if not superior:
        raise NotFound(f"{label} not found")

    if employee_id is None:
        return
    if superior_id == employee_id:
        raise StateConflict(f"An employee cannot be their own {label.lower()}", "invalid_reporting_line")

    seen: set[uuid.UUID] = set()
    current = superior
    while current is not None and current.id not in seen:
        seen.add(current.id)
        next_id = getattr(current, attr)
        if next_id == employee_id:
            raise StateConflict(f"{label} assignment would create a reporting cycle", "invalid_reporting_line")
        current = db.get(Employee, next_id) if next_id else None
