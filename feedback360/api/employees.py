from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from feedback360.core.security import get_current_user
from feedback360.db.session import get_db
from feedback360.models.appraisal_cycle import AppraisalCycle
from feedback360.models.employee import Employee
from feedback360.models.user import User
from feedback360.schemas.appraisal_cycle import CycleOut
from feedback360.schemas.employee import EmployeeOut, EmployeeWithRelationsOut

router = APIRouter(prefix="/api", tags=["employees"])


def employees_with_relations(db: Session) -> list[EmployeeWithRelationsOut]:
    employees = db.query(Employee).order_by(Employee.name).all()
    by_id = {e.id: e for e in employees}

    out = []
    for e in employees:
        item = EmployeeWithRelationsOut.model_validate(e)
        manager = by_id.get(e.manager_id) if e.manager_id else None
        lead = by_id.get(e.lead_id) if e.lead_id else None
        item.manager = EmployeeOut.model_validate(manager) if manager else None
        item.lead = EmployeeOut.model_validate(lead) if lead else None
        out.append(item)
    return out


@router.get("/employees", response_model=list[EmployeeWithRelationsOut])
def list_employees(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    return employees_with_relations(db)


@router.get("/appraisal-cycles", response_model=list[CycleOut])
def list_cycles(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    cycles = db.query(AppraisalCycle).order_by(AppraisalCycle.year.desc(), AppraisalCycle.created_at.desc()).all()
    return [CycleOut.model_validate(c) for c in cycles]
