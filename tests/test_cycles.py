import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError

from feedback360.core.cycles import activate_cycle, get_active_cycle, require_active_cycle
from feedback360.core.errors import StateConflict
from feedback360.main import app
from feedback360.models.appraisal_cycle import AppraisalCycle
from tests.helpers import create_cycle, create_employee, login


def cycle_body(name="2026 Annual Review", year=2026, active=False):
    return {
        "name": name,
        "year": year,
        "startDate": f"{year}-01-01T00:00:00",
        "endDate": f"{year}-12-31T00:00:00",
        "isActive": active,
    }


def active_ids(db_session):
    db_session.expire_all()
    return [c.id for c in db_session.query(AppraisalCycle).filter(AppraisalCycle.is_active.is_(True)).all()]


def lead_client(db_session):
    create_employee(db_session, "Lena Lead", email="lena@example.com", role="lead")
    client = TestClient(app)
    login(client, db_session, "lena@example.com")
    return client


def test_create_cycle_requires_lead(db_session):
    create_employee(db_session, "Eve Employee", email="eve@example.com")
    client = TestClient(app)
    login(client, db_session, "eve@example.com")

    r = client.post("/api/admin/appraisal-cycles", json=cycle_body())
    assert r.status_code == 403


def test_create_active_cycle_deactivates_previous(db_session):
    client = lead_client(db_session)

    r = client.post("/api/admin/appraisal-cycles", json=cycle_body("2025 Review", 2025, active=True))
    assert r.status_code == 201
    first = r.json()
    assert first["isActive"] is True

    r = client.post("/api/admin/appraisal-cycles", json=cycle_body("2026 Review", 2026, active=True))
    assert r.status_code == 201
    second = r.json()

    assert [str(i) for i in active_ids(db_session)] == [second["id"]]


def test_patch_activation_leaves_exactly_one_active(db_session):
    old = create_cycle(db_session, "2025 Review", 2025, active=False)
    current = create_cycle(db_session, "2026 Review", 2026, active=True)
    client = lead_client(db_session)

    r = client.patch(f"/api/admin/appraisal-cycles/{old.id}", json={"isActive": True})
    assert r.status_code == 200
    assert r.json()["isActive"] is True
    assert active_ids(db_session) == [old.id]

    # Re-activating the active cycle is a no-op
    r = client.patch(f"/api/admin/appraisal-cycles/{old.id}", json={"isActive": True, "name": "2025 Review (reopened)"})
    assert r.status_code == 200
    assert r.json()["name"] == "2025 Review (reopened)"
    assert active_ids(db_session) == [old.id]

    r = client.patch(f"/api/admin/appraisal-cycles/{old.id}", json={"isActive": False})
    assert r.status_code == 200
    assert active_ids(db_session) == []
    assert current.id not in active_ids(db_session)


def test_patch_unknown_cycle_is_404(db_session):
    client = lead_client(db_session)
    r = client.patch("/api/admin/appraisal-cycles/00000000-0000-0000-0000-000000000000", json={"isActive": True})
    assert r.status_code == 404


def test_create_cycle_validates_dates(db_session):
    client = lead_client(db_session)
    body = cycle_body()
    body["endDate"] = "2025-01-01T00:00:00"
    r = client.post("/api/admin/appraisal-cycles", json=body)
    assert r.status_code == 400
    assert r.json()["code"] == "validation_error"


def test_list_cycles_newest_year_first(db_session):
    create_cycle(db_session, "2024 Review", 2024, active=False)
    create_cycle(db_session, "2026 Review", 2026, active=True)
    create_cycle(db_session, "2025 Review", 2025, active=False)
    create_employee(db_session, "Eve Employee", email="eve@example.com")
    client = TestClient(app)
    login(client, db_session, "eve@example.com")

    r = client.get("/api/appraisal-cycles")
    assert r.status_code == 200
    assert [c["year"] for c in r.json()] == [2026, 2025, 2024]


def test_require_active_cycle(db_session):
    with pytest.raises(StateConflict) as exc:
        require_active_cycle(db_session)
    assert exc.value.code == "no_active_cycle"

    c = create_cycle(db_session, active=True)
    assert require_active_cycle(db_session).id == c.id


def test_activate_cycle_switches_active(db_session):
    a = create_cycle(db_session, "A", 2025, active=True)
    b = create_cycle(db_session, "B", 2026, active=False)

    activate_cycle(db_session, b)
    db_session.commit()

    assert get_active_cycle(db_session).id == b.id
    db_session.refresh(a)
    assert a.is_active is False


def test_database_rejects_two_active_cycles(db_session):
    create_cycle(db_session, "A", 2025, active=True)
    with pytest.raises(IntegrityError):
        create_cycle(db_session, "B", 2026, active=True)
    db_session.rollback()
