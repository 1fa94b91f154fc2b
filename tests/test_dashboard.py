from fastapi.testclient import TestClient

from feedback360.main import app
from tests.helpers import add_peer_feedback, create_cycle, create_employee, create_request, login


def test_dashboard_for_reviewer(db_session):
    cycle = create_cycle(db_session)
    me = create_employee(db_session, "Mia Me", email="mia@example.com")
    targets = [create_employee(db_session, f"Target {n}") for n in range(7)]
    for t in targets[:6]:
        create_request(db_session, cycle, me, t)
    add_peer_feedback(db_session, create_request(db_session, cycle, me, targets[6]))

    client = TestClient(app)
    login(client, db_session, "mia@example.com")
    r = client.get("/api/dashboard")
    assert r.status_code == 200
    body = r.json()
    assert body["employee"]["id"] == str(me.id)
    assert body["pendingFeedbackCount"] == 6
    assert body["completedFeedbackCount"] == 1
    assert body["myLatestRating"] is None
    assert body["activeCycle"]["id"] == str(cycle.id)
    assert len(body["recentFeedbackRequests"]) == 5
    assert all(fr["status"] == "pending" for fr in body["recentFeedbackRequests"])
    assert all(fr["targetEmployee"] is not None for fr in body["recentFeedbackRequests"])


def test_dashboard_without_employee_record(db_session):
    client = TestClient(app)
    login(client, db_session, "visitor@example.com")

    body = client.get("/api/dashboard").json()
    assert body["employee"] is None
    assert body["pendingFeedbackCount"] == 0
    assert body["completedFeedbackCount"] == 0
    assert body["activeCycle"] is None
    assert body["recentFeedbackRequests"] == []


def test_me_employee(db_session):
    me = create_employee(db_session, "Mia Me", email="mia@example.com")
    client = TestClient(app)
    login(client, db_session, "mia@example.com")
    assert client.get("/api/me/employee").json()["id"] == str(me.id)

    other = TestClient(app)
    login(other, db_session, "visitor@example.com")
    assert other.get("/api/me/employee").json() is None


def test_employee_directory(db_session):
    lead = create_employee(db_session, "Lena Lead", role="lead")
    create_employee(db_session, "Ann Analyst", email="ann@example.com", lead=lead)
    client = TestClient(app)
    assert client.get("/api/employees").status_code == 401

    login(client, db_session, "ann@example.com")
    rows = client.get("/api/employees").json()
    assert [e["name"] for e in rows] == ["Ann Analyst", "Lena Lead"]
    assert rows[0]["lead"]["name"] == "Lena Lead"
