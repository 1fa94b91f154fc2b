from fastapi.testclient import TestClient

from feedback360.main import app
from feedback360.models.manager_review import ManagerReview
from tests.helpers import add_peer_feedback, create_cycle, create_employee, create_request, login


def review_body(employee, **overrides):
    body = {
        "employeeId": str(employee.id),
        "performanceRating": 4,
        "goalsAchieved": "Shipped the billing migration on time",
        "areasOfGrowth": "More ownership of on-call follow-ups",
        "trainingNeeds": "",
        "promotionReadiness": "Ready in 6 months",
        "overallComments": "A dependable engineer with a strong year",
    }
    body.update(overrides)
    return body


def setup_team(db_session):
    cycle = create_cycle(db_session)
    manager = create_employee(db_session, "Mona Manager", email="mona@example.com", role="manager")
    report = create_employee(db_session, "Ravi Report", email="ravi@example.com", manager=manager)
    return cycle, manager, report


def test_submit_completed_review(db_session):
    cycle, manager, report = setup_team(db_session)
    client = TestClient(app)
    login(client, db_session, "mona@example.com")

    r = client.post("/api/manager-reviews", json=review_body(report))
    assert r.status_code == 200
    body = r.json()
    assert body["managerId"] == str(manager.id)
    assert body["employeeId"] == str(report.id)
    assert body["appraisalCycleId"] == str(cycle.id)
    assert body["status"] == "completed"
    assert body["submittedAt"] is not None
    assert body["trainingNeeds"] is None


def test_resubmission_overwrites_the_same_row(db_session):
    _, _, report = setup_team(db_session)
    client = TestClient(app)
    login(client, db_session, "mona@example.com")

    first = client.post("/api/manager-reviews", json=review_body(report, status="in_progress")).json()
    assert first["submittedAt"] is None

    second = client.post("/api/manager-reviews", json=review_body(report, performanceRating=2)).json()
    assert second["id"] == first["id"]
    assert second["performanceRating"] == 2
    assert second["status"] == "completed"
    assert second["submittedAt"] is not None

    db_session.expire_all()
    assert db_session.query(ManagerReview).count() == 1


def test_cannot_review_someone_elses_report(db_session):
    _, _, _ = setup_team(db_session)
    other_manager = create_employee(db_session, "Omar Other", role="manager")
    stranger = create_employee(db_session, "Sam Stranger", manager=other_manager)

    client = TestClient(app)
    login(client, db_session, "mona@example.com")

    # Ownership wins over a body that would not validate
    r = client.post("/api/manager-reviews", json={"employeeId": str(stranger.id), "performanceRating": 9})
    assert r.status_code == 403
    assert db_session.query(ManagerReview).count() == 0


def test_plain_employee_cannot_submit(db_session):
    _, manager, report = setup_team(db_session)
    client = TestClient(app)
    login(client, db_session, "ravi@example.com")

    r = client.post("/api/manager-reviews", json=review_body(manager))
    assert r.status_code == 403


def test_lead_may_review_direct_reports(db_session):
    create_cycle(db_session)
    lead = create_employee(db_session, "Lena Lead", email="lena@example.com", role="lead")
    report = create_employee(db_session, "Dev Direct", manager=lead)

    client = TestClient(app)
    login(client, db_session, "lena@example.com")
    r = client.post("/api/manager-reviews", json=review_body(report))
    assert r.status_code == 200


def test_review_requires_active_cycle(db_session):
    create_cycle(db_session, active=False)
    manager = create_employee(db_session, "Mona Manager", email="mona@example.com", role="manager")
    report = create_employee(db_session, "Ravi Report", manager=manager)

    client = TestClient(app)
    login(client, db_session, "mona@example.com")
    r = client.post("/api/manager-reviews", json=review_body(report))
    assert r.status_code == 400
    assert r.json()["code"] == "no_active_cycle"


def test_review_validation(db_session):
    _, _, report = setup_team(db_session)
    client = TestClient(app)
    login(client, db_session, "mona@example.com")

    r = client.post("/api/manager-reviews", json=review_body(report, performanceRating=0, goalsAchieved="meh"))
    assert r.status_code == 400
    fields = {e["field"] for e in r.json()["errors"]}
    assert fields == {"performanceRating", "goalsAchieved"}


def test_team_members(db_session):
    cycle, manager, report = setup_team(db_session)
    peer = create_employee(db_session, "Pia Peer")
    create_employee(db_session, "Nico Notmine")
    add_peer_feedback(db_session, create_request(db_session, cycle, peer, report))

    client = TestClient(app)
    login(client, db_session, "mona@example.com")
    client.post("/api/manager-reviews", json=review_body(report))

    r = client.get("/api/manager/team-members")
    assert r.status_code == 200
    members = r.json()
    assert len(members) == 1
    assert members[0]["employee"]["id"] == str(report.id)
    assert members[0]["hasPeerFeedback"] is True
    assert members[0]["review"]["status"] == "completed"


def test_team_members_empty_for_plain_employee(db_session):
    setup_team(db_session)
    client = TestClient(app)
    login(client, db_session, "ravi@example.com")

    r = client.get("/api/manager/team-members")
    assert r.status_code == 200
    assert r.json() == []


def test_completed_review_cannot_be_reopened(db_session):
    _, _, report = setup_team(db_session)
    client = TestClient(app)
    login(client, db_session, "mona@example.com")

    done = client.post("/api/manager-reviews", json=review_body(report)).json()
    r = client.post("/api/manager-reviews", json=review_body(report, status="in_progress"))
    assert r.status_code == 400
    assert r.json()["code"] == "already_completed"

    db_session.expire_all()
    review = db_session.query(ManagerReview).one()
    assert review.status == "completed"
    assert review.submitted_at is not None

    # Completed -> completed is still an overwrite
    again = client.post("/api/manager-reviews", json=review_body(report, performanceRating=5)).json()
    assert again["id"] == done["id"]
    assert again["performanceRating"] == 5
