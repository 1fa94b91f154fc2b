from datetime import timedelta

from fastapi.testclient import TestClient

from feedback360.main import app
from feedback360.models.otp_code import OtpCode
from feedback360.models.user import User
from tests.helpers import TEST_CODE, admin_login, create_employee, issue_known_code, login, manager_login


def test_send_otp_stores_code_and_emails_it(db_session, mailer):
    client = TestClient(app)
    r = client.post("/api/auth/send-otp", json={"email": "Ana.Silva@Example.com"})
    assert r.status_code == 200
    assert r.json()["email"] == "ana.silva@example.com"

    otp = db_session.query(OtpCode).filter(OtpCode.email == "ana.silva@example.com").one()
    assert len(otp.code) == 6 and otp.code.isdigit()
    assert otp.used is False

    assert len(mailer.sent) == 1
    assert mailer.sent[0]["to"] == "ana.silva@example.com"
    assert otp.code in mailer.sent[0]["subject"]


def test_send_otp_rejects_malformed_email(db_session, mailer):
    client = TestClient(app)
    r = client.post("/api/auth/send-otp", json={"email": "not-an-email"})
    assert r.status_code == 400
    body = r.json()
    assert body["code"] == "validation_error"
    assert body["errors"][0]["field"] == "email"
    assert mailer.sent == []


def test_send_otp_delivery_failure_is_502(db_session, mailer):
    mailer.fail_for.add("bounce@example.com")
    client = TestClient(app)
    r = client.post("/api/auth/send-otp", json={"email": "bounce@example.com"})
    assert r.status_code == 502
    assert r.json()["code"] == "delivery_failed"


def test_send_otp_unexpected_mailer_error_is_502(db_session, mailer):
    mailer.error = ValueError("Header values may not contain linefeed or carriage return characters")
    r = TestClient(app).post("/api/auth/send-otp", json={"email": "someone@example.com"})
    assert r.status_code == 502
    assert r.json()["code"] == "delivery_failed"


def test_verify_otp_is_single_use(db_session):
    issue_known_code(db_session, "ana@example.com")
    client = TestClient(app)

    r = client.post("/api/auth/verify-otp", json={"email": "ana@example.com", "code": TEST_CODE})
    assert r.status_code == 200
    assert r.json()["user"]["email"] == "ana@example.com"

    r = client.post("/api/auth/verify-otp", json={"email": "ana@example.com", "code": TEST_CODE})
    assert r.status_code == 401


def test_verify_otp_rejects_expired_code(db_session):
    issue_known_code(db_session, "ana@example.com", expires_in=timedelta(minutes=-1))
    client = TestClient(app)
    r = client.post("/api/auth/verify-otp", json={"email": "ana@example.com", "code": TEST_CODE})
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid or expired verification code"


def test_verify_otp_rejects_wrong_code(db_session):
    issue_known_code(db_session, "ana@example.com")
    client = TestClient(app)
    r = client.post("/api/auth/verify-otp", json={"email": "ana@example.com", "code": "654321"})
    assert r.status_code == 401


def test_verify_otp_creates_user_and_links_employee(db_session):
    emp = create_employee(db_session, "Ana Silva", email="ana@example.com")
    client = TestClient(app)
    login(client, db_session, "ana@example.com")

    user = db_session.query(User).filter(User.email == "ana@example.com").one()
    db_session.refresh(emp)
    assert emp.user_id == user.id

    r = client.get("/api/me/employee")
    assert r.status_code == 200
    assert r.json()["id"] == str(emp.id)
    assert r.json()["userId"] == str(user.id)


def test_auth_user_requires_session(db_session):
    client = TestClient(app)
    r = client.get("/api/auth/user")
    assert r.status_code == 401
    assert r.json()["message"] == "Unauthorized"

    login(client, db_session, "ana@example.com")
    r = client.get("/api/auth/user")
    assert r.status_code == 200
    assert r.json()["email"] == "ana@example.com"
    assert r.json()["firstName"] == "ana"


def test_logout_clears_session(db_session):
    client = TestClient(app)
    login(client, db_session, "ana@example.com")
    assert client.get("/api/auth/user").status_code == 200

    assert client.post("/api/logout").status_code == 200
    assert client.get("/api/auth/user").status_code == 401


def test_manager_login_locks_out_after_five_failures(db_session):
    client = TestClient(app)
    for _ in range(5):
        r = client.post("/api/auth/manager-login", json={"managerId": "manager", "password": "wrong"})
        assert r.status_code == 401

    # Correct credentials are refused while locked out
    r = client.post("/api/auth/manager-login", json={"managerId": "manager", "password": "manager"})
    assert r.status_code == 429
    body = r.json()
    assert body["code"] == "rate_limited"
    assert body["retryAfterMinutes"] == 15
    assert r.headers["Retry-After"] == str(15 * 60)


def test_manager_login_success_resets_failures(db_session):
    client = TestClient(app)
    for _ in range(4):
        client.post("/api/auth/manager-login", json={"managerId": "manager", "password": "wrong"})
    manager_login(client)

    for _ in range(4):
        r = client.post("/api/auth/manager-login", json={"managerId": "manager", "password": "wrong"})
        assert r.status_code == 401
    manager_login(client)


def test_manager_lockout_expires(db_session, clock):
    client = TestClient(app)
    for _ in range(5):
        client.post("/api/auth/manager-login", json={"managerId": "manager", "password": "wrong"})

    clock.advance(14 * 60)
    r = client.post("/api/auth/manager-login", json={"managerId": "manager", "password": "manager"})
    assert r.status_code == 429
    assert r.json()["retryAfterMinutes"] == 1

    clock.advance(60)
    manager_login(client)


def test_manager_login_requires_fields(db_session):
    client = TestClient(app)
    r = client.post("/api/auth/manager-login", json={"managerId": "manager"})
    assert r.status_code == 400
    assert r.json()["code"] == "validation_error"


def test_manager_status_and_logout(db_session):
    client = TestClient(app)
    assert client.get("/api/auth/manager-status").status_code == 401

    manager_login(client)
    r = client.get("/api/auth/manager-status")
    assert r.status_code == 200
    assert r.json()["authenticated"] is True
    assert r.json()["user"]["id"] == "manager-admin"

    client.post("/api/auth/manager-logout")
    assert client.get("/api/auth/manager-status").status_code == 401


def test_sessions_are_independent(db_session):
    client = TestClient(app)
    manager_login(client)
    admin_login(client)

    # Neither console login is an employee identity
    assert client.get("/api/dashboard").status_code == 401

    # Logging out of one console leaves the other alone
    client.post("/api/auth/manager-logout")
    assert client.get("/api/auth/admin-check").json() == {"isAdmin": True}


def test_admin_login(db_session):
    client = TestClient(app)
    r = client.post("/api/auth/admin-login", json={"username": "admin", "password": "nope"})
    assert r.status_code == 401
    assert client.get("/api/auth/admin-check").json() == {"isAdmin": False}

    admin_login(client)
    assert client.get("/api/auth/admin-check").json() == {"isAdmin": True}
    assert client.get("/api/admin/employees-full").status_code == 200

    client.post("/api/auth/admin-logout")
    assert client.get("/api/admin/employees-full").status_code == 401
