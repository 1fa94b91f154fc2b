import smtplib
from datetime import datetime, timedelta

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from feedback360.core.clock import utcnow
from feedback360.models.appraisal_cycle import AppraisalCycle
from feedback360.models.employee import Employee
from feedback360.models.feedback_request import FeedbackRequest
from feedback360.models.otp_code import OtpCode
from feedback360.models.peer_feedback import PeerFeedback

TEST_CODE = "123456"


class RecordingMailer:
    """
    Collects outgoing mail. Addresses in ``fail_for`` are refused like a real
    SMTP server would; ``error`` is raised for every message when set.
    """

    def __init__(self):
        self.sent: list[dict] = []
        self.fail_for: set[str] = set()
        self.error: Exception | None = None

    def send(self, to: str, subject: str, body: str) -> None:
        if self.error is not None:
            raise self.error
        if to in self.fail_for:
            raise smtplib.SMTPRecipientsRefused({to: (550, b"mailbox unavailable")})
        self.sent.append({"to": to, "subject": subject, "body": body})


class FakeClock:
    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def create_employee(
    db: Session,
    name: str,
    email: str | None = None,
    role: str = "employee",
    manager: Employee | None = None,
    lead: Employee | None = None,
    department: str = "Engineering",
) -> Employee:
    e = Employee(
        name=name,
        email=email or f"{name.lower().replace(' ', '.')}@example.com",
        role=role,
        department=department,
        designation="Engineer",
        manager_id=manager.id if manager else None,
        lead_id=lead.id if lead else None,
    )
    db.add(e)
    db.commit()
    db.refresh(e)
    return e


def create_cycle(db: Session, name: str = "2026 Annual Review", year: int = 2026, active: bool = True) -> AppraisalCycle:
    c = AppraisalCycle(
        name=name,
        year=year,
        start_date=datetime(year, 1, 1),
        end_date=datetime(year, 12, 31),
        is_active=active,
    )
    db.add(c)
    db.commit()
    db.refresh(c)
    return c


def create_request(
    db: Session,
    cycle: AppraisalCycle,
    reviewer: Employee,
    target: Employee,
    status: str = "pending",
) -> FeedbackRequest:
    fr = FeedbackRequest(
        appraisal_cycle_id=cycle.id,
        reviewer_employee_id=reviewer.id,
        target_employee_id=target.id,
        status=status,
    )
    db.add(fr)
    db.commit()
    db.refresh(fr)
    return fr


def add_peer_feedback(
    db: Session,
    fr: FeedbackRequest,
    ratings=(4, 5, 3, 4, 5),
    submitted_at: datetime | None = None,
) -> PeerFeedback:
    """Store feedback directly, bypassing the API, and mark the request submitted."""
    t, c, tw, ps, ld = ratings
    fb = PeerFeedback(
        feedback_request_id=fr.id,
        reviewer_id=fr.reviewer_employee_id,
        target_employee_id=fr.target_employee_id,
        appraisal_cycle_id=fr.appraisal_cycle_id,
        technical_skills=t,
        communication=c,
        teamwork=tw,
        problem_solving=ps,
        leadership=ld,
        strengths="Reliable and thorough in reviews",
        areas_of_improvement="Could delegate more often",
        submitted_at=submitted_at or utcnow(),
    )
    fr.status = "submitted"
    db.add(fb)
    db.commit()
    db.refresh(fb)
    return fb


def issue_known_code(db: Session, email: str, code: str = TEST_CODE, expires_in: timedelta = timedelta(minutes=10)) -> OtpCode:
    otp = OtpCode(email=email.lower(), code=code, expires_at=utcnow() + expires_in, used=False)
    db.add(otp)
    db.commit()
    return otp


def login(client: TestClient, db: Session, email: str):
    """Sign in through the one-time-code flow; the client keeps the session cookie."""
    issue_known_code(db, email)
    r = client.post("/api/auth/verify-otp", json={"email": email, "code": TEST_CODE})
    assert r.status_code == 200, r.text
    return r


def manager_login(client: TestClient):
    r = client.post("/api/auth/manager-login", json={"managerId": "manager", "password": "manager"})
    assert r.status_code == 200, r.text
    return r


def admin_login(client: TestClient):
    r = client.post("/api/auth/admin-login", json={"username": "admin", "password": "admin"})
    assert r.status_code == 200, r.text
    return r


def peer_feedback_body(fr: FeedbackRequest, **overrides) -> dict:
    body = {
        "feedbackRequestId": str(fr.id),
        "technicalSkills": 4,
        "communication": 5,
        "teamwork": 3,
        "problemSolving": 4,
        "leadership": 5,
        "strengths": "Explains complex topics clearly",
        "areasOfImprovement": "Could document decisions more",
        "additionalComments": "Great teammate",
    }
    body.update(overrides)
    return body
