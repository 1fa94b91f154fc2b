import secrets
import time
import uuid
from dataclasses import dataclass
from typing import Any

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from feedback360.core.config import settings
from feedback360.core.errors import NotAuthenticated
from feedback360.db.session import get_db
from feedback360.models.user import User

# Each identity lives under its own key so the three logins never overwrite each other
EMPLOYEE_SESSION_KEY = "user"
MANAGER_SESSION_KEY = "manager_user"
ADMIN_SESSION_KEY = "is_admin"


def _now() -> int:
    return int(time.time())


@dataclass(frozen=True)
class EmployeeSession:
    """Signed-in employee, established by the email one-time-code flow."""

    user_id: uuid.UUID
    email: str
    expires_at: int

    @property
    def expired(self) -> bool:
        return _now() > self.expires_at

    def to_session(self) -> dict[str, Any]:
        return {"user_id": str(self.user_id), "email": self.email, "expires_at": self.expires_at}

    @classmethod
    def from_session(cls, data: Any) -> "EmployeeSession | None":
        if not isinstance(data, dict) or "user_id" not in data or "expires_at" not in data:
            return None
        try:
            return cls(user_id=uuid.UUID(data["user_id"]), email=data.get("email", ""), expires_at=int(data["expires_at"]))
        except (TypeError, ValueError):
            return None


@dataclass(frozen=True)
class ManagerSession:
    """Shared manager-console login. Not tied to any employee row."""

    username: str
    expires_at: int

    @property
    def expired(self) -> bool:
        return _now() > self.expires_at

    def to_session(self) -> dict[str, Any]:
        return {"username": self.username, "expires_at": self.expires_at}

    @classmethod
    def from_session(cls, data: Any) -> "ManagerSession | None":
        if not isinstance(data, dict) or "username" not in data or "expires_at" not in data:
            return None
        try:
            return cls(username=str(data["username"]), expires_at=int(data["expires_at"]))
        except (TypeError, ValueError):
            return None


@dataclass(frozen=True)
class AdminSession:
    """Shared admin-console login; a plain flag in the cookie."""

    @classmethod
    def from_session(cls, data: Any) -> "AdminSession | None":
        return cls() if data is True else None


def credentials_match(username: str, password: str, expected_username: str, expected_password: str) -> bool:
    # Constant-time on both halves
    ok_user = secrets.compare_digest(username.encode(), expected_username.encode())
    ok_pass = secrets.compare_digest(password.encode(), expected_password.encode())
    return ok_user and ok_pass


def session_expiry() -> int:
    return _now() + settings.SESSION_TTL_SECONDS


def start_employee_session(request: Request, user: User) -> EmployeeSession:
    sess = EmployeeSession(user_id=user.id, email=user.email, expires_at=session_expiry())
    request.session[EMPLOYEE_SESSION_KEY] = sess.to_session()
    return sess


def start_manager_session(request: Request, username: str) -> ManagerSession:
    sess = ManagerSession(username=username, expires_at=session_expiry())
    request.session[MANAGER_SESSION_KEY] = sess.to_session()
    return sess


def start_admin_session(request: Request) -> AdminSession:
    request.session[ADMIN_SESSION_KEY] = True
    return AdminSession()


def end_manager_session(request: Request) -> None:
    request.session.pop(MANAGER_SESSION_KEY, None)


def end_admin_session(request: Request) -> None:
    request.session.pop(ADMIN_SESSION_KEY, None)


def end_all_sessions(request: Request) -> None:
    request.session.clear()


def current_admin_session(request: Request) -> AdminSession | None:
    return AdminSession.from_session(request.session.get(ADMIN_SESSION_KEY))


def current_manager_session(request: Request) -> ManagerSession | None:
    sess = ManagerSession.from_session(request.session.get(MANAGER_SESSION_KEY))
    if sess is None or sess.expired:
        return None
    return sess


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the employee session cookie to a User row.
    Missing, malformed or expired sessions are rejected with 401.
    """
    sess = EmployeeSession.from_session(request.session.get(EMPLOYEE_SESSION_KEY))
    if sess is None:
        raise NotAuthenticated("Unauthorized")
    if sess.expired:
        raise NotAuthenticated("Session expired")

    user = db.get(User, sess.user_id)
    if not user:
        raise NotAuthenticated("Unauthorized")
    return user


def require_manager_session(request: Request) -> ManagerSession:
    sess = ManagerSession.from_session(request.session.get(MANAGER_SESSION_KEY))
    if sess is None:
        raise NotAuthenticated("Manager session required")
    if sess.expired:
        raise NotAuthenticated("Session expired")
    return sess


def require_admin_session(request: Request) -> AdminSession:
    sess = AdminSession.from_session(request.session.get(ADMIN_SESSION_KEY))
    if sess is None:
        raise NotAuthenticated("Admin authentication required")
    return sess
