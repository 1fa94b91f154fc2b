import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session

from feedback360.core.config import settings
from feedback360.core.errors import DeliveryFailed, NotAuthenticated, validation_failed_from
from feedback360.core.notifications import Mailer, get_mailer, send_otp_email
from feedback360.core.otp import consume_code, issue_code
from feedback360.core.rate_limit import LoginAttemptTracker, get_manager_login_tracker
from feedback360.core.security import (
    credentials_match,
    current_admin_session,
    current_manager_session,
    end_admin_session,
    end_all_sessions,
    end_manager_session,
    get_current_user,
    start_admin_session,
    start_employee_session,
    start_manager_session,
)
from feedback360.db.session import get_db
from feedback360.models.employee import Employee
from feedback360.models.user import User
from feedback360.schemas.auth import (
    AdminLoginRequest,
    ConsoleUserOut,
    LoginResponse,
    ManagerLoginRequest,
    ManagerLoginResponse,
    ManagerStatusOut,
    SendOtpRequest,
    UserOut,
    VerifyOtpRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])

MANAGER_CONSOLE_USER = ConsoleUserOut(
    id="manager-admin",
    email="manager@360feedback.local",
    first_name="Manager",
    last_name="Admin",
)


def _client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


@router.post("/auth/send-otp")
def send_otp(
    payload: SendOtpRequest,
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    email = payload.email.lower()
    otp = issue_code(db, email)
    db.commit()

    if not send_otp_email(mailer, email, otp.code):
        raise DeliveryFailed("Failed to send verification code")

    logger.info("Verification code sent", extra={"email": email})
    return {"message": "Verification code sent", "email": email}


@router.post("/auth/verify-otp", response_model=LoginResponse)
def verify_otp(
    payload: VerifyOtpRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    email = payload.email.lower()
    if not consume_code(db, email, payload.code):
        logger.info("Verification code rejected", extra={"email": email})
        raise NotAuthenticated("Invalid or expired verification code")

    user = db.query(User).filter(User.email == email).one_or_none()
    if not user:
        user = User(email=email, first_name=email.split("@")[0], last_name="")
        db.add(user)
        db.flush()

    # Link the employee record(s) carrying this email to the signed-in user
    db.query(Employee).filter(Employee.email == email).update({Employee.user_id: user.id})
    db.commit()

    start_employee_session(request, user)
    logger.info("Employee signed in", extra={"user_id": str(user.id)})
    return LoginResponse(message="Login successful", user=UserOut.model_validate(user))


@router.get("/auth/user", response_model=UserOut)
def auth_user(current_user: User = Depends(get_current_user)):
    return UserOut.model_validate(current_user)


@router.post("/logout")
def logout(request: Request):
    end_all_sessions(request)
    return {"success": True}


@router.post("/auth/manager-login", response_model=ManagerLoginResponse)
def manager_login(
    request: Request,
    body: dict[str, Any] | None = Body(default=None),
    tracker: LoginAttemptTracker = Depends(get_manager_login_tracker),
):
    key = _client_key(request)
    # Locked-out clients are refused before the credentials are even looked at
    tracker.check(key)

    try:
        payload = ManagerLoginRequest.model_validate(body or {})
    except ValidationError as exc:
        raise validation_failed_from(exc)

    if not credentials_match(payload.manager_id, payload.password, settings.MANAGER_USERNAME, settings.MANAGER_PASSWORD):
        failures = tracker.record_failure(key)
        logger.warning("Manager login failed", extra={"client": key, "failures": failures})
        raise NotAuthenticated("Invalid credentials")

    tracker.reset(key)
    start_manager_session(request, payload.manager_id)
    logger.info("Manager console login", extra={"client": key})
    return ManagerLoginResponse(message="Login successful", user=MANAGER_CONSOLE_USER)


@router.get("/auth/manager-status", response_model=ManagerStatusOut, response_model_exclude_none=True)
def manager_status(request: Request):
    if current_manager_session(request) is None:
        raise NotAuthenticated("Manager session required")
    return ManagerStatusOut(authenticated=True, user=MANAGER_CONSOLE_USER)


@router.post("/auth/manager-logout")
def manager_logout(request: Request):
    end_manager_session(request)
    return {"success": True}


@router.post("/auth/admin-login")
def admin_login(payload: AdminLoginRequest, request: Request):
    if not credentials_match(payload.username, payload.password, settings.ADMIN_USERNAME, settings.ADMIN_PASSWORD):
        logger.warning("Admin login failed", extra={"client": _client_key(request)})
        raise NotAuthenticated("Invalid admin credentials")

    start_admin_session(request)
    logger.info("Admin console login", extra={"client": _client_key(request)})
    return {"success": True, "message": "Admin login successful"}


@router.post("/auth/admin-logout")
def admin_logout(request: Request):
    end_admin_session(request)
    return {"success": True}


@router.get("/auth/admin-check")
def admin_check(request: Request):
    return {"isAdmin": current_admin_session(request) is not None}
