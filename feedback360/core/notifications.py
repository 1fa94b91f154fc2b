import logging
import smtplib
from email.message import EmailMessage
from typing import Protocol

from feedback360.core.config import settings

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    def send(self, to: str, subject: str, body: str) -> None: ...


class SmtpMailer:
    """Plain SMTP delivery. Raises on failure; callers decide whether that is fatal."""

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str = "",
        password: str = "",
        from_email: str = "",
        use_tls: bool = True,
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_email = from_email
        self.use_tls = use_tls
        self.timeout = timeout

    def send(self, to: str, subject: str, body: str) -> None:
        msg = EmailMessage()
        msg["From"] = self.from_email
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(body)

        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            if self.use_tls:
                server.starttls()
            if self.username:
                server.login(self.username, self.password)
            server.send_message(msg)


class LogMailer:
    """Used when no SMTP host is configured (local development)."""

    def send(self, to: str, subject: str, body: str) -> None:
        logger.info("Email not sent, SMTP disabled", extra={"to": to, "subject": subject, "body": body})


def build_mailer() -> Mailer:
    if not settings.SMTP_HOST:
        return LogMailer()
    return SmtpMailer(
        host=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.SMTP_USERNAME,
        password=settings.SMTP_PASSWORD,
        from_email=settings.SMTP_FROM,
        use_tls=settings.SMTP_USE_TLS,
    )


_mailer = build_mailer()


def get_mailer() -> Mailer:
    return _mailer


def send_otp_email(mailer: Mailer, to: str, code: str) -> bool:
    subject = f"{code} is your 360 Feedback verification code"
    body = (
        f"Your verification code is {code}.\n\n"
        f"It expires in {settings.OTP_TTL_MINUTES} minutes. "
        "If you did not request it, you can ignore this email.\n"
    )
    try:
        mailer.send(to, subject, body)
    except Exception:
        logger.exception("Failed to send verification code", extra={"to": to})
        return False
    return True


def send_feedback_assignment_email(mailer: Mailer, to: str, reviewer_name: str, target_name: str) -> bool:
    subject = f"Action Required: Provide feedback for {target_name}"
    body = (
        f"Hi {reviewer_name},\n\n"
        f"You have been asked to provide 360 feedback for {target_name}.\n"
        f"Sign in at {settings.APP_BASE_URL} and open My Feedback Tasks to submit it.\n"
    )
    try:
        mailer.send(to, subject, body)
    except Exception:
        logger.exception("Failed to send feedback assignment email", extra={"to": to})
        return False
    logger.info("Feedback assignment email sent", extra={"to": to, "target": target_name})
    return True
