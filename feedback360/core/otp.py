import secrets
from datetime import timedelta

from sqlalchemy import update
from sqlalchemy.orm import Session

from feedback360.core.clock import utcnow
from feedback360.core.config import settings
from feedback360.models.otp_code import OtpCode


def generate_code() -> str:
    # 100000-999999, never a leading zero
    return str(100000 + secrets.randbelow(900000))


def issue_code(db: Session, email: str) -> OtpCode:
    otp = OtpCode(
        email=email.lower(),
        code=generate_code(),
        expires_at=utcnow() + timedelta(minutes=settings.OTP_TTL_MINUTES),
        used=False,
    )
    db.add(otp)
    db.flush()
    return otp


def consume_code(db: Session, email: str, code: str) -> bool:
    """Mark a matching unused, unexpired code as used. Returns False if none matched."""
    now = utcnow()
    otp = (
        db.query(OtpCode)
        .filter(
            OtpCode.email == email.lower(),
            OtpCode.code == code,
            OtpCode.used.is_(False),
            OtpCode.expires_at > now,
        )
        .order_by(OtpCode.created_at.desc())
        .first()
    )
    if not otp:
        return False

    # Conditional so two concurrent verifications cannot both win
    result = db.execute(
        update(OtpCode)
        .where(OtpCode.id == otp.id, OtpCode.used.is_(False))
        .values(used=True)
    )
    return result.rowcount == 1
