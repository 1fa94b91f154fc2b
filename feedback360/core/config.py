from pathlib import Path
import os
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]  # repo root

ENV_FILE = os.getenv("ENV_FILE", str(BASE_DIR / ".env"))

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=ENV_FILE, extra="ignore")

    APP_ENV: str = "local"
    DATABASE_URL: str
    CORS_ORIGINS: str = "*"  # Comma-separated list of allowed origins, or "*" for all
    LOG_LEVEL: str = "INFO"

    # Signed cookie sessions (employee / manager console / admin console)
    SESSION_SECRET: str = "change-me-in-production"
    SESSION_TTL_SECONDS: int = 7 * 24 * 60 * 60
    SESSION_HTTPS_ONLY: bool = False

    # Shared console credentials
    MANAGER_USERNAME: str = "manager"
    MANAGER_PASSWORD: str = "manager"
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = "admin"

    MANAGER_LOGIN_MAX_ATTEMPTS: int = 5
    MANAGER_LOGIN_LOCKOUT_SECONDS: int = 15 * 60

    OTP_TTL_MINUTES: int = 10

    # Outbound mail; leave SMTP_HOST empty to log messages instead of sending
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM: str = "360 Feedback <no-reply@feedback360.local>"
    SMTP_USE_TLS: bool = True
    APP_BASE_URL: str = "http://localhost:5000"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list, handling '*' for development"""
        if self.CORS_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

settings = Settings()
