"""
Application settings (Pydantic Settings).
"""
import logging
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# .env next to backend/ (parent of app/)
_env_path = Path(__file__).resolve().parent.parent / ".env"

logger = logging.getLogger(__name__)

DEV_JWT_SECRET = "dev-secret-change-me"


class Settings(BaseSettings):
    database_url: str = "sqlite:///./salon.db"
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"

    # Mobile/admin bearer tokens
    jwt_secret: str = DEV_JWT_SECRET
    jwt_algorithm: str = "HS256"
    jwt_expires_days: int = 30

    # Phone OTP login. Demo phone skips SMS and always accepts otp_demo_code (app store review).
    otp_ttl_minutes: int = 5
    otp_demo_phone: str = "905551234567"
    otp_demo_code: str = "123456"
    phone_country_code: str = "90"

    # SMS provider (NetGSM-style GET API): SMS_USERCODE, SMS_PASSWORD, SMS_MSGHEADER in .env
    sms_api_url: str = "https://api.netgsm.com.tr/sms/send/get"
    sms_usercode: str = ""
    sms_password: str = ""
    sms_msgheader: str = ""

    # Scheduling defaults; per-tenant values override these
    default_utc_offset_minutes: int = 180  # UTC+3
    default_slot_interval_minutes: int = 30
    booking_window_days: int = 14

    # Reminder job
    reminders_enabled: bool = True
    reminder_lead_minutes: int = 120
    reminder_poll_minutes: int = 15

    # Tenant bootstrap (POST /tenants) requires X-Admin-Key
    admin_api_key: str = ""
    # Comma-separated extra CORS origins
    cors_origins: str = ""

    model_config = SettingsConfigDict(env_file=_env_path, extra="ignore")

    @field_validator("jwt_secret", "sms_usercode", "sms_password", "sms_msgheader", "admin_api_key", mode="after")
    @classmethod
    def strip_secret(cls, v: str) -> str:
        return (v or "").strip()

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("development", "dev", "test")

    def check_secrets(self) -> None:
        """Refuse to run with the built-in JWT secret outside development."""
        if self.jwt_secret and self.jwt_secret != DEV_JWT_SECRET:
            return
        if self.is_development:
            logger.warning("JWT_SECRET not set; using development secret. Do not deploy like this.")
            return
        raise ValueError("JWT_SECRET must be set when ENVIRONMENT is not development")


settings = Settings()
