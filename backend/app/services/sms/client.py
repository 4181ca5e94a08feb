"""SMS API client: lowest level, sends request only. Returns {"ok": ...} or {"error": ...}."""
import logging
from typing import Any

import httpx

from app.services.sms.config import SmsConfig

logger = logging.getLogger(__name__)

# Provider reply is "<code> <bulk id>"; 00/01 mean accepted
SUCCESS_CODES = ("00", "01")
ERROR_MESSAGES = {
    "20": "Message text is invalid or too long",
    "30": "Invalid credentials or no API access",
    "40": "Sender header is not registered",
    "50": "Account has no API access",
    "51": "Invalid date format",
    "70": "Malformed request",
    "85": "Invalid characters in message",
}


class SmsClient:
    """Single-recipient SMS sender."""

    def __init__(self, config: SmsConfig | None = None) -> None:
        self._config = config or SmsConfig()

    def is_configured(self) -> bool:
        return self._config.is_configured()

    def send(self, phone: str, message: str, *, timeout: float = 15.0) -> dict[str, Any]:
        if not self._config.is_configured():
            return {"error": "SMS credentials not configured. Add SMS_USERCODE and SMS_PASSWORD to .env."}
        params = {
            "usercode": self._config.usercode,
            "password": self._config.password,
            "gsmno": phone,
            "message": message,
            "msgheader": self._config.msgheader,
        }
        try:
            with httpx.Client(timeout=timeout) as c:
                r = c.get(self._config.api_url, params=params)
        except httpx.HTTPError as e:
            return {"error": str(e)}
        if not r.is_success:
            return {"error": f"SMS API error: {r.status_code}", "detail": (r.text[:500] if r.text else None)}
        parts = (r.text or "").strip().split()
        code = parts[0] if parts else ""
        if code in SUCCESS_CODES:
            return {"ok": True, "code": code, "bulk_id": parts[1] if len(parts) > 1 else None}
        return {"error": ERROR_MESSAGES.get(code, f"SMS API returned code {code or '(empty)'}"), "code": code}
