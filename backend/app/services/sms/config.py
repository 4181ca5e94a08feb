"""SMS provider config. Credentials come from Settings (SMS_USERCODE, SMS_PASSWORD, SMS_MSGHEADER)."""
from app.config import settings


class SmsConfig:
    """Credentials and endpoint for the NetGSM-style HTTP GET API."""

    __slots__ = ("usercode", "password", "msgheader", "api_url")

    def __init__(
        self,
        *,
        usercode: str | None = None,
        password: str | None = None,
        msgheader: str | None = None,
        api_url: str | None = None,
    ) -> None:
        self.usercode = (usercode or settings.sms_usercode).strip()
        self.password = (password or settings.sms_password).strip()
        # Sender header defaults to the usercode, as the provider expects when none is registered
        self.msgheader = (msgheader or settings.sms_msgheader or self.usercode).strip()
        self.api_url = api_url or settings.sms_api_url

    def is_configured(self) -> bool:
        return bool(self.usercode and self.password)
