"""SMS delivery: phone normalization and a raising send helper on top of SmsClient."""
import logging
import re

from app.config import settings
from app.core.errors import SmsDeliveryError
from app.services.sms.client import SmsClient
from app.services.sms.config import SmsConfig

logger = logging.getLogger(__name__)

default_client = SmsClient()


def normalize_phone(phone: str, country_code: str | None = None) -> str:
    """Digits only, national leading 0 dropped, country code prefixed (0555 123 45 67 -> 905551234567)."""
    cc = country_code or settings.phone_country_code
    digits = re.sub(r"\D", "", phone or "")
    if digits.startswith("0"):
        digits = digits[1:]
    if digits and not digits.startswith(cc):
        digits = cc + digits
    return digits


def send_sms(client: SmsClient, phone: str, message: str) -> dict:
    """Send one SMS; raises SmsDeliveryError when the provider rejects it."""
    result = client.send(normalize_phone(phone), message)
    if result.get("error"):
        logger.warning("SMS to %s failed: %s", phone, result["error"])
        raise SmsDeliveryError(result["error"])
    logger.info("SMS sent to %s bulk_id=%s", phone, result.get("bulk_id"))
    return result


def get_sms_client() -> SmsClient:
    """FastAPI dependency; override in tests with a fake that records messages."""
    return default_client


__all__ = ["SmsClient", "SmsConfig", "default_client", "get_sms_client", "normalize_phone", "send_sms"]
