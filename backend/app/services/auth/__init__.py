from app.services.auth.login_service import current_user, login
from app.services.auth.otp_service import select_tenant, send_otp, verify_otp
from app.services.auth.passwords import hash_password, verify_password
from app.services.auth.tokens import decode_token, issue_token

__all__ = [
    "current_user",
    "decode_token",
    "hash_password",
    "issue_token",
    "login",
    "select_tenant",
    "send_otp",
    "verify_otp",
    "verify_password",
]
