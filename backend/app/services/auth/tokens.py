"""
Bearer tokens (HS256 JWT) <-> SessionContext.

Expiry is checked by PyJWT against the real wall clock, so tokens are stamped with real time
rather than the injectable scheduling Clock.
"""
from datetime import datetime, timedelta, timezone

import jwt

from app.config import settings
from app.core.constants import USER_TYPES
from app.core.errors import Unauthorized
from app.core.session import SessionContext


def issue_token(ctx: SessionContext, expires_in: timedelta | None = None) -> str:
    issued = datetime.now(timezone.utc)
    payload = {
        "sub": ctx.subject,
        "user_type": ctx.user_type,
        "tenant_id": ctx.tenant_id,
        "staff_id": ctx.staff_id,
        "customer_id": ctx.customer_id,
        "phone": ctx.phone,
        "iat": issued,
        "exp": issued + (expires_in if expires_in is not None else timedelta(days=settings.jwt_expires_days)),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> SessionContext:
    """Raises Unauthorized for expired, tampered or incomplete tokens."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token expired")
    except jwt.PyJWTError:
        raise Unauthorized("Invalid token")
    user_type = payload.get("user_type")
    subject = payload.get("sub")
    if user_type not in USER_TYPES or not subject:
        raise Unauthorized("Invalid token")
    return SessionContext(
        user_type=user_type,
        tenant_id=payload.get("tenant_id"),
        subject=subject,
        staff_id=payload.get("staff_id"),
        customer_id=payload.get("customer_id"),
        phone=payload.get("phone"),
    )
