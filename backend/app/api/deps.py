"""
Request dependencies: bearer session, role guards and the admin key for tenant bootstrap.
"""
from fastapi import Depends, Header

from app.config import settings
from app.core.constants import USER_OWNER, USER_STAFF
from app.core.errors import Forbidden, Unauthorized
from app.core.session import SessionContext
from app.services.auth.tokens import decode_token


def get_session(authorization: str | None = Header(None)) -> SessionContext:
    """SessionContext from `Authorization: Bearer <jwt>`; 401 when missing or invalid."""
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthorized("Missing bearer token")
    ctx = decode_token(token.strip())
    if not ctx.tenant_id:
        raise Unauthorized("Token is not bound to a business")
    return ctx


def require_roles(*roles: str):
    """Dependency factory: 403 unless the session user_type is one of roles."""

    def _guard(ctx: SessionContext = Depends(get_session)) -> SessionContext:
        if ctx.user_type not in roles:
            raise Forbidden(f"This action requires one of: {', '.join(roles)}")
        return ctx

    return _guard


require_owner = require_roles(USER_OWNER)
require_team = require_roles(USER_OWNER, USER_STAFF)


def require_admin_key(x_admin_key: str | None = Header(None, alias="X-Admin-Key")) -> None:
    if not settings.admin_api_key:
        raise Forbidden("Tenant bootstrap is disabled (ADMIN_API_KEY not set)")
    if (x_admin_key or "").strip() != settings.admin_api_key:
        raise Unauthorized("Invalid admin key")
