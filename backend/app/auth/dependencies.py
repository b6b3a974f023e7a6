from collections.abc import Callable

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.access import Access, AccessRole, resolve_access
from app.auth.settings import auth_settings
from app.auth.utils import decode_access_token
from app.database import get_db
from app.errors import Forbidden, Unauthorized


def _extract_token(request: Request) -> str | None:
    token = request.cookies.get(auth_settings.COOKIE_NAME)
    if token:
        return token
    header = request.headers.get("Authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value:
        return value
    return None


async def get_current_access(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> Access:
    """
    Resolve the caller's role and workspace from storage.
    Raises 401 if the request carries no valid provider token.
    """
    token = _extract_token(request)
    if not token:
        raise Unauthorized("Not authenticated")

    credential_id = decode_access_token(token)
    if credential_id is None:
        raise Unauthorized("Invalid or expired token")

    return await resolve_access(credential_id, db)


def require_role(*roles: AccessRole) -> Callable:
    """Factory that returns a FastAPI dependency admitting only the given roles."""

    async def dependency(
        access: Access = Depends(get_current_access),
    ) -> Access:
        if access.role not in roles:
            raise Forbidden(
                f"{' or '.join(role.value for role in roles)} access required"
            )
        return access

    return dependency


require_inviter = require_role(AccessRole.super_admin, AccessRole.admin)
