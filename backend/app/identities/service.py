# These functions are decoupled from FastAPI so they can be called
# from route handlers, the invite services, or tests: just pass a db
# session explicitly.

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.identities.models import ADMIN_ROLES, IdentityDB


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def get_identity_by_email(email: str, db: AsyncSession) -> IdentityDB | None:
    """Look up an identity by email. Returns None if not found."""
    result = await db.execute(
        select(IdentityDB).where(IdentityDB.email == normalize_email(email))
    )
    return result.scalar_one_or_none()


async def get_identity_by_credential(
    credential_id: str, db: AsyncSession
) -> IdentityDB | None:
    result = await db.execute(
        select(IdentityDB).where(IdentityDB.credential_id == credential_id)
    )
    return result.scalar_one_or_none()


async def is_reserved_for_admin(email: str, db: AsyncSession) -> bool:
    """True when the email already belongs to an admin or super_admin identity."""
    result = await db.execute(
        select(IdentityDB.id).where(
            IdentityDB.email == normalize_email(email),
            IdentityDB.role.in_(ADMIN_ROLES),
        )
    )
    return result.first() is not None
