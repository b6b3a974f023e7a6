import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import assert_never
from uuid import UUID

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.auth.access import Access, AccessRole
from app.database import is_unique_violation
from app.employees.models import EMPLOYEE_ROLE
from app.employees.service import count_employees
from app.errors import (
    Conflict,
    Forbidden,
    PlanLimitExceeded,
    StorageError,
    ValidationError,
)
from app.identities.service import is_reserved_for_admin, normalize_email
from app.invites.models import InviteDB, InviteStatus
from app.invites.settings import invite_settings
from app.workspaces.models import WorkspaceDB, is_platform_workspace
from app.workspaces.plans import get_plan, is_at_limit

logger = logging.getLogger(__name__)

# 16 bytes = 128 bits of entropy
INVITE_TOKEN_BYTES = 16


def generate_invite_token() -> str:
    return secrets.token_urlsafe(INVITE_TOKEN_BYTES)


def token_preview(token: str) -> str:
    return f"{token[:8]}..."


def validate_invite_email(email: str) -> str:
    """Syntactic check only, no DNS lookup. Returns the normalized address."""
    try:
        validated = validate_email(email.strip(), check_deliverability=False)
    except EmailNotValidError as e:
        raise ValidationError(f"Invalid email: {e}") from e
    return normalize_email(validated.normalized)


def authorize_invite_scope(workspace_id: UUID | None, invoker: Access) -> None:
    """super_admin invites are platform-wide, admin invites target their own workspace."""
    match invoker.role:
        case AccessRole.super_admin:
            if workspace_id is not None:
                raise Forbidden("super_admin invites must not target a workspace")
        case AccessRole.admin:
            if workspace_id is None or workspace_id != invoker.workspace_id:
                raise Forbidden("Admins can only invite into their own workspace")
            if is_platform_workspace(workspace_id):
                raise Forbidden("Client admins cannot invite into the platform workspace")
        case AccessRole.employee:
            raise Forbidden("Employees cannot issue invites")
        case _:
            assert_never(invoker.role)


async def _check_plan_quota(workspace_id: UUID, db: AsyncSession) -> None:
    workspace = await db.get(WorkspaceDB, workspace_id)
    if workspace is None:
        raise ValidationError("Unknown workspace")

    plan = get_plan(workspace.plan)
    current = await count_employees(workspace_id, db)

    if is_at_limit(plan.max_employees, current):
        logger.warning(
            "Plan limit reached for workspace %s (%s: %d/%d)",
            workspace_id,
            plan.plan.value,
            current,
            plan.max_employees,
        )
        raise PlanLimitExceeded(plan.plan.value, plan.max_employees, current)


async def create_invite(
    email: str,
    role: str,
    workspace_id: UUID | None,
    invoker: Access,
    db: AsyncSession,
) -> InviteDB:
    """Issue a single-use employee invite.

    Checks run in a fixed order: email syntax, role, caller scope, admin
    reservation, duplicate invite, then plan quota for tenant invites.
    """
    email = validate_invite_email(email)
    if role != EMPLOYEE_ROLE:
        raise ValidationError(f"Invites can only grant the '{EMPLOYEE_ROLE}' role")
    authorize_invite_scope(workspace_id, invoker)

    try:
        return await _issue_invite(email, role, workspace_id, invoker, db)
    except IntegrityError as e:
        await db.rollback()
        if is_unique_violation(e):
            logger.info("Concurrent invite for %s lost the race", email)
            raise Conflict("An invite already exists for this email") from e
        logger.exception("Failed to create invite for %s", email)
        raise StorageError("Failed to create invite") from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Failed to create invite for %s", email)
        raise StorageError("Failed to create invite") from e


async def _issue_invite(
    email: str,
    role: str,
    workspace_id: UUID | None,
    invoker: Access,
    db: AsyncSession,
) -> InviteDB:
    if await is_reserved_for_admin(email, db):
        raise Conflict("email reserved for admin role")

    result = await db.execute(
        select(InviteDB.id).where(
            InviteDB.email == email,
            InviteDB.status.in_((InviteStatus.pending, InviteStatus.accepted)),
        )
    )
    if result.first() is not None:
        raise Conflict("An invite already exists for this email")

    if workspace_id is not None:
        await _check_plan_quota(workspace_id, db)

    invite = InviteDB(
        email=email,
        role=role,
        workspace_id=workspace_id,
        token=generate_invite_token(),
        invited_by=invoker.identity_id,
        expires_at=datetime.now(timezone.utc)
        + timedelta(days=invite_settings.invite_ttl_days),
    )
    db.add(invite)
    await db.commit()
    await db.refresh(invite)

    logger.info(
        "Invite %s created for %s by %s (workspace=%s, token=%s)",
        invite.id,
        email,
        invoker.role.value,
        workspace_id or "platform",
        token_preview(invite.token),
    )
    return invite


async def get_valid_invite(token: str, db: AsyncSession) -> InviteDB | None:
    """Return the invite if it's pending and not expired, else None.

    Expiry is compared in SQL so the check does not depend on how the
    driver round-trips timezones.
    """
    result = await db.execute(
        select(InviteDB).where(
            InviteDB.token == token,
            InviteDB.status == InviteStatus.pending,
            InviteDB.expires_at > datetime.now(timezone.utc),
        )
    )
    return result.scalar_one_or_none()


async def list_pending_invites(invoker: Access, db: AsyncSession) -> list[InviteDB]:
    """Pending invites visible to the caller: platform-wide for super_admin,
    the caller's own workspace for admin."""
    query = select(InviteDB).where(InviteDB.status == InviteStatus.pending)
    if invoker.role == AccessRole.super_admin:
        query = query.where(InviteDB.workspace_id.is_(None))
    else:
        query = query.where(InviteDB.workspace_id == invoker.workspace_id)
    result = await db.execute(query.order_by(InviteDB.created_at.desc()))
    return list(result.scalars().all())


def build_invite_url(token: str) -> str:
    return f"{invite_settings.frontend_url}/invite?token={token}"
