"""Invite acceptance: turns a pending invite into a credential, an identity
and an employee row.

Every step commits on its own and is safe to repeat. A unique violation on
insert means another request (or an earlier attempt of this one) got there
first, so we roll back, re-read the row and carry on with it. The invite is
only marked accepted once the employee row exists, which means a crash
anywhere before the last step leaves the token usable for a retry.
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.credentials import (
    CredentialExistsError,
    CredentialProvider,
    CredentialProviderError,
)
from app.database import is_check_violation, is_unique_violation
from app.employees.guard import WorkspaceInvariantViolation
from app.employees.models import EmployeeDB, EmployeeStatus, InvitedByRole
from app.errors import (
    AdminCannotBecomeEmployee,
    Conflict,
    Forbidden,
    NotFoundOrExpired,
    StorageError,
    UpstreamError,
)
from app.identities.models import IdentityDB
from app.identities.service import (
    get_identity_by_email,
    is_reserved_for_admin,
    normalize_email,
)
from app.invites.models import InviteDB, InviteStatus
from app.invites.schemas import AcceptProfile, AcceptResult
from app.invites.service import get_valid_invite, token_preview
from app.workspaces.models import PLATFORM_WORKSPACE_ID

logger = logging.getLogger(__name__)


async def accept_invite(
    token: str,
    profile: AcceptProfile,
    password: str,
    db: AsyncSession,
    provider: CredentialProvider,
) -> AcceptResult:
    try:
        return await _accept(token, profile, password, db, provider)
    except WorkspaceInvariantViolation as e:
        await db.rollback()
        logger.warning("Invite %s rejected by storage guard: %s", token_preview(token), e)
        raise Forbidden(str(e)) from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Invite acceptance failed for token %s", token_preview(token))
        raise StorageError() from e


async def _accept(
    token: str,
    profile: AcceptProfile,
    password: str,
    db: AsyncSession,
    provider: CredentialProvider,
) -> AcceptResult:
    invite = await get_valid_invite(token, db)
    if invite is None:
        # Unknown, expired and already-used tokens all look the same
        raise NotFoundOrExpired()

    # Plain values only from here on; a rollback expires ORM instances
    invite_id = invite.id
    email = invite.email
    invite_workspace_id = invite.workspace_id
    platform_invite = invite.is_platform_invite

    if await is_reserved_for_admin(email, db):
        logger.warning("Invite %s targets an admin email, refusing", invite_id)
        raise Forbidden("email reserved for admin role")

    identity_id, credential_id = await _resolve_identity(email, password, db, provider)

    if platform_invite:
        workspace_id = PLATFORM_WORKSPACE_ID
        invited_by_role = InvitedByRole.super_admin
    else:
        workspace_id = invite_workspace_id
        invited_by_role = InvitedByRole.client_admin

    await _provision_employee(
        credential_id, email, workspace_id, invited_by_role, profile, db
    )
    await _mark_accepted(invite_id, db)

    logger.info(
        "Invite %s accepted by %s (workspace=%s)", invite_id, email, workspace_id
    )
    return AcceptResult(
        identity_id=identity_id,
        credential_id=credential_id,
        workspace_id=workspace_id,
    )


async def _create_credential(
    email: str, password: str, provider: CredentialProvider
) -> str:
    try:
        return await provider.create_credential(email, password)
    except CredentialExistsError as e:
        if e.credential_id:
            await _confirm_credential_owner(e.credential_id, email, provider)
            logger.info("Reusing existing credential for %s", email)
            return e.credential_id
        logger.error("Provider reported a duplicate for %s without an id", email)
        raise UpstreamError("Credential exists but the provider did not return it") from e
    except CredentialProviderError as e:
        logger.exception("Credential provider failed for %s", email)
        raise UpstreamError() from e


async def _confirm_credential_owner(
    credential_id: str, email: str, provider: CredentialProvider
) -> None:
    try:
        profile = await provider.get_credential(credential_id)
    except CredentialProviderError as e:
        logger.exception("Could not read back credential %s", credential_id)
        raise UpstreamError() from e
    if normalize_email(profile.email) != email:
        logger.error(
            "Provider returned credential %s for %s but it belongs to %s",
            credential_id,
            email,
            profile.email,
        )
        raise UpstreamError("Credential provider returned a mismatched account")


async def _resolve_identity(
    email: str, password: str, db: AsyncSession, provider: CredentialProvider
) -> tuple[UUID, str]:
    identity = await get_identity_by_email(email, db)
    if identity is not None:
        return await _link_identity(identity, email, password, db, provider)

    credential_id = await _create_credential(email, password, provider)
    identity = IdentityDB(email=email, credential_id=credential_id)
    db.add(identity)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        if not is_unique_violation(e):
            raise
        logger.info("Identity for %s created concurrently, re-reading", email)
        identity = await get_identity_by_email(email, db)
        if identity is None:
            raise StorageError("Identity missing after unique violation") from e
        return await _link_identity(identity, email, password, db, provider)

    logger.info("Created identity %s for %s", identity.id, email)
    return identity.id, credential_id


async def _link_identity(
    identity: IdentityDB,
    email: str,
    password: str,
    db: AsyncSession,
    provider: CredentialProvider,
) -> tuple[UUID, str]:
    if identity.is_admin:
        raise AdminCannotBecomeEmployee()
    if identity.credential_id is not None:
        return identity.id, identity.credential_id

    identity_id = identity.id
    credential_id = await _create_credential(email, password, provider)
    result = await db.execute(
        update(IdentityDB)
        .where(IdentityDB.id == identity_id, IdentityDB.credential_id.is_(None))
        .values(credential_id=credential_id)
        .execution_options(synchronize_session=False)
    )
    await db.commit()

    if result.rowcount == 0:
        # Someone attached a credential first; theirs wins
        stored = await db.execute(
            select(IdentityDB.credential_id).where(IdentityDB.id == identity_id)
        )
        credential_id = stored.scalar_one()
    else:
        logger.info("Attached credential to existing identity %s", identity_id)
    return identity_id, credential_id


async def _provision_employee(
    credential_id: str,
    email: str,
    workspace_id: UUID,
    invited_by_role: InvitedByRole,
    profile: AcceptProfile,
    db: AsyncSession,
) -> None:
    db.add(
        EmployeeDB(
            credential_id=credential_id,
            email=email,
            workspace_id=workspace_id,
            invited_by_role=invited_by_role,
            status=EmployeeStatus.active,
            full_name=profile.full_name,
            phone=profile.phone,
        )
    )
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        if is_check_violation(e):
            logger.warning("Employee insert for %s rejected by trigger: %s", email, e.orig)
            raise Forbidden("Employee record violates workspace rules") from e
        if not is_unique_violation(e):
            raise
    else:
        logger.info("Provisioned employee %s in workspace %s", email, workspace_id)
        return

    result = await db.execute(
        select(EmployeeDB.workspace_id).where(EmployeeDB.credential_id == credential_id)
    )
    existing_workspace_id = result.scalar_one_or_none()
    if existing_workspace_id is None:
        raise StorageError("Employee missing after unique violation")
    if existing_workspace_id != workspace_id:
        raise Conflict("Account already belongs to another workspace")
    logger.info("Employee row for %s already present, continuing", email)


async def _mark_accepted(invite_id: UUID, db: AsyncSession) -> None:
    result = await db.execute(
        update(InviteDB)
        .where(InviteDB.id == invite_id, InviteDB.status == InviteStatus.pending)
        .values(status=InviteStatus.accepted, accepted_at=datetime.now(timezone.utc))
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    if result.rowcount == 0:
        logger.info("Invite %s was already marked accepted", invite_id)
