"""Authoritative role resolution.

``resolve_access`` is the only place that decides who a caller is. Protected
endpoints depend on it (see ``app.auth.dependencies``) instead of trusting any
role or workspace the client sends.
"""

import logging
from enum import Enum
from typing import assert_never
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.employees.models import EmployeeDB, EmployeeStatus
from app.errors import Forbidden, StorageError, Unauthorized
from app.identities.models import IdentityRole
from app.identities.service import get_identity_by_credential
from app.workspaces.models import WorkspaceDB
from app.workspaces.plans import PlanLimits, get_plan

logger = logging.getLogger(__name__)


class AccessRole(str, Enum):
    super_admin = "super_admin"
    admin = "admin"
    employee = "employee"


class Access(BaseModel):
    role: AccessRole
    workspace_id: UUID | None
    credential_id: str
    identity_id: UUID | None = None
    employee_id: UUID | None = None
    plan_limits: PlanLimits | None = None


async def _plan_limits(workspace_id: UUID, db: AsyncSession) -> PlanLimits | None:
    workspace = await db.get(WorkspaceDB, workspace_id)
    if workspace is None:
        return None
    return get_plan(workspace.plan)


async def resolve_access(credential_id: str, db: AsyncSession) -> Access:
    """Return the caller's role and workspace, first match wins:

    1. super_admin identity (must have no workspace)
    2. admin identity (must have a workspace)
    3. employee row
    4. otherwise Unauthorized
    """
    try:
        return await _resolve(credential_id, db)
    except SQLAlchemyError as e:
        logger.exception("Access lookup failed for credential %s", credential_id)
        raise StorageError() from e


async def _resolve(credential_id: str, db: AsyncSession) -> Access:
    identity = await get_identity_by_credential(credential_id, db)

    if identity is not None:
        match identity.role:
            case IdentityRole.super_admin:
                if identity.workspace_id is not None:
                    logger.error(
                        "super_admin identity %s has workspace %s",
                        identity.id,
                        identity.workspace_id,
                    )
                    raise Forbidden("invalid admin account state")
                return Access(
                    role=AccessRole.super_admin,
                    workspace_id=None,
                    credential_id=credential_id,
                    identity_id=identity.id,
                )
            case IdentityRole.admin:
                if identity.workspace_id is None:
                    logger.error("admin identity %s has no workspace", identity.id)
                    raise Forbidden("invalid admin account state")
                return Access(
                    role=AccessRole.admin,
                    workspace_id=identity.workspace_id,
                    credential_id=credential_id,
                    identity_id=identity.id,
                    plan_limits=await _plan_limits(identity.workspace_id, db),
                )
            case IdentityRole.none:
                pass
            case _:
                assert_never(identity.role)

    result = await db.execute(
        select(EmployeeDB).where(EmployeeDB.credential_id == credential_id)
    )
    employee = result.scalar_one_or_none()
    if employee is not None:
        if employee.status != EmployeeStatus.active:
            raise Forbidden("employee account is inactive")
        return Access(
            role=AccessRole.employee,
            workspace_id=employee.workspace_id,
            credential_id=credential_id,
            identity_id=identity.id if identity is not None else None,
            employee_id=employee.id,
            plan_limits=await _plan_limits(employee.workspace_id, db),
        )

    raise Unauthorized("No access role for this account")
