import logging
from typing import assert_never
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import func, select

from app.auth.access import Access, AccessRole
from app.employees.guard import WorkspaceInvariantViolation
from app.employees.models import EmployeeDB, EmployeeStatus, EmployeeUpdate
from app.errors import Forbidden, NotFound, StorageError, ValidationError
from app.workspaces.models import PLATFORM_WORKSPACE_ID

logger = logging.getLogger(__name__)


def scoped_workspace(access: Access, workspace_id: UUID | None) -> UUID:
    """Pick the workspace a listing may look at.

    super_admin may look at any workspace and defaults to the platform one.
    Admins are pinned to their own.
    """
    if access.role == AccessRole.super_admin:
        return workspace_id or PLATFORM_WORKSPACE_ID
    if access.role == AccessRole.admin:
        if workspace_id is not None and workspace_id != access.workspace_id:
            raise Forbidden("Admins can only list their own workspace")
        return access.workspace_id
    raise Forbidden("Employees cannot list employees")


async def count_employees(workspace_id: UUID, db: AsyncSession) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(EmployeeDB)
        .where(EmployeeDB.workspace_id == workspace_id)
    )
    return result.scalar_one()


async def list_employees(workspace_id: UUID, db: AsyncSession) -> list[EmployeeDB]:
    result = await db.execute(
        select(EmployeeDB)
        .where(EmployeeDB.workspace_id == workspace_id)
        .order_by(EmployeeDB.created_at)
    )
    return list(result.scalars().all())


async def get_employee(
    employee_id: UUID, access: Access, db: AsyncSession
) -> EmployeeDB:
    """Fetch one employee the caller may manage.

    An employee outside an admin's workspace is reported as missing, the same
    as an unknown id.
    """
    query = select(EmployeeDB).where(EmployeeDB.id == employee_id)
    match access.role:
        case AccessRole.super_admin:
            pass
        case AccessRole.admin:
            query = query.where(EmployeeDB.workspace_id == access.workspace_id)
        case AccessRole.employee:
            raise Forbidden("Employees cannot manage employees")
        case _:
            assert_never(access.role)

    result = await db.execute(query)
    employee = result.scalar_one_or_none()
    if employee is None:
        raise NotFound("Employee not found")
    return employee


async def update_employee(
    employee_id: UUID, changes: EmployeeUpdate, access: Access, db: AsyncSession
) -> EmployeeDB:
    employee = await get_employee(employee_id, access, db)

    update_data = changes.model_dump(exclude_unset=True)
    if "status" in update_data and update_data["status"] is None:
        raise ValidationError("status cannot be cleared")

    for key, value in update_data.items():
        setattr(employee, key, value)

    db.add(employee)
    try:
        await db.commit()
    except WorkspaceInvariantViolation as e:
        await db.rollback()
        logger.warning("Update of employee %s rejected: %s", employee_id, e)
        raise Forbidden(str(e)) from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Failed to update employee %s", employee_id)
        raise StorageError() from e
    await db.refresh(employee)

    logger.info(
        "%s %s updated employee %s (%s)",
        access.role.value,
        access.credential_id,
        employee_id,
        ", ".join(sorted(update_data)) or "no changes",
    )
    return employee


async def deactivate_employee(
    employee_id: UUID, access: Access, db: AsyncSession
) -> EmployeeDB:
    """Soft-delete: the row stays, but access resolution refuses it from now on."""
    return await update_employee(
        employee_id, EmployeeUpdate(status=EmployeeStatus.inactive), access, db
    )
