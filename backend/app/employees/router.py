from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.access import Access
from app.auth.dependencies import require_inviter
from app.database import get_db
from app.employees.models import EmployeeRead, EmployeeUpdate
from app.employees.service import (
    deactivate_employee,
    get_employee,
    list_employees,
    scoped_workspace,
    update_employee,
)

router = APIRouter(prefix="/employees", tags=["employees"])


@router.get("/", response_model=list[EmployeeRead])
async def get_employees(
    workspace_id: UUID | None = None,
    access: Access = Depends(require_inviter),
    db: AsyncSession = Depends(get_db),
) -> list[EmployeeRead]:
    """List employees of a workspace visible to the caller."""
    employees = await list_employees(scoped_workspace(access, workspace_id), db)
    return list(employees)


@router.get("/{employee_id}", response_model=EmployeeRead)
async def get_employee_detail(
    employee_id: UUID,
    access: Access = Depends(require_inviter),
    db: AsyncSession = Depends(get_db),
) -> EmployeeRead:
    return await get_employee(employee_id, access, db)


@router.patch("/{employee_id}", response_model=EmployeeRead)
async def patch_employee(
    employee_id: UUID,
    employee_update: EmployeeUpdate,
    access: Access = Depends(require_inviter),
    db: AsyncSession = Depends(get_db),
) -> EmployeeRead:
    """Update profile fields or status. Workspace and credential cannot change."""
    return await update_employee(employee_id, employee_update, access, db)


@router.post("/{employee_id}/deactivate", response_model=EmployeeRead)
async def deactivate(
    employee_id: UUID,
    access: Access = Depends(require_inviter),
    db: AsyncSession = Depends(get_db),
) -> EmployeeRead:
    return await deactivate_employee(employee_id, access, db)
