from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.access import Access
from app.auth.dependencies import get_current_access
from app.auth.schemas import AccessRead
from app.database import get_db
from app.employees.service import count_employees
from app.workspaces.plans import remaining_capacity

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me", response_model=AccessRead)
async def get_me(
    access: Access = Depends(get_current_access),
    db: AsyncSession = Depends(get_db),
) -> AccessRead:
    """Return the caller's role and workspace as resolved from storage."""
    remaining = None
    if access.workspace_id is not None and access.plan_limits is not None:
        current = await count_employees(access.workspace_id, db)
        remaining = remaining_capacity(access.plan_limits.max_employees, current)
    return AccessRead(
        role=access.role,
        workspace_id=access.workspace_id,
        plan_limits=access.plan_limits,
        remaining_employees=remaining,
    )
