from uuid import UUID

from pydantic import BaseModel

from app.auth.access import AccessRole
from app.workspaces.plans import PlanLimits


class AccessRead(BaseModel):
    """Response for the authoritative access lookup."""

    role: AccessRole
    workspace_id: UUID | None = None
    plan_limits: PlanLimits | None = None
    # Seats left under the plan; UNLIMITED (-1) when uncapped
    remaining_employees: int | None = None
