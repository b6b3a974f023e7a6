from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.employees.models import EMPLOYEE_ROLE


class InviteCreate(BaseModel):
    # Checked by the service so that validation runs in a fixed order
    email: str = Field(max_length=255)
    role: str = EMPLOYEE_ROLE
    workspace_id: UUID | None = None


class InviteCreated(BaseModel):
    id: UUID
    email: str
    token: str
    invite_url: str


class InviteRead(BaseModel):
    id: UUID
    email: str
    role: str
    status: str
    workspace_id: UUID | None
    invited_by: UUID
    expires_at: datetime
    created_at: datetime


class InvitePreview(BaseModel):
    """What an invitee sees before accepting."""

    email: str
    role: str
    workspace_id: UUID | None
    expires_at: datetime


class AcceptProfile(BaseModel):
    full_name: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=64)


class InviteAcceptRequest(AcceptProfile):
    """Request body for accepting an invite with password."""

    token: str
    password: str = Field(min_length=6)


class AcceptResult(BaseModel):
    identity_id: UUID
    credential_id: str
    workspace_id: UUID
