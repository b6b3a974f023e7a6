from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy.sql import func
from sqlmodel import Column, DateTime, Field, SQLModel

# The only role an employee row may carry.
EMPLOYEE_ROLE = "employee"


class InvitedByRole(str, Enum):
    super_admin = "super_admin"
    client_admin = "client_admin"


class EmployeeStatus(str, Enum):
    active = "active"
    inactive = "inactive"


class EmployeeDB(SQLModel, table=True):
    __tablename__ = "employees"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    credential_id: str = Field(max_length=255, unique=True, index=True)
    email: str = Field(max_length=255, index=True)
    workspace_id: UUID = Field(foreign_key="workspaces.id", nullable=False, index=True)
    role: str = Field(default=EMPLOYEE_ROLE, max_length=32, nullable=False)
    invited_by_role: InvitedByRole = Field(nullable=False)
    status: EmployeeStatus = Field(default=EmployeeStatus.active, nullable=False)
    full_name: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=64)
    created_at: datetime = Field(
        default=None,
        sa_column=Column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        ),
    )
    updated_at: datetime = Field(
        default=None,
        sa_column=Column(
            DateTime(timezone=True),
            server_default=func.now(),
            onupdate=func.now(),
            nullable=False,
        ),
    )


class EmployeeUpdate(SQLModel):
    """Fields an admin may change. Workspace and credential are fixed for life."""

    full_name: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=64)
    status: EmployeeStatus | None = None


class EmployeeRead(SQLModel):
    id: UUID
    email: str
    workspace_id: UUID
    invited_by_role: InvitedByRole
    status: EmployeeStatus
    full_name: str | None
    phone: str | None
    created_at: datetime
