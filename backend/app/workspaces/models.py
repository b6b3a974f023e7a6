from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy.sql import func
from sqlmodel import Column, DateTime, Field, SQLModel

# The operator's own staff live in this workspace. It is not a customer
# tenant and is never billed or quota-limited.
PLATFORM_WORKSPACE_ID = UUID("00000000-0000-0000-0000-000000000001")


class PlanType(str, Enum):
    starter = "starter"
    pro = "pro"
    advanced = "advanced"
    enterprise = "enterprise"


class WorkspaceDB(SQLModel, table=True):
    __tablename__ = "workspaces"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=255)
    plan: PlanType = Field(default=PlanType.starter, nullable=False)
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


def is_platform_workspace(workspace_id: UUID | None) -> bool:
    return workspace_id == PLATFORM_WORKSPACE_ID
