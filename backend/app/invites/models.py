from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import Index, text
from sqlalchemy.sql import func
from sqlmodel import Column, DateTime, Field, SQLModel

from app.employees.models import EMPLOYEE_ROLE


class InviteStatus(str, Enum):
    pending = "pending"
    accepted = "accepted"


class InviteDB(SQLModel, table=True):
    __tablename__ = "invites"
    __table_args__ = (
        # At most one live invite per email
        Index(
            "uq_invites_live_email",
            "email",
            unique=True,
            postgresql_where=text("status IN ('pending', 'accepted')"),
            sqlite_where=text("status IN ('pending', 'accepted')"),
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(max_length=255, index=True)
    role: str = Field(default=EMPLOYEE_ROLE, nullable=False)
    # None means a platform-wide invite issued by a super_admin
    workspace_id: UUID | None = Field(default=None, foreign_key="workspaces.id")
    token: str = Field(unique=True, index=True)
    status: InviteStatus = Field(default=InviteStatus.pending, nullable=False)
    invited_by: UUID = Field(foreign_key="identities.id", nullable=False)
    expires_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    accepted_at: datetime | None = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )
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

    @property
    def is_platform_invite(self) -> bool:
        return self.workspace_id is None
