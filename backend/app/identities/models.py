from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy.sql import func
from sqlmodel import Column, DateTime, Field, SQLModel


class IdentityRole(str, Enum):
    super_admin = "super_admin"
    admin = "admin"
    none = "none"


ADMIN_ROLES = (IdentityRole.super_admin, IdentityRole.admin)


class IdentityBase(SQLModel):
    name: str | None = Field(default=None, max_length=255)
    email: str = Field(max_length=255, unique=True, index=True)
    role: IdentityRole = Field(default=IdentityRole.none, nullable=False)
    workspace_id: UUID | None = Field(default=None, foreign_key="workspaces.id")


class IdentityDB(IdentityBase, table=True):
    __tablename__ = "identities"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    credential_id: str | None = Field(
        default=None, max_length=255, unique=True, index=True
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
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

