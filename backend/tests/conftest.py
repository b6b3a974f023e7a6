import asyncio
import os

# Must be set before app.settings is imported anywhere
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from unittest.mock import AsyncMock, MagicMock
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from app.auth.access import Access, AccessRole
from app.auth.credentials import (
    CredentialExistsError,
    CredentialProfile,
    CredentialProviderError,
)
from app.database import get_db
from app.employees.models import EmployeeDB  # noqa: F401
from app.identities.models import IdentityDB, IdentityRole
from app.invites.models import InviteDB  # noqa: F401
from app.main import app
from app.workspaces.models import PLATFORM_WORKSPACE_ID, PlanType, WorkspaceDB
from app.workspaces.plans import get_plan


# ---------------------------------------------------------------------------
# Router fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.add = MagicMock()
    db.commit = AsyncMock()
    db.refresh = AsyncMock()
    db.rollback = AsyncMock()
    db.execute = AsyncMock()
    return db


@pytest.fixture
def client(mock_db):
    """Create a test client with mocked database dependency."""

    async def override_get_db():
        yield mock_db

    app.dependency_overrides[get_db] = override_get_db
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Storage fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
async def engine(tmp_path):
    """File-backed SQLite so that separate sessions get separate connections."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'staffgate.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def platform_workspace(db) -> WorkspaceDB:
    workspace = WorkspaceDB(
        id=PLATFORM_WORKSPACE_ID, name="Platform", plan=PlanType.enterprise
    )
    db.add(workspace)
    await db.commit()
    return workspace


async def create_workspace(
    db: AsyncSession, plan: PlanType = PlanType.starter, name: str = "Acme"
) -> WorkspaceDB:
    workspace = WorkspaceDB(name=name, plan=plan)
    db.add(workspace)
    await db.commit()
    return workspace


@pytest.fixture
def make_workspace(db):
    async def _make(plan: PlanType = PlanType.starter, name: str = "Acme"):
        return await create_workspace(db, plan, name)

    return _make


async def create_identity(
    db: AsyncSession,
    email: str,
    role: IdentityRole = IdentityRole.none,
    workspace_id: UUID | None = None,
    credential_id: str | None = None,
) -> IdentityDB:
    identity = IdentityDB(
        email=email, role=role, workspace_id=workspace_id, credential_id=credential_id
    )
    db.add(identity)
    await db.commit()
    return identity


@pytest.fixture
def make_identity(db):
    async def _make(email: str, role: IdentityRole = IdentityRole.none, **kwargs):
        return await create_identity(db, email, role, **kwargs)

    return _make


@pytest.fixture
async def super_admin(db, platform_workspace) -> Access:
    identity = await create_identity(
        db, "root@platform.example.com", IdentityRole.super_admin, credential_id="cred-root"
    )
    return Access(
        role=AccessRole.super_admin,
        workspace_id=None,
        credential_id="cred-root",
        identity_id=identity.id,
    )


@pytest.fixture
async def tenant(db, platform_workspace) -> WorkspaceDB:
    return await create_workspace(db, PlanType.starter)


@pytest.fixture
async def tenant_admin(db, tenant) -> Access:
    identity = await create_identity(
        db,
        "owner@acme.example.com",
        IdentityRole.admin,
        workspace_id=tenant.id,
        credential_id="cred-owner",
    )
    return Access(
        role=AccessRole.admin,
        workspace_id=tenant.id,
        credential_id="cred-owner",
        identity_id=identity.id,
        plan_limits=get_plan(tenant.plan),
    )


@pytest.fixture
def make_access():
    def _make(role: AccessRole, workspace_id: UUID | None = None) -> Access:
        return Access(
            role=role,
            workspace_id=workspace_id,
            credential_id=f"cred-{uuid4().hex[:8]}",
            identity_id=uuid4(),
        )

    return _make


# ---------------------------------------------------------------------------
# Credential provider
# ---------------------------------------------------------------------------

class FakeCredentialProvider:
    """In-memory provider. Registering an email twice behaves like the real
    provider's 409: the existing credential id is reported back."""

    def __init__(self, barrier: asyncio.Barrier | None = None, fail: bool = False):
        self.credentials: dict[str, str] = {}
        self.calls = 0
        self.barrier = barrier
        self.fail = fail

    async def create_credential(self, email: str, password: str) -> str:
        self.calls += 1
        if self.barrier is not None:
            await self.barrier.wait()
        if self.fail:
            raise CredentialProviderError("provider unavailable")
        if email in self.credentials:
            raise CredentialExistsError(email, self.credentials[email])
        credential_id = f"cred-{len(self.credentials) + 1}"
        self.credentials[email] = credential_id
        return credential_id

    async def get_credential(self, credential_id: str) -> CredentialProfile:
        for email, stored_id in self.credentials.items():
            if stored_id == credential_id:
                return CredentialProfile(id=credential_id, email=email)
        raise CredentialProviderError(f"unknown credential {credential_id}")


@pytest.fixture
def provider():
    return FakeCredentialProvider()


@pytest.fixture
def provider_factory():
    return FakeCredentialProvider
