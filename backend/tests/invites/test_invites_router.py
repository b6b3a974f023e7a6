from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from app.auth.access import Access, AccessRole
from app.auth.credentials import get_credential_provider
from app.auth.dependencies import require_inviter
from app.errors import Conflict, NotFoundOrExpired, PlanLimitExceeded
from app.invites.models import InviteDB, InviteStatus
from app.invites.schemas import AcceptResult
from app.main import app
from app.workspaces.models import PLATFORM_WORKSPACE_ID


@pytest.fixture
def inviter():
    access = Access(
        role=AccessRole.super_admin,
        workspace_id=None,
        credential_id="cred-root",
        identity_id=uuid4(),
    )
    app.dependency_overrides[require_inviter] = lambda: access
    yield access
    app.dependency_overrides.pop(require_inviter, None)


def make_invite(**kwargs) -> InviteDB:
    defaults = dict(
        id=uuid4(),
        email="new@example.com",
        role="employee",
        workspace_id=None,
        token="tok-123",
        status=InviteStatus.pending,
        invited_by=uuid4(),
        expires_at=datetime.now(timezone.utc) + timedelta(days=30),
        created_at=datetime.now(timezone.utc),
    )
    return InviteDB(**{**defaults, **kwargs})


def test_create_invite(client: TestClient, mock_db, inviter):
    invite = make_invite()
    with patch(
        "app.invites.router.create_invite", new=AsyncMock(return_value=invite)
    ) as create:
        response = client.post("/invites/", json={"email": "new@example.com"})

    assert response.status_code == 201
    data = response.json()
    assert data["token"] == "tok-123"
    assert data["invite_url"].endswith("/invite?token=tok-123")
    create.assert_awaited_once_with(
        email="new@example.com",
        role="employee",
        workspace_id=None,
        invoker=inviter,
        db=mock_db,
    )


def test_create_invite_requires_a_session(client: TestClient):
    response = client.post("/invites/", json={"email": "new@example.com"})
    assert response.status_code == 401


def test_create_invite_conflict(client: TestClient, inviter):
    with patch(
        "app.invites.router.create_invite",
        new=AsyncMock(side_effect=Conflict("email reserved for admin role")),
    ):
        response = client.post("/invites/", json={"email": "boss@example.com"})

    assert response.status_code == 409
    assert response.json() == {
        "detail": "email reserved for admin role",
        "code": "conflict",
    }


def test_create_invite_plan_limit(client: TestClient, inviter):
    with patch(
        "app.invites.router.create_invite",
        new=AsyncMock(side_effect=PlanLimitExceeded("starter", 2, 2)),
    ):
        response = client.post(
            "/invites/", json={"email": "x@example.com", "workspace_id": str(uuid4())}
        )

    assert response.status_code == 403
    body = response.json()
    assert body["code"] == "plan_limit_exceeded"
    assert (body["plan"], body["limit"], body["current"]) == ("starter", 2, 2)


def test_list_invites(client: TestClient, inviter):
    invites = [make_invite(), make_invite(email="other@example.com", token="tok-456")]
    with patch(
        "app.invites.router.list_pending_invites", new=AsyncMock(return_value=invites)
    ):
        response = client.get("/invites/")

    assert response.status_code == 200
    assert [i["email"] for i in response.json()] == [
        "new@example.com",
        "other@example.com",
    ]


def test_preview_invite(client: TestClient):
    with patch(
        "app.invites.router.get_valid_invite", new=AsyncMock(return_value=make_invite())
    ):
        response = client.get("/invites/preview/tok-123")

    assert response.status_code == 200
    assert response.json()["email"] == "new@example.com"
    assert "token" not in response.json()


def test_preview_unknown_invite(client: TestClient):
    with patch("app.invites.router.get_valid_invite", new=AsyncMock(return_value=None)):
        response = client.get("/invites/preview/nope")

    assert response.status_code == 404
    assert response.json()["code"] == "invalid_or_expired_invite"


def test_accept_invite(client: TestClient, provider):
    app.dependency_overrides[get_credential_provider] = lambda: provider
    result = AcceptResult(
        identity_id=uuid4(), credential_id="cred-1", workspace_id=PLATFORM_WORKSPACE_ID
    )
    with patch(
        "app.invites.router.accept_invite", new=AsyncMock(return_value=result)
    ) as accept:
        response = client.post(
            "/invites/accept",
            json={"token": "tok-123", "password": "secret1", "full_name": "New Hire"},
        )

    assert response.status_code == 200
    assert response.json()["credential_id"] == "cred-1"
    kwargs = accept.await_args.kwargs
    assert kwargs["token"] == "tok-123"
    assert kwargs["password"] == "secret1"
    assert kwargs["profile"].full_name == "New Hire"
    assert kwargs["provider"] is provider


def test_accept_invite_rejects_short_password(client: TestClient, provider):
    app.dependency_overrides[get_credential_provider] = lambda: provider
    response = client.post(
        "/invites/accept", json={"token": "tok-123", "password": "123"}
    )
    assert response.status_code == 422


def test_accept_expired_invite(client: TestClient, provider):
    app.dependency_overrides[get_credential_provider] = lambda: provider
    with patch(
        "app.invites.router.accept_invite",
        new=AsyncMock(side_effect=NotFoundOrExpired()),
    ):
        response = client.post(
            "/invites/accept", json={"token": "old", "password": "secret1"}
        )

    assert response.status_code == 404
    assert response.json()["detail"] == "Invalid or expired invite"
