from unittest.mock import AsyncMock, patch
from uuid import uuid4

from fastapi.testclient import TestClient
from jose import jwt

from app.auth.access import Access, AccessRole
from app.auth.settings import auth_settings
from app.errors import Forbidden, Unauthorized
from app.workspaces.models import PlanType
from app.workspaces.plans import PLANS


def make_token(sub: str | None = "cred-1", key: str | None = None) -> str:
    claims = {"sub": sub} if sub else {}
    return jwt.encode(
        claims,
        key or auth_settings.JWT_SECRET_KEY,
        algorithm=auth_settings.JWT_ALGORITHM,
    )


def test_me_requires_a_token(client: TestClient):
    response = client.get("/auth/me")
    assert response.status_code == 401
    assert response.json()["code"] == "unauthorized"


def test_me_rejects_a_forged_token(client: TestClient):
    response = client.get(
        "/auth/me", headers={"Authorization": f"Bearer {make_token(key='wrong')}"}
    )
    assert response.status_code == 401


def test_me_rejects_a_token_without_subject(client: TestClient):
    response = client.get(
        "/auth/me", headers={"Authorization": f"Bearer {make_token(sub=None)}"}
    )
    assert response.status_code == 401


def test_me_with_bearer_token(client: TestClient, mock_db):
    workspace_id = uuid4()
    access = Access(
        role=AccessRole.admin,
        workspace_id=workspace_id,
        credential_id="cred-1",
        plan_limits=PLANS[PlanType.pro],
    )
    with (
        patch(
            "app.auth.dependencies.resolve_access", new=AsyncMock(return_value=access)
        ) as resolve,
        patch(
            "app.auth.router.count_employees", new=AsyncMock(return_value=3)
        ) as count,
    ):
        response = client.get(
            "/auth/me", headers={"Authorization": f"Bearer {make_token()}"}
        )

    assert response.status_code == 200
    data = response.json()
    assert data["role"] == "admin"
    assert data["workspace_id"] == str(workspace_id)
    assert data["plan_limits"]["max_employees"] == 5
    assert data["remaining_employees"] == 2
    resolve.assert_awaited_once_with("cred-1", mock_db)
    count.assert_awaited_once_with(workspace_id, mock_db)


def test_me_with_cookie(client: TestClient):
    access = Access(role=AccessRole.super_admin, workspace_id=None, credential_id="cred-1")
    with patch(
        "app.auth.dependencies.resolve_access", new=AsyncMock(return_value=access)
    ):
        response = client.get(
            "/auth/me",
            headers={"Cookie": f"{auth_settings.COOKIE_NAME}={make_token()}"},
        )

    assert response.status_code == 200
    assert response.json() == {
        "role": "super_admin",
        "workspace_id": None,
        "plan_limits": None,
        "remaining_employees": None,
    }


def test_me_surfaces_resolver_errors(client: TestClient):
    with patch(
        "app.auth.dependencies.resolve_access",
        new=AsyncMock(side_effect=Unauthorized("No access role for this account")),
    ):
        response = client.get(
            "/auth/me", headers={"Authorization": f"Bearer {make_token()}"}
        )
    assert response.status_code == 401
    assert response.json()["detail"] == "No access role for this account"

    with patch(
        "app.auth.dependencies.resolve_access",
        new=AsyncMock(side_effect=Forbidden("employee account is inactive")),
    ):
        response = client.get(
            "/auth/me", headers={"Authorization": f"Bearer {make_token()}"}
        )
    assert response.status_code == 403
