"""Caller-side access lookup that tolerates propagation delay after login.

A freshly provisioned credential can take a moment to become visible to
``GET /auth/me``. The client retries 401/403 and network failures a few
times with a fixed backoff, treats 5xx as terminal, and never signs the
caller out; deciding to redirect to login is left to the caller once
``success`` is False.

Each attempt yields an explicit ``AttemptOk`` or ``AttemptFailed`` value, and
the loop only looks at that value to decide whether to retry.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import httpx
from pydantic import ValidationError

from app.auth.schemas import AccessRead
from app.auth.settings import auth_settings
from app.settings import app_settings

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = (httpx.codes.UNAUTHORIZED, httpx.codes.FORBIDDEN)


@dataclass(frozen=True)
class AttemptOk:
    role: str
    workspace_id: str | None


@dataclass(frozen=True)
class AttemptFailed:
    error: str
    retryable: bool


AttemptResult = AttemptOk | AttemptFailed


@dataclass(frozen=True)
class AccessFetchResult:
    success: bool
    role: str | None = None
    workspace_id: str | None = None
    attempts: int = 0
    error: str | None = None


class AccessRetryClient:
    def __init__(
        self,
        base_url: str | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        cookies: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
        attempts: int | None = None,
        backoff: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.base_url = (base_url or app_settings.backend_url).rstrip("/")
        self.headers = dict(headers or {})
        if cookies:
            self.headers["Cookie"] = "; ".join(f"{k}={v}" for k, v in cookies.items())
        self.attempts = attempts or auth_settings.ACCESS_RETRY_ATTEMPTS
        self.backoff = (
            auth_settings.ACCESS_RETRY_BACKOFF_SECONDS if backoff is None else backoff
        )
        self._client = client
        self._sleep = sleep

    async def _attempt(self, client: httpx.AsyncClient) -> AttemptResult:
        try:
            response = await client.get(
                f"{self.base_url}/auth/me", headers=self.headers
            )
        except httpx.HTTPError as e:
            return AttemptFailed(error=f"Network error: {e}", retryable=True)

        if response.is_success:
            try:
                access = AccessRead.model_validate_json(response.content)
            except ValidationError as e:
                logger.debug("Rejected access response: %s", e)
                return AttemptFailed(error="Malformed access response", retryable=False)
            return AttemptOk(
                role=access.role.value,
                workspace_id=str(access.workspace_id) if access.workspace_id else None,
            )

        if response.status_code >= 500:
            return AttemptFailed(
                error=f"Server error ({response.status_code})", retryable=False
            )
        if response.status_code in RETRYABLE_STATUSES:
            return AttemptFailed(
                error=f"Authentication failed ({response.status_code})", retryable=True
            )
        return AttemptFailed(
            error=f"Unexpected status {response.status_code}", retryable=True
        )

    async def fetch_role_with_retry(self) -> AccessFetchResult:
        if self._client is not None:
            return await self._run(self._client)
        async with httpx.AsyncClient() as client:
            return await self._run(client)

    async def _run(self, client: httpx.AsyncClient) -> AccessFetchResult:
        last_error = "Unknown error"
        for attempt in range(1, self.attempts + 1):
            outcome = await self._attempt(client)
            match outcome:
                case AttemptOk(role=role, workspace_id=workspace_id):
                    logger.debug("Access resolved on attempt %d: %s", attempt, role)
                    return AccessFetchResult(
                        success=True,
                        role=role,
                        workspace_id=workspace_id,
                        attempts=attempt,
                    )
                case AttemptFailed(error=error, retryable=False):
                    logger.warning("Access lookup failed terminally: %s", error)
                    return AccessFetchResult(success=False, attempts=attempt, error=error)
                case AttemptFailed(error=error):
                    last_error = error
                    logger.info(
                        "Access lookup attempt %d/%d failed: %s",
                        attempt,
                        self.attempts,
                        error,
                    )
                    if attempt < self.attempts:
                        await self._sleep(self.backoff)

        return AccessFetchResult(
            success=False,
            attempts=self.attempts,
            error=f"{last_error} after {self.attempts} attempts",
        )
