"""Client for the external credential provider.

The provider owns passwords and login; this service only asks it to create a
credential for an email and reads credential profiles back. Any object with
the ``CredentialProvider`` shape can be passed to the invite services, which
is how tests substitute an in-memory fake.

Admin REST contract spoken by ``HttpCredentialProvider``::

    POST /credentials        {"email", "password"} -> 201 {"id", "email"}
                                                    -> 409 {"id"}  (email already registered)
    GET  /credentials/{id}                          -> 200 {"id", "email", "created_at"?}
"""

import logging
from datetime import datetime
from typing import Protocol

import httpx
from pydantic import BaseModel, ValidationError

from app.auth.settings import auth_settings

logger = logging.getLogger(__name__)


class CredentialProfile(BaseModel):
    id: str
    email: str
    created_at: datetime | None = None


class CredentialProviderError(Exception):
    """The provider rejected or failed a request."""


class CredentialExistsError(CredentialProviderError):
    """The email already has a credential; ``credential_id`` is the existing one."""

    def __init__(self, email: str, credential_id: str | None = None):
        super().__init__(f"Credential already exists for {email}")
        self.email = email
        self.credential_id = credential_id


class CredentialProvider(Protocol):
    async def create_credential(self, email: str, password: str) -> str: ...

    async def get_credential(self, credential_id: str) -> CredentialProfile: ...


class HttpCredentialProvider:
    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ):
        self.base_url = (base_url or auth_settings.CREDENTIAL_PROVIDER_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else auth_settings.CREDENTIAL_PROVIDER_API_KEY
        self.timeout = timeout or auth_settings.CREDENTIAL_PROVIDER_TIMEOUT
        self._client = client

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            if self._client is not None:
                return await self._client.request(
                    method, url, headers=self._headers(), timeout=self.timeout, **kwargs
                )
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                return await client.request(method, url, headers=self._headers(), **kwargs)
        except httpx.HTTPError as e:
            raise CredentialProviderError(f"{method} {path} failed: {e}") from e

    @staticmethod
    def _json(response: httpx.Response, operation: str) -> dict:
        try:
            data = response.json()
        except ValueError as e:
            raise CredentialProviderError(f"{operation} returned a non-JSON body") from e
        if not isinstance(data, dict):
            raise CredentialProviderError(f"{operation} returned an unexpected body")
        return data

    async def create_credential(self, email: str, password: str) -> str:
        response = await self._request(
            "POST", "/credentials", json={"email": email, "password": password}
        )
        if response.status_code == httpx.codes.CONFLICT:
            existing_id = (
                self._json(response, "create_credential").get("id")
                if response.content
                else None
            )
            logger.info("Credential already registered for %s", email)
            raise CredentialExistsError(email, existing_id)
        if response.is_error:
            raise CredentialProviderError(
                f"create_credential returned {response.status_code}"
            )
        credential_id = self._json(response, "create_credential").get("id")
        if not credential_id:
            raise CredentialProviderError("create_credential returned no id")
        return str(credential_id)

    async def get_credential(self, credential_id: str) -> CredentialProfile:
        response = await self._request("GET", f"/credentials/{credential_id}")
        if response.is_error:
            raise CredentialProviderError(
                f"get_credential returned {response.status_code}"
            )
        try:
            return CredentialProfile.model_validate(
                self._json(response, "get_credential")
            )
        except ValidationError as e:
            raise CredentialProviderError("get_credential returned an invalid profile") from e


def get_credential_provider() -> CredentialProvider:
    """FastAPI dependency; override it to swap the provider."""
    return HttpCredentialProvider()
