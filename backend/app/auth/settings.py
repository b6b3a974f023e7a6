from pydantic_settings import BaseSettings
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent
ROOT_ENV = BASE_DIR.parent / ".env"


class AuthSettings(BaseSettings):
    # JWT verification for tokens issued by the credential provider.
    # Tokens are only verified here, never minted.
    JWT_SECRET_KEY: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str | None = None

    # Cookie the frontend stores the provider token in
    COOKIE_NAME: str = "access_token"

    # External credential provider (admin API)
    CREDENTIAL_PROVIDER_URL: str = "http://localhost:9999"
    CREDENTIAL_PROVIDER_API_KEY: str | None = None
    CREDENTIAL_PROVIDER_TIMEOUT: float = 10.0

    # Caller-side access lookups right after login
    ACCESS_RETRY_ATTEMPTS: int = 3
    ACCESS_RETRY_BACKOFF_SECONDS: float = 0.2

    class Config:
        env_file = ROOT_ENV
        extra = "ignore"


auth_settings = AuthSettings()
