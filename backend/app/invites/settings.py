from pathlib import Path

from pydantic import ConfigDict
from pydantic_settings import BaseSettings

BASE_DIR = Path(__file__).resolve().parent.parent.parent
ROOT_ENV = BASE_DIR.parent / ".env"


class InviteSettings(BaseSettings):
    invite_ttl_days: int = 30
    # Invite links point at the frontend, which posts back to /invites/accept
    frontend_url: str = "http://localhost:3000"

    model_config: ConfigDict = ConfigDict(
        env_file=ROOT_ENV,
        extra="ignore"
    )


invite_settings: InviteSettings = InviteSettings()
