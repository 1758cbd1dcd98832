"""
Application settings (Pydantic Settings).
"""
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

# .env next to backend/ (parent of app/)
_env_path = Path(__file__).resolve().parent.parent / ".env"


class Settings(BaseSettings):
    database_url: str = "sqlite:///./go_sauna.db"
    # Remote entity API: REMOTE_API_BASE / REMOTE_APP_ID / REMOTE_ACCESS_TOKEN in .env
    remote_api_base: str = "https://go-sauna-now.base44.app/api/apps"
    remote_app_id: str = "698de9b6841548fa03673e8c"
    remote_access_token: str = ""
    remote_timeout_seconds: float = 15.0
    # Extra CORS origins, comma-separated (e.g. the public site domain)
    cors_origins: str = ""

    class Config:
        env_file = _env_path
        extra = "ignore"

    @field_validator("remote_api_base", "remote_app_id", "remote_access_token", mode="after")
    @classmethod
    def strip_remote(cls, v: str) -> str:
        return (v or "").strip()


settings = Settings()
