"""Remote entity API config. Credentials from settings (.env) or RemoteConfig args."""
from app.config import settings


class RemoteConfig:
    """Base URL, tenant app id and bearer token for the remote entity API."""

    __slots__ = ("base_url", "app_id", "access_token", "timeout")

    def __init__(
        self,
        *,
        base_url: str | None = None,
        app_id: str | None = None,
        access_token: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.base_url = (base_url or settings.remote_api_base).strip().rstrip("/")
        self.app_id = (app_id or settings.remote_app_id).strip()
        self.access_token = (access_token if access_token is not None else settings.remote_access_token).strip()
        self.timeout = timeout if timeout is not None else settings.remote_timeout_seconds

    def has_token(self) -> bool:
        return bool(self.access_token)

    def url(self, path: str) -> str:
        """Fixed base + tenant segment + entity path, e.g. .../apps/<app_id>/entities/Booking."""
        if not path.startswith("/"):
            path = "/" + path
        return f"{self.base_url}/{self.app_id}{path}"

    def headers(self) -> dict[str, str]:
        h = {
            "Content-Type": "application/json",
            "X-App-Id": self.app_id,
        }
        if self.access_token:
            h["Authorization"] = f"Bearer {self.access_token}"
        return h
