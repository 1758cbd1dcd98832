"""Remote entity API client: lowest level, sends request only. No validation."""
import logging
from typing import Any

import httpx

from app.core.errors import RemoteRequestError
from app.services.remote.config import RemoteConfig

logger = logging.getLogger(__name__)


def _error_message(r: httpx.Response) -> str:
    """Human-readable message from an error body ({message} or {detail}), else a generic one."""
    fallback = f"Request failed ({r.status_code})"
    try:
        body = r.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        msg = body.get("message") or body.get("detail")
        if msg:
            return str(msg)
    return fallback


class RemoteClient:
    """Authenticated JSON requests against the remote entity API."""

    def __init__(
        self,
        config: RemoteConfig | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._config = config or RemoteConfig()
        self._transport = transport

    @property
    def config(self) -> RemoteConfig:
        return self._config

    def request(
        self,
        path: str,
        *,
        method: str = "GET",
        params: dict[str, Any] | None = None,
        json_body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """
        Send one request. Returns parsed JSON, or None for 204/empty bodies.
        Raises RemoteRequestError on network failure, non-2xx status or a malformed body.
        No retry: callers decide whether to degrade.
        """
        url = self._config.url(path)
        merged_headers = {**self._config.headers(), **(headers or {})}
        try:
            with httpx.Client(timeout=self._config.timeout, transport=self._transport) as c:
                r = c.request(method, url, params=params, json=json_body, headers=merged_headers)
        except httpx.TimeoutException as e:
            logger.warning("Remote %s %s timed out: %s", method, path, e)
            raise RemoteRequestError("Request timed out") from e
        except httpx.HTTPError as e:
            logger.warning("Remote %s %s failed: %s", method, path, e)
            raise RemoteRequestError(str(e) or e.__class__.__name__) from e
        if not r.is_success:
            msg = _error_message(r)
            logger.info("Remote %s %s -> %s: %s", method, path, r.status_code, msg)
            raise RemoteRequestError(msg, status_code=r.status_code)
        if r.status_code == 204 or not r.content:
            return None
        try:
            return r.json()
        except ValueError as e:
            raise RemoteRequestError(f"Malformed response body ({r.status_code})", status_code=r.status_code) from e
