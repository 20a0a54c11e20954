"""Async HTTP client for the admin API: token storage, transparent refresh and session monitoring."""

from __future__ import annotations

import logging
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from typing import Any

import httpx

from app.client.session_monitor import SessionTimeoutConfig, SessionTimeoutMonitor

logger = logging.getLogger(__name__)


class ClientError(Exception):
    """Raised when the API returns an error envelope or an unexpected status."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
        body: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.code = code
        self.body = body or {}
        super().__init__(message)


@dataclass
class StoredTokens:
    access_token: str
    refresh_token: str
    expires_in: int | None = None


def _error_from_response(resp: httpx.Response) -> ClientError:
    try:
        body = resp.json()
        error = body.get("error", {}) if isinstance(body, dict) else {}
    except ValueError:
        body, error = {}, {}
    message = error.get("message") or (resp.text[:500] if resp.text else "Unknown error")
    return ClientError(message, resp.status_code, error.get("code"), body)


class HotspotAdminClient:
    """
    Thin wrapper over httpx.AsyncClient.

    base_url includes the API prefix, e.g. "http://localhost:8000/api". On a 401
    with code TOKEN_EXPIRED the client refreshes once and retries the request.
    """

    def __init__(
        self,
        base_url: str,
        http: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
        on_session_end: Callable[[], None] | None = None,
    ) -> None:
        self._http = http or httpx.AsyncClient(base_url=base_url.rstrip("/"), timeout=timeout)
        self._owns_http = http is None
        self.tokens: StoredTokens | None = None
        self.user: dict[str, Any] | None = None
        self._on_session_end = on_session_end
        self._monitor: SessionTimeoutMonitor | None = None

    @property
    def authenticated(self) -> bool:
        return self.tokens is not None

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> HotspotAdminClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def _store(self, data: dict[str, Any]) -> None:
        self.tokens = StoredTokens(
            access_token=data["access_token"],
            refresh_token=data["refresh_token"],
            expires_in=data.get("expires_in"),
        )

    def clear_session(self) -> None:
        """Forget tokens and the cached user locally and stop the idle watchdog; no network call."""
        self.tokens = None
        self.user = None
        monitor, self._monitor = self._monitor, None
        if monitor is not None:
            monitor.stop()
        if self._on_session_end is not None:
            self._on_session_end()

    async def login(self, username: str, password: str) -> dict[str, Any]:
        resp = await self._http.post("/auth/login", json={"username": username, "password": password})
        if resp.status_code != 200:
            raise _error_from_response(resp)
        data = resp.json()["data"]
        self._store(data["tokens"])
        self.user = data["user"]
        return self.user

    async def refresh(self) -> None:
        """Exchange the stored refresh token for a new pair; clears the session on failure."""
        if self.tokens is None:
            raise ClientError("Not authenticated", 401, "AUTH_REQUIRED")
        resp = await self._http.post(
            "/auth/refresh", json={"refresh_token": self.tokens.refresh_token}
        )
        if resp.status_code != 200:
            err = _error_from_response(resp)
            logger.info("Token refresh rejected: status=%s code=%s", err.status_code, err.code)
            self.clear_session()
            raise err
        self._store(resp.json()["data"])

    async def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send an authenticated request; raises ClientError on a non-2xx response."""
        resp = await self._send(method, path, **kwargs)
        if resp.status_code == 401 and self.tokens is not None:
            err = _error_from_response(resp)
            if err.code == "TOKEN_EXPIRED":
                await self.refresh()
                resp = await self._send(method, path, **kwargs)
        if resp.status_code >= 400:
            raise _error_from_response(resp)
        return resp

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        headers = dict(kwargs.pop("headers", None) or {})
        if self.tokens is not None:
            headers["Authorization"] = f"Bearer {self.tokens.access_token}"
        return await self._http.request(method, path, headers=headers, **kwargs)

    async def me(self) -> dict[str, Any]:
        resp = await self.request("GET", "/auth/me")
        self.user = resp.json()["data"]
        return self.user

    async def permissions(self) -> dict[str, Any]:
        resp = await self.request("GET", "/admins/me/permissions")
        return resp.json()

    def logout(self) -> Coroutine[Any, Any, None]:
        """
        Clear the local session now and return the remote logout call.

        Awaiting the result is optional; remote failures are logged, not raised.
        """
        tokens = self.tokens
        self.clear_session()
        return self._remote_logout(tokens)

    async def _remote_logout(self, tokens: StoredTokens | None) -> None:
        if tokens is None:
            return
        try:
            resp = await self._http.post(
                "/auth/logout",
                json={"refresh_token": tokens.refresh_token},
                headers={"Authorization": f"Bearer {tokens.access_token}"},
            )
        except httpx.HTTPError as e:
            logger.warning("Remote logout failed: %s", e)
            return
        if resp.status_code >= 400:
            logger.warning("Remote logout returned %s", resp.status_code)

    def session_monitor(
        self,
        config: SessionTimeoutConfig | None = None,
        on_expired: Callable[[], None] | None = None,
        on_warning: Callable[[int], None] | None = None,
    ) -> SessionTimeoutMonitor:
        """
        Idle watchdog wired to this client's logout.

        The client keeps the monitor and stops it when the session is cleared,
        so a manual logout or a rejected refresh leaves no ticker behind.
        Creating a new monitor stops the previous one.
        """
        if self._monitor is not None:
            self._monitor.stop()
        self._monitor = SessionTimeoutMonitor(
            config=config,
            on_expired=on_expired,
            on_logout=self.logout,
            on_warning=on_warning,
        )
        return self._monitor
