"""
ASGI middleware: emit admin action audit events after successful responses.

Routes opt in through the log_admin_action dependency, which leaves an
AuditIntent on request.state. Once the response has been fully sent with a
2xx status, the middleware builds an AdminActionEvent for the authenticated
admin and hands it to the AuditDispatcher. The response is never affected.
"""

import logging
from typing import Any

from app.services.audit import AdminActionEvent, AuditDispatcher

logger = logging.getLogger(__name__)


def _header(scope: dict, name: bytes) -> str | None:
    for raw_k, raw_v in scope.get("headers") or []:
        if raw_k.lower() == name:
            return raw_v.decode("latin-1")
    return None


def _client_ip(scope: dict) -> str:
    client = scope.get("client")
    if client:
        return client[0]
    return "unknown"


def build_event(scope: dict, intent: Any, user: Any) -> AdminActionEvent:
    return AdminActionEvent(
        admin_user_id=user.user_id,
        admin_username=user.username,
        action=intent.action,
        target_type=intent.target_type,
        target_id=intent.target_id,
        details={"method": scope.get("method"), "path": scope.get("path")},
        ip_address=_client_ip(scope),
        user_agent=_header(scope, b"user-agent"),
        success=True,
    )


class AuditMiddleware:
    def __init__(self, app, dispatcher: AuditDispatcher | None = None) -> None:
        self.app = app
        self.dispatcher = dispatcher

    async def __call__(self, scope: dict, receive, send) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        status: dict[str, int] = {}

        async def send_wrapper(message: dict) -> None:
            if message.get("type") == "http.response.start":
                status["code"] = message.get("status", 0)
            await send(message)

        await self.app(scope, receive, send_wrapper)

        code = status.get("code", 0)
        if not 200 <= code < 300:
            return
        state = scope.get("state") or {}
        intent = state.get("audit_intent")
        user = state.get("user")
        if intent is None or user is None:
            return
        dispatcher = self.dispatcher
        if dispatcher is None and scope.get("app") is not None:
            dispatcher = getattr(scope["app"].state, "audit", None)
        if dispatcher is None:
            return
        try:
            dispatcher.emit(build_event(scope, intent, user))
        except Exception:
            logger.exception("Failed to emit audit event action=%s", intent.action)
