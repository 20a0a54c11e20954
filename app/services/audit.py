"""
Admin action audit events and their asynchronous dispatch.

Producers call AuditDispatcher.emit(), which never blocks and never raises.
A single consumer task drains the queue and hands each event to the sink in a
worker thread; sink failures are logged and dropped.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from sqlalchemy.orm import Session, sessionmaker

logger = logging.getLogger(__name__)


class AdminAction(str, Enum):
    """Audited action names stored in admin_logs.action."""

    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    LOGIN_FAILED = "LOGIN_FAILED"
    PASSWORD_CHANGED = "PASSWORD_CHANGED"
    ADMIN_CREATED = "ADMIN_CREATED"
    ADMIN_UPDATED = "ADMIN_UPDATED"
    ADMIN_ACTIVATED = "ADMIN_ACTIVATED"
    ADMIN_DEACTIVATED = "ADMIN_DEACTIVATED"
    ADMIN_PASSWORD_RESET = "ADMIN_PASSWORD_RESET"


@dataclass
class AdminActionEvent:
    """One audited action; mirrors an admin_logs row."""

    admin_user_id: int
    admin_username: str
    action: str
    target_type: str | None = None
    target_id: int | str | None = None
    details: dict[str, Any] = field(default_factory=dict)
    ip_address: str | None = None
    user_agent: str | None = None
    success: bool = True
    error_message: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


AuditSink = Callable[[AdminActionEvent], None]


def sql_audit_sink(session_factory: sessionmaker[Session]) -> AuditSink:
    """Sink that appends each event to admin_logs in its own session."""
    from app.services.admin_log_store import AdminLogStore

    def write(event: AdminActionEvent) -> None:
        with session_factory() as db:
            AdminLogStore(db).append(event)

    return write


class AuditDispatcher:
    """Queue between request handling and the audit sink."""

    def __init__(self, sink: AuditSink, enabled: bool = True, max_queue: int = 1000) -> None:
        self._sink = sink
        self.enabled = enabled
        self._max_queue = max_queue
        self._queue: asyncio.Queue[AdminActionEvent] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            return
        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue(maxsize=self._max_queue)
        self._task = asyncio.create_task(self._consume(), name="audit-consumer")

    async def stop(self, timeout: float = 5.0) -> None:
        """Drain pending events (bounded by timeout) and stop the consumer."""
        if self._task is None or self._queue is None:
            return
        # Let enqueue callbacks already scheduled by emit() run first.
        await asyncio.sleep(0)
        try:
            await asyncio.wait_for(self._queue.join(), timeout=timeout)
        except TimeoutError:
            logger.warning("Audit queue not drained on shutdown: pending=%s", self._queue.qsize())
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        self._queue = None
        self._loop = None

    def emit(self, event: AdminActionEvent) -> None:
        """Schedule event for persistence. Safe to call from any thread."""
        if not self.enabled:
            return
        if self._loop is None or self._queue is None or self._loop.is_closed():
            logger.warning("Audit consumer not running; dropping event action=%s", event.action)
            return
        try:
            self._loop.call_soon_threadsafe(self._enqueue, event)
        except RuntimeError:
            logger.warning("Audit loop closed; dropping event action=%s", event.action)

    def _enqueue(self, event: AdminActionEvent) -> None:
        if self._queue is None:
            return
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning("Audit queue full; dropping event action=%s", event.action)

    async def _consume(self) -> None:
        assert self._queue is not None
        queue = self._queue
        while True:
            event = await queue.get()
            try:
                await asyncio.to_thread(self._sink, event)
            except Exception:
                logger.exception(
                    "Audit write failed: action=%s admin_user_id=%s",
                    event.action,
                    event.admin_user_id,
                )
            finally:
                queue.task_done()
