"""
Client-side idle-session watchdog.

A three-state machine (ACTIVE -> WARNING -> EXPIRED) driven by discrete
events: a once-per-second tick, user activity, extend and logout-now. One
ticker task feeds tick(); the idle clock and the warning countdown share the
same state, so there is no second timer to race with.

Expiry is final for the monitor: local state is cleared, on_expired is called
synchronously, and the remote logout returned by on_logout is scheduled
without being awaited so network failures never delay the local logout.
"""

import asyncio
import inspect
import logging
import math
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

# Interaction events that count as activity.
ACTIVITY_EVENTS = frozenset(
    {"mousedown", "mousemove", "keypress", "scroll", "touchstart", "click"}
)


class SessionState(str, Enum):
    ACTIVE = "active"
    WARNING = "warning"
    EXPIRED = "expired"


@dataclass(frozen=True)
class SessionTimeoutConfig:
    """
    total_seconds: idle budget before forced logout.
    warning_seconds: lead time; the warning opens at total - warning idle.
    countdown_seconds: size of the countdown window used for progress display.
    """

    total_seconds: float = 15 * 60
    warning_seconds: float = 5 * 60
    countdown_seconds: int = 60
    tick_seconds: float = 1.0

    def __post_init__(self) -> None:
        if self.total_seconds <= 0 or self.warning_seconds <= 0 or self.countdown_seconds <= 0:
            raise ValueError("Session timeout values must be positive")
        if self.warning_seconds >= self.total_seconds:
            raise ValueError("warning_seconds must be less than total_seconds")
        if self.tick_seconds <= 0:
            raise ValueError("tick_seconds must be positive")

    @classmethod
    def from_server(cls, session: dict[str, Any]) -> "SessionTimeoutConfig":
        """Build from the "session" block of GET /admins/me/permissions."""
        return cls(
            total_seconds=session["timeout_seconds"],
            warning_seconds=session["warning_seconds"],
            countdown_seconds=session["countdown_seconds"],
        )


class SessionTimeoutMonitor:
    def __init__(
        self,
        config: SessionTimeoutConfig | None = None,
        on_expired: Callable[[], None] | None = None,
        on_logout: Callable[[], Awaitable[Any] | None] | None = None,
        on_warning: Callable[[int], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or SessionTimeoutConfig()
        self._on_expired = on_expired
        self._on_logout = on_logout
        self._on_warning = on_warning
        self._clock = clock
        self._state = SessionState.ACTIVE
        self._last_activity = clock()
        self._countdown = 0
        self._task: asyncio.Task[None] | None = None
        self._logout_task: asyncio.Task[Any] | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def countdown(self) -> int:
        """Seconds left on the warning countdown; 0 outside WARNING."""
        return self._countdown

    @property
    def warning_shown(self) -> bool:
        return self._state is SessionState.WARNING

    @property
    def progress(self) -> float:
        """Fraction of the countdown window consumed, for a progress bar."""
        if self._state is SessionState.EXPIRED:
            return 1.0
        if self._state is SessionState.ACTIVE:
            return 0.0
        window = self.config.countdown_seconds
        return min(1.0, max(0.0, (window - self._countdown) / window))

    def idle_seconds(self) -> float:
        return self._clock() - self._last_activity

    # Events

    def handle_event(self, name: str) -> bool:
        """Feed a UI event; returns True if it counted as activity."""
        if name not in ACTIVITY_EVENTS:
            return False
        return self.record_activity()

    def record_activity(self) -> bool:
        """Reset the idle clock and close any warning. Ignored once expired."""
        if self._state is SessionState.EXPIRED:
            return False
        self._last_activity = self._clock()
        self._state = SessionState.ACTIVE
        self._countdown = 0
        return True

    def extend(self) -> bool:
        """"Stay logged in" from the warning dialog."""
        return self.record_activity()

    def logout_now(self) -> None:
        """"Logout now" from the warning dialog."""
        self._expire()

    def tick(self) -> SessionState:
        """Advance the machine by one tick."""
        if self._state is SessionState.EXPIRED:
            return self._state

        remaining = self.config.total_seconds - self.idle_seconds()
        if self._state is SessionState.ACTIVE:
            if remaining <= 0:
                self._expire()
            elif remaining <= self.config.warning_seconds:
                self._state = SessionState.WARNING
                self._countdown = math.ceil(remaining)
                if self._on_warning is not None:
                    self._on_warning(self._countdown)
        else:
            # Wall clock wins if the ticker stalled (e.g. the machine slept).
            self._countdown = min(self._countdown - 1, max(0, math.ceil(remaining)))
            if self._countdown <= 0:
                self._expire()
        return self._state

    def _expire(self) -> None:
        if self._state is SessionState.EXPIRED:
            return
        self._state = SessionState.EXPIRED
        self._countdown = 0
        self._cancel_ticker()
        if self._on_expired is not None:
            try:
                self._on_expired()
            except Exception:
                logger.exception("Session expiry callback failed")
        self._start_remote_logout()

    def _start_remote_logout(self) -> None:
        if self._on_logout is None:
            return
        try:
            pending = self._on_logout()
        except Exception:
            logger.exception("Logout callback failed")
            return
        if not inspect.isawaitable(pending):
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop; remote logout skipped")
            if inspect.iscoroutine(pending):
                pending.close()
            return
        self._logout_task = loop.create_task(_run_logout(pending))

    # Ticker

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the once-per-tick ticker on the running event loop."""
        if self.running or self._state is SessionState.EXPIRED:
            return
        self.record_activity()
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        while self._state is not SessionState.EXPIRED:
            await asyncio.sleep(self.config.tick_seconds)
            self.tick()

    def _cancel_ticker(self) -> None:
        task = self._task
        self._task = None
        if task is None or task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        if task is not current:
            task.cancel()

    def stop(self) -> None:
        """Stop ticking when authentication ends by other means (e.g. manual logout)."""
        self._cancel_ticker()


async def _run_logout(pending: Awaitable[Any]) -> None:
    try:
        await pending
    except Exception:
        logger.warning("Remote logout failed; local session already cleared", exc_info=True)
