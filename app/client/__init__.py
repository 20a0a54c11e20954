from app.client.api_client import ClientError, HotspotAdminClient
from app.client.session_monitor import (
    ACTIVITY_EVENTS,
    SessionState,
    SessionTimeoutConfig,
    SessionTimeoutMonitor,
)

__all__ = [
    "ACTIVITY_EVENTS",
    "ClientError",
    "HotspotAdminClient",
    "SessionState",
    "SessionTimeoutConfig",
    "SessionTimeoutMonitor",
]
