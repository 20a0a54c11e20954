"""Tests for the admin action audit trail: dispatcher queue, middleware emission and log storage."""

import asyncio
import json
import unittest
from datetime import UTC, datetime, timedelta

from fastapi.testclient import TestClient

from app.auth.roles import Role
from app.services.admin_log_store import AdminLogFilters, AdminLogStore
from app.services.audit import AdminAction, AdminActionEvent, AuditDispatcher
from _support import (
    OTHER_STRONG_PASSWORD,
    STRONG_PASSWORD,
    RecordingSink,
    add_admin,
    bearer,
    login,
    make_app,
    make_session_factory,
)


def _event(action: str = "LOGIN", **kwargs) -> AdminActionEvent:
    defaults = {"admin_user_id": 1, "admin_username": "chief"}
    defaults.update(kwargs)
    return AdminActionEvent(action=action, **defaults)


class TestAuditDispatcher(unittest.TestCase):
    def test_events_reach_sink_before_stop_returns(self) -> None:
        sink = RecordingSink()

        async def run() -> None:
            dispatcher = AuditDispatcher(sink)
            await dispatcher.start()
            self.assertTrue(dispatcher.running)
            dispatcher.emit(_event("LOGIN"))
            dispatcher.emit(_event("LOGOUT"))
            await dispatcher.stop()
            self.assertFalse(dispatcher.running)

        asyncio.run(run())
        self.assertEqual(sink.actions(), ["LOGIN", "LOGOUT"])

    def test_sink_failure_is_logged_and_consumer_survives(self) -> None:
        calls: list[str] = []

        def flaky(event: AdminActionEvent) -> None:
            calls.append(event.action)
            if event.action == "LOGIN":
                raise RuntimeError("disk full")

        async def run() -> None:
            dispatcher = AuditDispatcher(flaky)
            await dispatcher.start()
            dispatcher.emit(_event("LOGIN"))
            dispatcher.emit(_event("LOGOUT"))
            await dispatcher.stop()

        with self.assertLogs("app.services.audit", level="ERROR"):
            asyncio.run(run())
        self.assertEqual(calls, ["LOGIN", "LOGOUT"])

    def test_emit_without_consumer_drops_with_warning(self) -> None:
        sink = RecordingSink()
        dispatcher = AuditDispatcher(sink)
        with self.assertLogs("app.services.audit", level="WARNING"):
            dispatcher.emit(_event())
        self.assertEqual(sink.events, [])

    def test_disabled_dispatcher_ignores_events(self) -> None:
        sink = RecordingSink()

        async def run() -> None:
            dispatcher = AuditDispatcher(sink, enabled=False)
            await dispatcher.start()
            dispatcher.emit(_event())
            await dispatcher.stop()

        asyncio.run(run())
        self.assertEqual(sink.events, [])

    def test_full_queue_drops_event(self) -> None:
        sink = RecordingSink()

        async def run() -> None:
            dispatcher = AuditDispatcher(sink, max_queue=1)
            await dispatcher.start()
            with self.assertLogs("app.services.audit", level="WARNING"):
                dispatcher._enqueue(_event("LOGIN"))
                dispatcher._enqueue(_event("LOGOUT"))
            await dispatcher.stop()

        asyncio.run(run())
        self.assertEqual(sink.actions(), ["LOGIN"])


class TestAuditThroughApi(unittest.TestCase):
    def setUp(self) -> None:
        self.app, self.factory, self.sink = make_app()
        self.chief = add_admin(self.factory, "chief", role=Role.SUPER_ADMIN)
        self.operator = add_admin(self.factory, "operator")

    def test_successful_actions_are_audited(self) -> None:
        with TestClient(self.app) as client:
            headers = bearer(login(client, "chief"))
            resp = client.post(
                f"/api/admins/{self.operator.id}/reset-password",
                json={"password": OTHER_STRONG_PASSWORD},
                headers={**headers, "User-Agent": "ops-console/1.0"},
            )
            self.assertEqual(resp.status_code, 200)
        actions = self.sink.actions()
        self.assertEqual(actions, [AdminAction.LOGIN.value, AdminAction.ADMIN_PASSWORD_RESET.value])
        reset = self.sink.events[1]
        self.assertEqual(reset.admin_user_id, self.chief.id)
        self.assertEqual(reset.target_type, "admin")
        self.assertEqual(reset.target_id, self.operator.id)
        self.assertEqual(reset.user_agent, "ops-console/1.0")
        self.assertEqual(reset.details["path"], f"/api/admins/{self.operator.id}/reset-password")

    def test_failed_actions_are_not_audited(self) -> None:
        with TestClient(self.app) as client:
            headers = bearer(login(client, "operator"))
            resp = client.post(
                "/api/auth/change-password",
                json={"current_password": "Wrong#Pass123", "new_password": OTHER_STRONG_PASSWORD},
                headers=headers,
            )
            self.assertEqual(resp.status_code, 400)
        self.assertNotIn(AdminAction.PASSWORD_CHANGED.value, self.sink.actions())

    def test_toggle_status_records_direction(self) -> None:
        with TestClient(self.app) as client:
            headers = bearer(login(client, "chief"))
            client.post(f"/api/admins/{self.operator.id}/toggle-status", headers=headers)
            client.post(f"/api/admins/{self.operator.id}/toggle-status", headers=headers)
        self.assertEqual(
            self.sink.actions()[-2:],
            [AdminAction.ADMIN_DEACTIVATED.value, AdminAction.ADMIN_ACTIVATED.value],
        )

    def test_login_failures_are_audited(self) -> None:
        with TestClient(self.app) as client:
            client.post("/api/auth/login", json={"username": "ghost", "password": STRONG_PASSWORD})
        event = self.sink.events[-1]
        self.assertEqual(event.action, AdminAction.LOGIN_FAILED.value)
        self.assertEqual(event.admin_user_id, 0)
        self.assertFalse(event.success)
        self.assertEqual(event.details, {"reason": "User not found"})

    def test_sink_failure_does_not_change_response(self) -> None:
        app, factory, _ = make_app(sink=RecordingSink(fail=True))
        add_admin(factory, "chief", role=Role.SUPER_ADMIN)
        with self.assertLogs("app.services.audit", level="ERROR"):
            with TestClient(app) as client:
                resp = client.post(
                    "/api/auth/login", json={"username": "chief", "password": STRONG_PASSWORD}
                )
                self.assertEqual(resp.status_code, 200)


class TestAdminLogStore(unittest.TestCase):
    def setUp(self) -> None:
        self.factory = make_session_factory()
        base = datetime(2026, 1, 1, tzinfo=UTC)
        with self.factory() as db:
            store = AdminLogStore(db)
            store.append(_event("LOGIN", timestamp=base, details={"role": "super_admin"}))
            store.append(_event("LOGIN_FAILED", admin_user_id=0, success=False, timestamp=base + timedelta(hours=1)))
            store.append(_event("LOGOUT", target_id=1, timestamp=base + timedelta(hours=2)))

    def test_find_newest_first(self) -> None:
        with self.factory() as db:
            rows, total = AdminLogStore(db).find()
        self.assertEqual(total, 3)
        self.assertEqual([r.action for r in rows], ["LOGOUT", "LOGIN_FAILED", "LOGIN"])
        self.assertEqual(rows[0].target_id, "1")
        self.assertEqual(json.loads(rows[2].details), {"role": "super_admin"})
        self.assertEqual(rows[1].ip_address, "unknown")

    def test_filters_and_paging(self) -> None:
        with self.factory() as db:
            store = AdminLogStore(db)
            rows, total = store.find(AdminLogFilters(success=False))
            self.assertEqual((total, rows[0].action), (1, "LOGIN_FAILED"))
            rows, total = store.find(AdminLogFilters(admin_user_id=1), limit=1, offset=1)
            self.assertEqual(total, 2)
            self.assertEqual([r.action for r in rows], ["LOGIN"])
