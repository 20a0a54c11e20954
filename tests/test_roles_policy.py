"""Unit tests for app.auth.roles and app.auth.policy: role ranking and the action table."""

import unittest

from app.auth.policy import Action, MINIMUM_ROLE, can_perform_action, permissions_for
from app.auth.roles import ROLE_RANK, Role, has_permission, parse_role, rank


class TestRoleRank(unittest.TestCase):
    def test_every_role_has_a_rank(self) -> None:
        for role in Role:
            self.assertIn(role, ROLE_RANK)
            self.assertGreater(rank(role), 0)

    def test_unknown_roles_rank_zero(self) -> None:
        self.assertEqual(rank("operator"), 0)
        self.assertEqual(rank(None), 0)
        self.assertIsNone(parse_role(""))

    def test_strings_and_enum_members_are_equivalent(self) -> None:
        self.assertEqual(rank("super_admin"), rank(Role.SUPER_ADMIN))


class TestHasPermission(unittest.TestCase):
    def test_matches_rank_comparison_for_all_pairs(self) -> None:
        for current in Role:
            for required in Role:
                with self.subTest(current=current, required=required):
                    self.assertEqual(
                        has_permission(current, required),
                        ROLE_RANK[current] >= ROLE_RANK[required],
                    )

    def test_admin_does_not_satisfy_super_admin(self) -> None:
        self.assertFalse(has_permission("admin", "super_admin"))
        self.assertTrue(has_permission("super_admin", "admin"))

    def test_unknown_roles_fail_closed(self) -> None:
        self.assertFalse(has_permission("root", "admin"))
        self.assertFalse(has_permission("super_admin", "root"))
        self.assertFalse(has_permission(None, "admin"))


class TestCanPerformAction(unittest.TestCase):
    def test_admin_actions(self) -> None:
        for action in (
            Action.CREATE_USER,
            Action.UPDATE_USER,
            Action.DELETE_USER,
            Action.CREATE_VOUCHER,
            Action.VIEW_REPORTS,
        ):
            with self.subTest(action=action):
                self.assertTrue(can_perform_action(Role.ADMIN, action))
                self.assertTrue(can_perform_action(Role.SUPER_ADMIN, action))

    def test_super_admin_only_actions(self) -> None:
        for action in (Action.CREATE_ADMIN, Action.DEACTIVATE_ADMIN, Action.VIEW_ADMIN_LOGS):
            with self.subTest(action=action):
                self.assertFalse(can_perform_action(Role.ADMIN, action))
                self.assertTrue(can_perform_action(Role.SUPER_ADMIN, action))

    def test_ownership_override_for_update_admin(self) -> None:
        self.assertTrue(can_perform_action("admin", "update_admin", target_user_id=5, acting_user_id=5))
        self.assertFalse(can_perform_action("admin", "update_admin", target_user_id=5, acting_user_id=6))
        self.assertFalse(can_perform_action("admin", "update_admin"))

    def test_ownership_override_covers_every_action_for_every_role(self) -> None:
        for role in Role:
            for action in Action:
                with self.subTest(role=role, action=action):
                    self.assertTrue(
                        can_perform_action(role, action, target_user_id=7, acting_user_id=7)
                    )

    def test_ownership_override_needs_known_role_and_action(self) -> None:
        self.assertFalse(can_perform_action("guest", "view_admin", target_user_id=7, acting_user_id=7))
        self.assertFalse(can_perform_action(None, "view_admin", target_user_id=7, acting_user_id=7))
        self.assertFalse(can_perform_action("admin", "format_disk", target_user_id=7, acting_user_id=7))

    def test_ownership_override_is_not_a_blanket_grant(self) -> None:
        self.assertFalse(
            can_perform_action("admin", "deactivate_admin", target_user_id=5, acting_user_id=6)
        )
        self.assertFalse(can_perform_action("admin", "reset_admin_password", target_user_id=5))

    def test_missing_target_never_matches_missing_actor(self) -> None:
        self.assertFalse(
            can_perform_action("admin", "update_admin", target_user_id=None, acting_user_id=None)
        )

    def test_unknown_action_or_role_denied(self) -> None:
        self.assertFalse(can_perform_action("super_admin", "format_disk"))
        self.assertFalse(can_perform_action("guest", "view_reports"))
        self.assertFalse(can_perform_action(None, "view_reports"))

    def test_every_action_has_a_minimum_role(self) -> None:
        self.assertEqual(set(MINIMUM_ROLE), set(Action))


class TestPermissionsFor(unittest.TestCase):
    def test_super_admin_has_every_action(self) -> None:
        self.assertEqual(permissions_for(Role.SUPER_ADMIN), sorted(a.value for a in Action))

    def test_admin_subset_is_sorted(self) -> None:
        perms = permissions_for("admin")
        self.assertEqual(perms, sorted(perms))
        self.assertIn("create_voucher", perms)
        self.assertNotIn("create_admin", perms)

    def test_unknown_role_has_nothing(self) -> None:
        self.assertEqual(permissions_for("guest"), [])
