import threading
import time
import unittest
from decimal import Decimal
from unittest.mock import patch

from lotsettle.claims import (
    TERMINAL_STATUSES,
    AlwaysRequireApproval,
    NeverRequireApproval,
    ThresholdApprovalPolicy,
    TicketLockRegistry,
    can_transition,
    ensure_transition,
    policy_from_settings,
)
from lotsettle.errors import InvalidTransition
from lotsettle.models import TicketStatus
from lotsettle.settlement import SettlementSummary


def _summary(total):
    return SettlementSummary(
        ticket_id=1,
        ticket_number="T-1",
        agent_id=1,
        draw_id=1,
        winning_number="215",
        bets=(),
        total_payout=Decimal(total),
        winning_bet_count=1,
    )


class TransitionTableTestCase(unittest.TestCase):
    def test_terminal_statuses(self):
        self.assertEqual(
            TERMINAL_STATUSES, {TicketStatus.CLAIMED, TicketStatus.CANCELLED}
        )

    def test_claim_path(self):
        self.assertTrue(can_transition(TicketStatus.ACTIVE, TicketStatus.SETTLED_WIN))
        self.assertTrue(
            can_transition(TicketStatus.SETTLED_WIN, TicketStatus.PENDING_APPROVAL)
        )
        self.assertTrue(can_transition(TicketStatus.PENDING_APPROVAL, TicketStatus.CLAIMED))

    def test_rejection_returns_to_settled_win(self):
        self.assertTrue(
            can_transition(TicketStatus.PENDING_APPROVAL, TicketStatus.SETTLED_WIN)
        )

    def test_every_non_claimed_state_can_be_cancelled(self):
        for status in TicketStatus:
            if status in (TicketStatus.CLAIMED, TicketStatus.CANCELLED):
                continue
            with self.subTest(status=status):
                self.assertTrue(can_transition(status, TicketStatus.CANCELLED))

    def test_claimed_is_terminal(self):
        for target in TicketStatus:
            with self.subTest(target=target):
                self.assertFalse(can_transition(TicketStatus.CLAIMED, target))

    def test_losers_cannot_be_claimed(self):
        self.assertFalse(can_transition(TicketStatus.SETTLED_LOSE, TicketStatus.CLAIMED))
        self.assertFalse(
            can_transition(TicketStatus.SETTLED_LOSE, TicketStatus.PENDING_APPROVAL)
        )

    def test_ensure_transition_raises_with_details(self):
        with self.assertRaises(InvalidTransition) as ctx:
            ensure_transition(
                TicketStatus.CLAIMED, TicketStatus.CANCELLED, ticket_id=42
            )
        self.assertEqual(ctx.exception.ticket_id, 42)
        self.assertEqual(ctx.exception.current, "claimed")
        self.assertEqual(ctx.exception.target, "cancelled")
        self.assertEqual(ctx.exception.http_status, 409)

    def test_accepts_raw_values(self):
        self.assertTrue(can_transition("active", "settled_lose"))


class ApprovalPolicyTestCase(unittest.TestCase):
    def test_always_and_never(self):
        self.assertTrue(AlwaysRequireApproval().requires_approval(_summary("1")))
        self.assertFalse(NeverRequireApproval().requires_approval(_summary("1000000")))

    def test_threshold_is_inclusive(self):
        policy = ThresholdApprovalPolicy(Decimal("10000"))
        self.assertFalse(policy.requires_approval(_summary("9999.99")))
        self.assertTrue(policy.requires_approval(_summary("10000")))

    def test_policy_from_settings(self):
        self.assertIsInstance(policy_from_settings("always"), AlwaysRequireApproval)
        self.assertIsInstance(policy_from_settings(" NEVER "), NeverRequireApproval)
        policy = policy_from_settings("threshold", Decimal("500"))
        self.assertIsInstance(policy, ThresholdApprovalPolicy)
        self.assertEqual(policy.threshold, Decimal("500"))

    def test_policy_from_settings_defaults(self):
        with patch("lotsettle.claims.policy.settings") as mock_settings:
            mock_settings.CLAIM_APPROVAL_MODE = "threshold"
            mock_settings.CLAIM_APPROVAL_THRESHOLD = Decimal("250")
            policy = policy_from_settings()
        self.assertEqual(policy.threshold, Decimal("250"))

    def test_unknown_mode(self):
        with self.assertRaises(ValueError):
            policy_from_settings("sometimes")


class TicketLockRegistryTestCase(unittest.TestCase):
    def test_same_ticket_is_serialized(self):
        registry = TicketLockRegistry()
        active = []
        overlaps = []
        guard = threading.Lock()

        def worker():
            with registry.hold(1):
                with guard:
                    active.append(1)
                    if len(active) > 1:
                        overlaps.append(True)
                time.sleep(0.01)
                with guard:
                    active.pop()

        threads = [threading.Thread(target=worker) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(overlaps, [])

    def test_different_tickets_do_not_block(self):
        registry = TicketLockRegistry()
        entered = threading.Event()

        def other():
            with registry.hold(2):
                entered.set()

        with registry.hold(1):
            thread = threading.Thread(target=other)
            thread.start()
            self.assertTrue(entered.wait(timeout=2))
            thread.join()

    def test_entries_are_released(self):
        registry = TicketLockRegistry()
        with registry.hold(1):
            self.assertEqual(len(registry), 1)
        self.assertEqual(len(registry), 0)

    def test_entry_released_on_error(self):
        registry = TicketLockRegistry()
        with self.assertRaises(RuntimeError):
            with registry.hold(3):
                raise RuntimeError("boom")
        self.assertEqual(len(registry), 0)


if __name__ == "__main__":
    unittest.main()
