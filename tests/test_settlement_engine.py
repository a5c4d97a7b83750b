import unittest
from datetime import date
from decimal import Decimal

from lotsettle.errors import DrawNotSettled, InvalidCombination, UnknownBetType
from lotsettle.models import (
    Bet,
    BetType,
    Draw,
    DrawStatus,
    DrawTime,
    PrizeMultipliers,
    Ticket,
)
from lotsettle.settlement import DerivedStatus, SettlementEngine, WinType

CONFIG = PrizeMultipliers(
    standard=Decimal("450"),
    rambolito_unique=Decimal("75"),
    rambolito_double=Decimal("150"),
    configuration_id=7,
)


def _draw(winning_number="215", status=DrawStatus.COMPLETED):
    return Draw(
        draw_date=date(2024, 5, 1),
        draw_time=DrawTime.TWO_PM,
        winning_number=winning_number,
        status=status,
    )


def _ticket(draw, *bets, number="T-1", agent_id=1):
    return Ticket(ticket_number=number, agent_id=agent_id, draw=draw, bets=list(bets))


class SettlementScenarioTestCase(unittest.TestCase):
    def setUp(self):
        self.engine = SettlementEngine(digits=3)

    def test_standard_win(self):
        draw = _draw("215")
        ticket = _ticket(draw, Bet(bet_type=BetType.STANDARD, combination="215", amount=100))

        summary = self.engine.settle(ticket, draw, CONFIG)

        self.assertEqual(summary.winning_bet_count, 1)
        self.assertEqual(summary.total_payout, Decimal("45000"))
        self.assertIs(summary.derived_status, DerivedStatus.WON)
        self.assertEqual(summary.configuration_id, 7)

    def test_mixed_ticket(self):
        draw = _draw("215")
        ticket = _ticket(
            draw,
            Bet(bet_type=BetType.STANDARD, combination="215", amount=50),
            Bet(bet_type=BetType.RAMBOLITO, combination="512", amount=50),
        )

        summary = self.engine.settle(ticket, draw, CONFIG)

        self.assertEqual(summary.winning_bet_count, 2)
        self.assertEqual([b.payout for b in summary.bets], [Decimal("22500"), Decimal("3750")])
        self.assertEqual(summary.total_payout, Decimal("26250"))
        self.assertEqual(
            [b.win_type for b in summary.bets],
            [WinType.STRAIGHT, WinType.RAMBOLITO_UNIQUE],
        )

    def test_rambolito_double_and_unique_payouts(self):
        double_draw = _draw("232")
        double_ticket = _ticket(
            double_draw, Bet(bet_type="rambolito", combination="223", amount=50)
        )
        unique_draw = _draw("321")
        unique_ticket = _ticket(
            unique_draw, Bet(bet_type="rambolito", combination="123", amount=50)
        )

        self.assertEqual(
            self.engine.settle(double_ticket, double_draw, CONFIG).total_payout,
            Decimal("7500"),
        )
        self.assertEqual(
            self.engine.settle(unique_ticket, unique_draw, CONFIG).total_payout,
            Decimal("3750"),
        )

    def test_losers_contribute_zero(self):
        draw = _draw("215")
        ticket = _ticket(
            draw,
            Bet(bet_type=BetType.STANDARD, combination="512", amount=100),
            Bet(bet_type=BetType.RAMBOLITO, combination="115", amount=100),
        )

        summary = self.engine.settle(ticket, draw, CONFIG)

        self.assertEqual(summary.winning_bet_count, 0)
        self.assertEqual(summary.total_payout, Decimal("0"))
        self.assertTrue(all(b.payout == Decimal("0") for b in summary.bets))
        self.assertTrue(all(b.win_type is None for b in summary.bets))
        self.assertIs(summary.derived_status, DerivedStatus.LOST)

    def test_bet_order_is_preserved(self):
        draw = _draw("215")
        combos = ["999", "215", "000", "521"]
        ticket = _ticket(
            draw, *[Bet(bet_type="rambolito", combination=c, amount=1) for c in combos]
        )

        summary = self.engine.settle(ticket, draw, CONFIG)

        self.assertEqual([b.combination for b in summary.bets], combos)
        self.assertEqual([b.position for b in summary.bets], [0, 1, 2, 3])
        self.assertEqual([b.is_winner for b in summary.bets], [False, True, False, True])

    def test_settle_is_deterministic(self):
        draw = _draw("215")
        ticket = _ticket(
            draw,
            Bet(bet_type=BetType.STANDARD, combination="215", amount=50),
            Bet(bet_type=BetType.RAMBOLITO, combination="512", amount=25),
            Bet(bet_type=BetType.RAMBOLITO, combination="111", amount=5),
        )

        first = self.engine.settle(ticket, draw, CONFIG)
        second = self.engine.settle(ticket, draw, CONFIG)

        self.assertEqual(first, second)
        self.assertEqual(first.to_json(), second.to_json())


class SettlementPreconditionTestCase(unittest.TestCase):
    def setUp(self):
        self.engine = SettlementEngine(digits=3)

    def test_pending_draw_is_not_settled(self):
        draw = _draw(None, status=DrawStatus.ACTIVE)
        ticket = _ticket(draw, Bet(bet_type="standard", combination="215", amount=1))
        with self.assertRaises(DrawNotSettled):
            self.engine.settle(ticket, draw, CONFIG)

    def test_completed_without_number_is_not_settled(self):
        draw = _draw(None, status=DrawStatus.COMPLETED)
        ticket = _ticket(draw, Bet(bet_type="standard", combination="215", amount=1))
        with self.assertRaises(DrawNotSettled):
            self.engine.settle(ticket, draw, CONFIG)

    def test_derive_status_active_for_pending_draw(self):
        draw = _draw(None, status=DrawStatus.PENDING)
        ticket = _ticket(draw, Bet(bet_type="standard", combination="215", amount=1))
        self.assertIs(self.engine.derive_status(ticket, draw, CONFIG), DerivedStatus.ACTIVE)

    def test_unknown_bet_type_is_logged_and_raised(self):
        draw = _draw("215")
        ticket = _ticket(draw, Bet(bet_type="pick4", combination="215", amount=1))
        with self.assertLogs("lotsettle.settlement.engine", level="WARNING") as logs:
            with self.assertRaises(UnknownBetType):
                self.engine.settle(ticket, draw, CONFIG)
        self.assertIn("T-1", logs.output[0])

    def test_malformed_combination_is_logged_and_raised(self):
        draw = _draw("215")
        ticket = _ticket(draw, Bet(bet_type="standard", combination="2x5", amount=1))
        with self.assertLogs("lotsettle.settlement.engine", level="WARNING"):
            with self.assertRaises(InvalidCombination):
                self.engine.settle(ticket, draw, CONFIG)

    def test_ticket_from_other_draw_is_rejected(self):
        draw = _draw("215")
        draw.id = 1
        ticket = Ticket(ticket_number="T-9", agent_id=1, draw_id=2, bets=[])
        with self.assertRaises(ValueError):
            self.engine.settle(ticket, draw, CONFIG)

    def test_settle_many_skips_unsettled_draws(self):
        settled = _draw("215")
        pending = _draw(None, status=DrawStatus.ACTIVE)
        pairs = [
            (_ticket(settled, Bet(bet_type="standard", combination="215", amount=1), number="A"), settled),
            (_ticket(pending, Bet(bet_type="standard", combination="215", amount=1), number="B"), pending),
        ]

        summaries = self.engine.settle_many(pairs, CONFIG)

        self.assertEqual([s.ticket_number for s in summaries], ["A"])


class SummaryJsonTestCase(unittest.TestCase):
    def test_to_json_serializes_amounts_as_strings(self):
        draw = _draw("215")
        ticket = _ticket(draw, Bet(bet_type="standard", combination="215", amount=100))

        payload = SettlementEngine(digits=3).settle(ticket, draw, CONFIG).to_json()

        self.assertEqual(payload["total_payout"], "45000.00")
        self.assertEqual(payload["derived_status"], "won")
        self.assertEqual(payload["bets"][0]["win_type"], "straight")
        self.assertEqual(payload["bets"][0]["amount"], "100")


if __name__ == "__main__":
    unittest.main()
