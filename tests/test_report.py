import unittest
from datetime import date
from decimal import Decimal

from lotsettle.models import Bet, Draw, DrawStatus, DrawTime, PrizeMultipliers, Ticket
from lotsettle.settlement import SettlementEngine, SettlementReportAggregator, WinType

CONFIG = PrizeMultipliers(
    standard=Decimal("450"),
    rambolito_unique=Decimal("75"),
    rambolito_double=Decimal("150"),
)


def _draw(day, slot, winning_number):
    status = DrawStatus.COMPLETED if winning_number else DrawStatus.ACTIVE
    return Draw(
        draw_date=day, draw_time=slot, winning_number=winning_number, status=status
    )


class SettlementReportTestCase(unittest.TestCase):
    def setUp(self):
        day1 = date(2024, 5, 1)
        day2 = date(2024, 5, 2)
        self.two_pm = _draw(day1, DrawTime.TWO_PM, "215")
        self.nine_pm = _draw(day1, DrawTime.NINE_PM, "223")
        self.next_day = _draw(day2, DrawTime.TWO_PM, "999")
        self.pending = _draw(day2, DrawTime.FIVE_PM, None)

        self.pairs = []

        def add(number, agent_id, draw, *bets):
            ticket = Ticket(
                ticket_number=number, agent_id=agent_id, draw=draw, bets=list(bets)
            )
            self.pairs.append((ticket, draw))

        # agent 1: 22500 + 3750 straight/unique win
        add(
            "A1",
            1,
            self.two_pm,
            Bet(bet_type="standard", combination="215", amount=50),
            Bet(bet_type="rambolito", combination="512", amount=50),
        )
        # agent 2: loser
        add("A2", 2, self.two_pm, Bet(bet_type="standard", combination="111", amount=20))
        # agent 2: 7500 double win
        add("A3", 2, self.nine_pm, Bet(bet_type="rambolito", combination="322", amount=50))
        # agent 1: next day 4500 straight
        add("A4", 1, self.next_day, Bet(bet_type="standard", combination="999", amount=10))
        # pending draw, never counted
        add("A5", 1, self.pending, Bet(bet_type="standard", combination="215", amount=10))

        self.aggregator = SettlementReportAggregator(SettlementEngine(digits=3))

    def test_totals_over_all_settled_tickets(self):
        report = self.aggregator.aggregate(self.pairs, CONFIG)

        self.assertEqual(report.total_winnings, Decimal("38250"))
        self.assertEqual(report.winning_ticket_count, 3)
        self.assertEqual(report.settled_ticket_count, 4)
        self.assertEqual(report.gross_sales, Decimal("180"))
        self.assertEqual(report.net_sales, Decimal("180") - Decimal("38250"))

    def test_breakdowns(self):
        report = self.aggregator.aggregate(self.pairs, CONFIG)

        self.assertEqual(report.by_draw_time[DrawTime.TWO_PM], Decimal("30750"))
        self.assertEqual(report.by_draw_time[DrawTime.NINE_PM], Decimal("7500"))
        self.assertNotIn(DrawTime.FIVE_PM, report.by_draw_time)

        self.assertEqual(report.by_agent[1].winning_ticket_count, 2)
        self.assertEqual(report.by_agent[1].amount, Decimal("30750"))
        self.assertEqual(report.by_agent[2].winning_ticket_count, 1)
        self.assertEqual(report.by_agent[2].amount, Decimal("7500"))

        self.assertEqual(report.by_win_type[WinType.STRAIGHT].count, 2)
        self.assertEqual(report.by_win_type[WinType.STRAIGHT].amount, Decimal("27000"))
        self.assertEqual(report.by_win_type[WinType.RAMBOLITO_UNIQUE].amount, Decimal("3750"))
        self.assertEqual(report.by_win_type[WinType.RAMBOLITO_DOUBLE].amount, Decimal("7500"))

    def test_totals_equal_sum_of_per_ticket_settlements(self):
        engine = SettlementEngine(digits=3)
        expected = sum(
            (s.total_payout for s in engine.settle_many(self.pairs, CONFIG)),
            Decimal("0"),
        )

        report = self.aggregator.aggregate(self.pairs, CONFIG)

        self.assertEqual(report.total_winnings, expected)
        self.assertEqual(sum(report.by_draw_time.values(), Decimal("0")), expected)
        self.assertEqual(
            sum((a.amount for a in report.by_agent.values()), Decimal("0")), expected
        )

    def test_date_range_filter(self):
        report = self.aggregator.aggregate(
            self.pairs, CONFIG, date_from=date(2024, 5, 2), date_to=date(2024, 5, 2)
        )
        self.assertEqual(report.total_winnings, Decimal("4500"))
        self.assertEqual(report.settled_ticket_count, 1)

    def test_draw_time_filter(self):
        report = self.aggregator.aggregate(
            self.pairs, CONFIG, draw_times=[DrawTime.NINE_PM]
        )
        self.assertEqual(report.total_winnings, Decimal("7500"))
        self.assertEqual(list(report.by_draw_time), [DrawTime.NINE_PM])

    def test_agent_filter(self):
        report = self.aggregator.aggregate(self.pairs, CONFIG, agent_id=2)
        self.assertEqual(report.total_winnings, Decimal("7500"))
        self.assertEqual(report.settled_ticket_count, 2)
        self.assertEqual(list(report.by_agent), [2])

    def test_empty_scope(self):
        report = self.aggregator.aggregate([], CONFIG)
        self.assertEqual(report.total_winnings, Decimal("0"))
        self.assertEqual(report.to_json()["by_agent"], {})

    def test_to_json(self):
        payload = self.aggregator.aggregate(self.pairs, CONFIG, agent_id=2).to_json()
        self.assertEqual(payload["total_winnings"], "7500.00")
        self.assertEqual(payload["by_draw_time"], {"nine_pm": "7500.00"})
        self.assertEqual(
            payload["by_agent"], {"2": {"winning_ticket_count": 1, "amount": "7500.00"}}
        )
        self.assertEqual(
            payload["by_win_type"], {"rambolito_double": {"count": 1, "amount": "7500.00"}}
        )


if __name__ == "__main__":
    unittest.main()
