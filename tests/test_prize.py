import unittest
from decimal import Decimal
from types import SimpleNamespace

from lotsettle.errors import UnknownBetType
from lotsettle.models import PrizeMultipliers
from lotsettle.settlement.prize import (
    WinType,
    compute_payout,
    is_double_pattern,
    multiplier_for,
    win_type_for,
)

CONFIG = PrizeMultipliers(
    standard=Decimal("450"),
    rambolito_unique=Decimal("75"),
    rambolito_double=Decimal("150"),
)


def _bet(bet_type, combination, amount):
    return SimpleNamespace(bet_type=bet_type, combination=combination, amount=amount)


class DoublePatternTestCase(unittest.TestCase):
    def test_doubles(self):
        for combination in ("223", "232", "322", "222", "100"):
            with self.subTest(combination=combination):
                self.assertTrue(is_double_pattern(combination))

    def test_all_distinct(self):
        for combination in ("123", "512", "908"):
            with self.subTest(combination=combination):
                self.assertFalse(is_double_pattern(combination))


class ComputePayoutTestCase(unittest.TestCase):
    def test_standard_uses_standard_multiplier(self):
        payout = compute_payout(_bet("standard", "215", Decimal("100")), CONFIG)
        self.assertEqual(payout, Decimal("45000.00"))

    def test_rambolito_double(self):
        payout = compute_payout(_bet("rambolito", "223", Decimal("50")), CONFIG)
        self.assertEqual(payout, Decimal("7500.00"))

    def test_rambolito_unique(self):
        payout = compute_payout(_bet("rambolito", "123", Decimal("50")), CONFIG)
        self.assertEqual(payout, Decimal("3750.00"))

    def test_standard_ignores_double_pattern(self):
        payout = compute_payout(_bet("standard", "223", Decimal("10")), CONFIG)
        self.assertEqual(payout, Decimal("4500.00"))

    def test_fractional_amount_rounds_to_cents(self):
        config = PrizeMultipliers(
            standard=Decimal("3.335"),
            rambolito_unique=Decimal("1"),
            rambolito_double=Decimal("1"),
        )
        payout = compute_payout(_bet("standard", "111", Decimal("1")), config)
        self.assertEqual(payout, Decimal("3.34"))

    def test_float_amounts_are_converted_via_str(self):
        payout = compute_payout(_bet("rambolito", "123", 0.1), CONFIG)
        self.assertEqual(payout, Decimal("7.50"))

    def test_unknown_bet_type(self):
        with self.assertRaises(UnknownBetType):
            compute_payout(_bet("pick4", "123", Decimal("1")), CONFIG)

    def test_configuration_is_not_mutated(self):
        compute_payout(_bet("standard", "215", Decimal("100")), CONFIG)
        self.assertEqual(CONFIG.standard, Decimal("450"))


class WinTypeTestCase(unittest.TestCase):
    def test_classification(self):
        self.assertIs(win_type_for(_bet("standard", "223", 1)), WinType.STRAIGHT)
        self.assertIs(
            win_type_for(_bet("rambolito", "223", 1)), WinType.RAMBOLITO_DOUBLE
        )
        self.assertIs(
            win_type_for(_bet("rambolito", "123", 1)), WinType.RAMBOLITO_UNIQUE
        )

    def test_multiplier_for(self):
        self.assertEqual(
            multiplier_for(_bet("rambolito", "322", 1), CONFIG), Decimal("150")
        )


class PrizeMultipliersTestCase(unittest.TestCase):
    def test_coerces_to_decimal(self):
        config = PrizeMultipliers(standard=450, rambolito_unique="75", rambolito_double=150.0)
        self.assertEqual(config.standard, Decimal("450"))
        self.assertIsInstance(config.rambolito_unique, Decimal)
        self.assertEqual(config.rambolito_double, Decimal("150.0"))

    def test_rejects_negative(self):
        with self.assertRaises(ValueError):
            PrizeMultipliers(standard=-1, rambolito_unique=75, rambolito_double=150)

    def test_is_frozen(self):
        with self.assertRaises(Exception):
            CONFIG.standard = Decimal("1")  # type: ignore[misc]


if __name__ == "__main__":
    unittest.main()
