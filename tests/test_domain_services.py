"""Regras puras do domínio: arredondamento do repasse, calendário e transições."""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from django.test import SimpleTestCase

from convenio_core.core.application.services.revenue_split_service import round_money, split_value
from convenio_core.core.domain.entities.subscription_entity import SubscriptionEntity
from convenio_core.core.domain.services.clock import add_months, add_one_year


class SplitValueTests(SimpleTestCase):
    def test_half_cent_rounds_away_from_zero(self) -> None:
        payment, clinic = split_value(Decimal("0.05"), Decimal("50"), is_convenio=True)
        self.assertEqual(payment, Decimal("0.03"))
        self.assertEqual(clinic, Decimal("0.02"))

    def test_private_goes_fully_to_professional(self) -> None:
        self.assertEqual(
            split_value(Decimal("80.00"), Decimal("70"), is_convenio=False),
            (Decimal("80.00"), Decimal("0.00")),
        )

    def test_identity_per_consultation(self) -> None:
        for value in ("0.01", "33.33", "99.99", "123.45", "1000.00"):
            for pct in ("0", "33.33", "50", "70", "100"):
                payment, clinic = split_value(Decimal(value), Decimal(pct), is_convenio=True)
                self.assertEqual(payment + clinic, round_money(Decimal(value)), f"{value} @ {pct}%")


class CalendarTests(SimpleTestCase):
    def test_add_one_year(self) -> None:
        start = datetime(2025, 3, 10, 12, 30, tzinfo=timezone.utc)
        self.assertEqual(add_one_year(start), datetime(2026, 3, 10, 12, 30, tzinfo=timezone.utc))

    def test_leap_day_falls_back_to_feb_28(self) -> None:
        start = datetime(2024, 2, 29, tzinfo=timezone.utc)
        self.assertEqual(add_one_year(start), datetime(2025, 2, 28, tzinfo=timezone.utc))

    def test_add_months_clamps_day_and_crosses_year(self) -> None:
        start = datetime(2025, 1, 31, 9, tzinfo=timezone.utc)
        self.assertEqual(add_months(start, 1), datetime(2025, 2, 28, 9, tzinfo=timezone.utc))
        self.assertEqual(add_months(start, 13), datetime(2026, 2, 28, 9, tzinfo=timezone.utc))
        self.assertEqual(add_months(datetime(2024, 1, 31, tzinfo=timezone.utc), 1), datetime(2024, 2, 29, tzinfo=timezone.utc))
        self.assertEqual(add_months(datetime(2025, 11, 15, tzinfo=timezone.utc), 2), datetime(2026, 1, 15, tzinfo=timezone.utc))


class SubscriptionEntityTests(SimpleTestCase):
    def test_first_activation_only_once(self) -> None:
        sub = SubscriptionEntity(subject_id="u1")
        self.assertTrue(sub.activate(datetime(2026, 1, 1, tzinfo=timezone.utc)))
        sub.expire()
        self.assertFalse(sub.activate(datetime(2027, 1, 1, tzinfo=timezone.utc)))

    def test_pending_cannot_expire(self) -> None:
        with self.assertRaises(ValueError):
            SubscriptionEntity(subject_id="u1").expire()
