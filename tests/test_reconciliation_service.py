from __future__ import annotations

import unittest
from datetime import date, datetime, timezone
from decimal import Decimal

from app.domain.financial_import import DayBucket, LineRecord
from app.services.aggregation_service import Aggregator
from app.services.reconciliation_service import (
    Reconciler,
    margin_percentage,
    margin_rate,
    round_money,
)
from db.models.financial_data import FinancialData

FIXED_NOW = datetime(2024, 1, 20, 6, 0, tzinfo=timezone.utc)


def _order_line(day: date, channel: str, order: str, revenue: str, cost: str) -> LineRecord:
    return LineRecord(
        date=day,
        channel=channel,
        order_number=order,
        revenue_amount=Decimal(revenue),
        cost_amount=Decimal(cost),
    )


class TestRounding(unittest.TestCase):
    def test_round_money_is_half_up(self) -> None:
        self.assertEqual(round_money(Decimal("10.005")), Decimal("10.01"))
        self.assertEqual(round_money(Decimal("2.004")), Decimal("2.00"))
        self.assertEqual(round_money(Decimal("2.675")), Decimal("2.68"))

    def test_margin_percentage(self) -> None:
        self.assertEqual(margin_percentage(Decimal("8.01"), Decimal("10.01")), Decimal("80.0"))
        self.assertEqual(margin_percentage(Decimal("70"), Decimal("150")), Decimal("46.7"))
        self.assertEqual(margin_percentage(Decimal("-5"), Decimal("0")), Decimal("0"))

    def test_margin_rate(self) -> None:
        self.assertEqual(margin_rate(Decimal("9"), Decimal("45")), Decimal("0.2000"))
        self.assertEqual(margin_rate(Decimal("1"), Decimal("3")), Decimal("0.3333"))
        self.assertEqual(margin_rate(Decimal("1"), Decimal("0")), Decimal("0"))


class TestReconciler(unittest.TestCase):
    def setUp(self) -> None:
        self.reconciler = Reconciler(now=lambda: FIXED_NOW)

    def test_ledger_entry_rounds_before_margin(self) -> None:
        entry = Reconciler.ledger_entry(
            DayBucket(date=date(2024, 1, 15), revenue=Decimal("10.005"), costs=Decimal("2.004"))
        )

        self.assertEqual(entry.revenue, Decimal("10.01"))
        self.assertEqual(entry.costs, Decimal("2.00"))
        self.assertEqual(entry.margin, Decimal("8.01"))
        self.assertEqual(entry.margin_percentage, Decimal("80.0"))

    def test_zero_revenue_has_zero_percentage(self) -> None:
        entry = Reconciler.ledger_entry(
            DayBucket(date=date(2024, 1, 15), revenue=Decimal("0"), costs=Decimal("12"))
        )

        self.assertEqual(entry.margin, Decimal("-12.00"))
        self.assertEqual(entry.margin_percentage, Decimal("0"))

    def test_large_negative_percentage_fits_ledger_column(self) -> None:
        entry = Reconciler.ledger_entry(
            DayBucket(date=date(2024, 1, 15), revenue=Decimal("0.50"), costs=Decimal("10000.00"))
        )
        self.assertEqual(entry.margin_percentage, Decimal("-1999900.0"))

        extreme = Reconciler.ledger_entry(
            DayBucket(
                date=date(2024, 1, 15),
                revenue=Decimal("0.01"),
                costs=Decimal("999999999999.99"),
            )
        )
        column = FinancialData.__table__.c.margin_percentage.type
        integer_digits = extreme.margin_percentage.adjusted() + 1

        self.assertEqual(extreme.margin_percentage, Decimal("-9999999999999800.0"))
        self.assertLessEqual(integer_digits, column.precision - column.scale)

    def test_plan_sorts_entries_and_skips_statistics_without_channels(self) -> None:
        result = Aggregator().aggregate(
            [
                LineRecord(date(2024, 1, 16), None, None, Decimal("50"), Decimal("20")),
                LineRecord(date(2024, 1, 15), None, None, Decimal("100"), Decimal("60")),
                LineRecord(date(2024, 1, 15), None, None, Decimal("50"), Decimal("20")),
            ]
        )

        plan = self.reconciler.plan(result)

        self.assertEqual([entry.date for entry in plan.entries], [date(2024, 1, 15), date(2024, 1, 16)])
        self.assertEqual(plan.entries[0].revenue, Decimal("150.00"))
        self.assertEqual(plan.entries[0].margin, Decimal("70.00"))
        self.assertEqual(plan.entries[0].margin_percentage, Decimal("46.7"))
        self.assertEqual(plan.dates_written, 2)
        self.assertIsNone(plan.channel_statistics)

    def test_channel_statistics_union_orders_across_days(self) -> None:
        result = Aggregator().aggregate(
            [
                _order_line(date(2024, 1, 15), "Website", "A1", "45", "36"),
                _order_line(date(2024, 1, 15), "Website", "A2", "15", "6"),
                _order_line(date(2024, 1, 16), "Website", "A1", "30", "18"),
                _order_line(date(2024, 1, 16), "Shop", "B1", "20", "10"),
            ]
        )

        statistics = self.reconciler.channel_statistics(result)

        self.assertEqual(list(statistics.channels), ["Shop", "Website"])
        self.assertEqual(statistics.total_channels, 2)
        self.assertEqual(statistics.last_update, FIXED_NOW)
        website = statistics.channels["Website"]
        self.assertEqual(website.revenue, Decimal("90.00"))
        self.assertEqual(website.costs, Decimal("60.00"))
        self.assertEqual(website.margin, Decimal("30.00"))
        self.assertEqual(website.margin_rate, Decimal("0.3333"))
        self.assertEqual(website.order_count, 2)
        self.assertEqual(website.average_order_value, Decimal("45.00"))

    def test_channel_without_orders_has_zero_average(self) -> None:
        result = Aggregator().aggregate(
            [LineRecord(date(2024, 1, 15), "Website", None, Decimal("10"), Decimal("5"))]
        )

        statistics = self.reconciler.channel_statistics(result)

        self.assertEqual(statistics.channels["Website"].order_count, 0)
        self.assertEqual(statistics.channels["Website"].average_order_value, Decimal("0.00"))
        payload = statistics.to_dict()
        self.assertEqual(payload["total_channels"], 1)
        self.assertEqual(payload["last_update"], FIXED_NOW.isoformat())


if __name__ == "__main__":
    unittest.main()
