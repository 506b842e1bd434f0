from __future__ import annotations

import itertools
import unittest
from datetime import date
from decimal import Decimal

from app.domain.financial_import import LineRecord
from app.services.aggregation_service import Aggregator

DAY_ONE = date(2024, 1, 15)
DAY_TWO = date(2024, 1, 16)


def _line(
    day: date,
    revenue: str,
    cost: str,
    *,
    channel: str | None = None,
    order: str | None = None,
    discount: str = "0",
    quantity: str | None = None,
) -> LineRecord:
    return LineRecord(
        date=day,
        channel=channel,
        order_number=order,
        revenue_amount=Decimal(revenue),
        cost_amount=Decimal(cost),
        discount=Decimal(discount),
        quantity=Decimal(quantity) if quantity is not None else None,
    )


class TestAggregator(unittest.TestCase):
    def setUp(self) -> None:
        self.aggregator = Aggregator()

    def test_folds_same_date_rows(self) -> None:
        result = self.aggregator.aggregate(
            [
                _line(DAY_ONE, "100", "60"),
                _line(DAY_ONE, "50", "20"),
            ]
        )

        self.assertEqual(list(result.days), [DAY_ONE])
        self.assertEqual(result.days[DAY_ONE].revenue, Decimal("150"))
        self.assertEqual(result.days[DAY_ONE].costs, Decimal("80"))
        self.assertEqual(result.records_folded, 2)
        self.assertFalse(result.has_channel_data)
        self.assertEqual(result.unique_orders, 0)

    def test_order_lines_build_channel_and_order_buckets(self) -> None:
        result = self.aggregator.aggregate(
            [
                _line(DAY_ONE, "45", "36", channel="Website", order="A1", discount="5", quantity="2"),
                _line(DAY_ONE, "10", "4", channel="Website", order="A1", quantity="1"),
                _line(DAY_ONE, "30", "12", channel="Shop", order="B7", quantity="3"),
            ]
        )

        self.assertEqual(result.channel_names, ("Shop", "Website"))
        self.assertTrue(result.has_channel_data)
        self.assertEqual(result.unique_orders, 2)

        website = result.channels[(DAY_ONE, "Website")]
        self.assertEqual(website.revenue, Decimal("55"))
        self.assertEqual(website.order_numbers, {"A1"})

        order = result.orders[("A1", DAY_ONE)]
        self.assertEqual(order.line_count, 2)
        self.assertEqual(order.item_count, Decimal("3"))
        self.assertEqual(order.margin, Decimal("15"))
        self.assertEqual(order.discounts, Decimal("5"))
        self.assertEqual(result.days[DAY_ONE].order_numbers, {"A1", "B7"})

    def test_same_order_number_on_two_dates_is_two_orders(self) -> None:
        result = self.aggregator.aggregate(
            [
                _line(DAY_ONE, "10", "5", channel="Website", order="A1"),
                _line(DAY_TWO, "10", "5", channel="Website", order="A1"),
            ]
        )

        self.assertEqual(len(result.orders), 2)
        self.assertEqual(result.unique_orders, 1)

    def test_totals_do_not_depend_on_line_order(self) -> None:
        records = [
            _line(DAY_ONE, "45.10", "36.05", channel="Website", order="A1"),
            _line(DAY_ONE, "12.33", "4.44", channel="Shop", order="A1"),
            _line(DAY_TWO, "7.01", "3.99", channel="Website", order="C3"),
            _line(DAY_ONE, "0.01", "0.02", channel="Shop", order="B2"),
        ]
        baseline = self.aggregator.aggregate(records)

        for permutation in itertools.permutations(records):
            result = self.aggregator.aggregate(permutation)
            for day, bucket in baseline.days.items():
                self.assertEqual(result.days[day].revenue, bucket.revenue)
                self.assertEqual(result.days[day].costs, bucket.costs)
            for key, bucket in baseline.channels.items():
                self.assertEqual(result.channels[key].revenue, bucket.revenue)
                self.assertEqual(result.channels[key].order_numbers, bucket.order_numbers)
            self.assertEqual(result.orders[("A1", DAY_ONE)].channel, "Shop")

    def test_existing_result_keeps_folding(self) -> None:
        result = self.aggregator.aggregate([_line(DAY_ONE, "1", "1")])

        self.aggregator.aggregate([_line(DAY_ONE, "2", "0")], result=result)

        self.assertEqual(result.days[DAY_ONE].revenue, Decimal("3"))
        self.assertEqual(result.records_folded, 2)


if __name__ == "__main__":
    unittest.main()
