from __future__ import annotations

import unittest
from datetime import date, timedelta
from decimal import Decimal

from app.domain.financial_import import LedgerEntry
from app.errors import NoLedgerDataError
from app.repositories.memory import InMemoryLedgerStore
from app.services.ledger_summary_service import LedgerSummaryService, week_start

TODAY = date(2024, 3, 1)


def _entry(day: date, revenue: str, costs: str, pct: str) -> LedgerEntry:
    revenue_value = Decimal(revenue)
    costs_value = Decimal(costs)
    return LedgerEntry(
        date=day,
        revenue=revenue_value,
        costs=costs_value,
        margin=revenue_value - costs_value,
        margin_percentage=Decimal(pct),
    )


class TestWeekStart(unittest.TestCase):
    def test_weeks_start_on_sunday(self) -> None:
        self.assertEqual(week_start(date(2024, 1, 17)), date(2024, 1, 14))
        self.assertEqual(week_start(date(2024, 1, 14)), date(2024, 1, 14))
        self.assertEqual(week_start(date(2024, 1, 20)), date(2024, 1, 14))


class TestLedgerSummaryService(unittest.TestCase):
    def setUp(self) -> None:
        self.service = LedgerSummaryService(today=lambda: TODAY)

    def test_weekly_summaries_newest_first_with_trend(self) -> None:
        entries = [
            _entry(date(2024, 1, 15), "100", "70", "30.0"),
            _entry(date(2024, 1, 16), "100", "80", "20.0"),
            _entry(date(2024, 1, 22), "100", "85", "15.0"),
            _entry(date(2024, 1, 29), "100", "90", "10.0"),
        ]

        summaries = self.service.weekly_summaries(entries)

        self.assertEqual(
            [summary.week for summary in summaries],
            [date(2024, 1, 28), date(2024, 1, 21), date(2024, 1, 14)],
        )
        self.assertEqual([summary.margin_trend for summary in summaries], ["down", "stable", "up"])
        self.assertEqual(summaries[2].total_revenue, Decimal("200"))
        self.assertEqual(summaries[2].average_margin, Decimal("25.0"))

    def test_weekly_summaries_respect_limit(self) -> None:
        entries = [_entry(date(2024, 1, 1) + timedelta(weeks=index), "10", "5", "50.0") for index in range(6)]

        self.assertEqual(len(self.service.weekly_summaries(entries)), 4)
        self.assertEqual(len(self.service.weekly_summaries(entries, limit=2)), 2)

    def test_snapshot_compares_latest_two_days(self) -> None:
        snapshot = self.service.current_snapshot(
            [
                _entry(date(2024, 1, 15), "100", "70", "30.0"),
                _entry(date(2024, 1, 16), "100", "80", "20.0"),
            ]
        )

        assert snapshot is not None
        self.assertEqual(snapshot.date, date(2024, 1, 16))
        self.assertEqual(snapshot.trend, "down")
        self.assertIsNone(self.service.current_snapshot([]))

    def test_period_statistics_best_and_worst(self) -> None:
        ledger = InMemoryLedgerStore(
            [
                _entry(date(2024, 2, 27), "100", "60", "40.0"),
                _entry(date(2024, 2, 28), "100", "90", "10.0"),
                _entry(date(2024, 2, 29), "100", "60", "40.0"),
            ]
        )

        statistics = self.service.period_statistics(ledger, "weekly")

        self.assertEqual(statistics.entry_count, 3)
        self.assertEqual(statistics.totals.revenue, Decimal("300"))
        self.assertEqual(statistics.totals.margin, Decimal("90"))
        self.assertEqual(statistics.average_margin, Decimal("30.0"))
        self.assertEqual(statistics.best_day.date, date(2024, 2, 29))
        self.assertEqual(statistics.worst_day.date, date(2024, 2, 28))

    def test_period_windows(self) -> None:
        ledger = InMemoryLedgerStore(
            [_entry(TODAY - timedelta(days=offset), "10", "5", "50.0") for offset in range(0, 100, 5)]
        )

        self.assertEqual(len(self.service.period_entries(ledger, "daily")), 7)
        self.assertEqual(len(self.service.period_entries(ledger, "weekly")), 7)
        self.assertEqual(len(self.service.period_entries(ledger, "monthly")), 19)

    def test_empty_period_raises(self) -> None:
        with self.assertRaises(NoLedgerDataError):
            self.service.period_statistics(InMemoryLedgerStore(), "daily")

    def test_unknown_period_raises(self) -> None:
        with self.assertRaises(ValueError):
            self.service.period_entries(InMemoryLedgerStore(), "yearly")

    def test_summary_document(self) -> None:
        ledger = InMemoryLedgerStore([_entry(date(2024, 2, 28), "150", "80", "46.7")])

        summary = self.service.summary(ledger)

        self.assertEqual(summary["entry_count"], 1)
        self.assertEqual(summary["totals"]["margin"], 70.0)
        self.assertEqual(summary["snapshot"]["trend"], "stable")
        self.assertEqual(summary["weekly_summaries"][0]["week"], "2024-02-25")


if __name__ == "__main__":
    unittest.main()
