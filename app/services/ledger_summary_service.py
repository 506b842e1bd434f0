"""
app/services/ledger_summary_service.py

Read-side summaries over persisted ledger entries.

Periods
-------
    daily     the 7 most recent entries
    weekly    entries dated within the last 30 days
    monthly   entries dated within the last 90 days

Weeks start on Sunday. A week's trend is ``up`` when its average margin
percentage is above 20, ``down`` below 15, otherwise ``stable``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from functools import lru_cache
from typing import Any, Callable, Sequence

from app.domain.financial_import import ZERO, LedgerEntry
from app.errors import NoLedgerDataError
from app.repositories.base import LedgerStore

PERIODS: tuple[str, ...] = ("daily", "weekly", "monthly")
DAILY_ENTRY_LIMIT = 7
PERIOD_LOOKBACK_DAYS: dict[str, int] = {"weekly": 30, "monthly": 90}

TREND_UP_THRESHOLD = Decimal("20")
TREND_DOWN_THRESHOLD = Decimal("15")

_TENTH = Decimal("0.1")


def _average(values: Sequence[Decimal]) -> Decimal:
    if not values:
        return Decimal("0.0")
    return (sum(values, ZERO) / len(values)).quantize(_TENTH, rounding=ROUND_HALF_UP)


def week_start(day: date) -> date:
    """
    Sunday on or before ``day``.
    """

    return day - timedelta(days=(day.weekday() + 1) % 7)


@dataclass(frozen=True)
class LedgerTotals:
    revenue: Decimal = ZERO
    costs: Decimal = ZERO
    margin: Decimal = ZERO
    discounts: Decimal = ZERO
    cashback: Decimal = ZERO

    def to_dict(self) -> dict[str, float]:
        return {
            "revenue": float(self.revenue),
            "costs": float(self.costs),
            "margin": float(self.margin),
            "discounts": float(self.discounts),
            "cashback": float(self.cashback),
        }


@dataclass(frozen=True)
class WeeklySummary:
    week: date
    total_revenue: Decimal
    total_costs: Decimal
    average_margin: Decimal
    margin_trend: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "week": self.week.isoformat(),
            "total_revenue": float(self.total_revenue),
            "total_costs": float(self.total_costs),
            "average_margin": float(self.average_margin),
            "margin_trend": self.margin_trend,
        }


@dataclass(frozen=True)
class PeriodStatistics:
    period: str
    entry_count: int
    totals: LedgerTotals
    average_margin: Decimal
    best_day: LedgerEntry
    worst_day: LedgerEntry
    entries: tuple[LedgerEntry, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "period": self.period,
            "entry_count": self.entry_count,
            "totals": self.totals.to_dict(),
            "average_margin": float(self.average_margin),
            "best_day": self.best_day.to_dict(),
            "worst_day": self.worst_day.to_dict(),
            "entries": [entry.to_dict() for entry in self.entries],
        }


@dataclass(frozen=True)
class LedgerSnapshot:
    date: date
    revenue: Decimal
    margin_percentage: Decimal
    trend: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "revenue": float(self.revenue),
            "margin_percentage": float(self.margin_percentage),
            "trend": self.trend,
        }


class LedgerSummaryService:
    """
    Pure summaries over entries plus the store queries that feed them.
    """

    def __init__(self, *, today: Callable[[], date] | None = None) -> None:
        self._today = today or date.today

    @staticmethod
    def totals(entries: Sequence[LedgerEntry]) -> LedgerTotals:
        return LedgerTotals(
            revenue=sum((entry.revenue for entry in entries), ZERO),
            costs=sum((entry.costs for entry in entries), ZERO),
            margin=sum((entry.margin for entry in entries), ZERO),
            discounts=sum((entry.discounts for entry in entries), ZERO),
            cashback=sum((entry.cashback for entry in entries), ZERO),
        )

    @staticmethod
    def weekly_summaries(entries: Sequence[LedgerEntry], *, limit: int = 4) -> list[WeeklySummary]:
        """
        Group entries by Sunday-start week, most recent week first.
        """

        weeks: dict[date, list[LedgerEntry]] = {}
        for entry in entries:
            weeks.setdefault(week_start(entry.date), []).append(entry)

        summaries: list[WeeklySummary] = []
        for week in sorted(weeks, reverse=True)[: max(0, limit)]:
            items = weeks[week]
            average_margin = _average([item.margin_percentage for item in items])
            if average_margin > TREND_UP_THRESHOLD:
                trend = "up"
            elif average_margin < TREND_DOWN_THRESHOLD:
                trend = "down"
            else:
                trend = "stable"
            summaries.append(
                WeeklySummary(
                    week=week,
                    total_revenue=sum((item.revenue for item in items), ZERO),
                    total_costs=sum((item.costs for item in items), ZERO),
                    average_margin=average_margin,
                    margin_trend=trend,
                )
            )
        return summaries

    @staticmethod
    def current_snapshot(entries: Sequence[LedgerEntry]) -> LedgerSnapshot | None:
        """
        Latest day compared with the day before it by margin percentage.
        """

        if not entries:
            return None
        ordered = sorted(entries, key=lambda entry: entry.date, reverse=True)
        latest = ordered[0]
        trend = "stable"
        if len(ordered) > 1:
            previous = ordered[1]
            if latest.margin_percentage > previous.margin_percentage:
                trend = "up"
            elif latest.margin_percentage < previous.margin_percentage:
                trend = "down"
        return LedgerSnapshot(
            date=latest.date,
            revenue=latest.revenue,
            margin_percentage=latest.margin_percentage,
            trend=trend,
        )

    def period_entries(self, ledger: LedgerStore, period: str) -> list[LedgerEntry]:
        if period not in PERIODS:
            raise ValueError(f"Unknown period {period!r}; expected one of {', '.join(PERIODS)}.")
        if period == "daily":
            return ledger.query(descending=True, limit=DAILY_ENTRY_LIMIT)
        since = self._today() - timedelta(days=PERIOD_LOOKBACK_DAYS[period])
        return ledger.query(since=since, descending=True)

    def period_statistics(self, ledger: LedgerStore, period: str) -> PeriodStatistics:
        """
        Totals, average margin and best/worst day for one period.

        Raises:
            ValueError: unknown period name.
            NoLedgerDataError: the period holds no entry.
        """

        entries = self.period_entries(ledger, period)
        if not entries:
            raise NoLedgerDataError(f"No financial data found for period {period!r}.")

        # Ties keep the most recent day.
        best_day = entries[0]
        worst_day = entries[0]
        for entry in entries[1:]:
            if entry.margin_percentage > best_day.margin_percentage:
                best_day = entry
            if entry.margin_percentage < worst_day.margin_percentage:
                worst_day = entry

        return PeriodStatistics(
            period=period,
            entry_count=len(entries),
            totals=self.totals(entries),
            average_margin=_average([entry.margin_percentage for entry in entries]),
            best_day=best_day,
            worst_day=worst_day,
            entries=tuple(entries),
        )

    def summary(self, ledger: LedgerStore, *, limit: int = 30) -> dict[str, Any]:
        entries = ledger.query(descending=True, limit=limit)
        snapshot = self.current_snapshot(entries)
        return {
            "entry_count": len(entries),
            "totals": self.totals(entries).to_dict(),
            "weekly_summaries": [week.to_dict() for week in self.weekly_summaries(entries)],
            "snapshot": snapshot.to_dict() if snapshot is not None else None,
        }


@lru_cache(maxsize=1)
def get_ledger_summary_service() -> LedgerSummaryService:
    return LedgerSummaryService()
