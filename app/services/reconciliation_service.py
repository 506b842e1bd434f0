"""
app/services/reconciliation_service.py

Turns aggregation buckets into the ledger write-set.

Rounding rules
--------------
    money               2 dp, ROUND_HALF_UP (revenue, costs, discounts, cashback)
    margin              rounded revenue - rounded costs
    margin_percentage   margin / revenue * 100, 1 dp; 0 when revenue is 0
    margin_rate         margin / revenue, 4 dp; 0 when revenue is 0

Every ledger entry is a full replacement for its date. Channel statistics
are a whole-document replacement built from this import alone.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable

from app.domain.financial_import import (
    ZERO,
    ChannelStatistics,
    ChannelStatisticsEntry,
    DayBucket,
    LedgerEntry,
)
from app.services.aggregation_service import AggregationResult

CENT = Decimal("0.01")
TENTH = Decimal("0.1")
RATE_STEP = Decimal("0.0001")
HUNDRED = Decimal("100")


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def margin_percentage(margin: Decimal, revenue: Decimal) -> Decimal:
    """
    Margin as a percentage of revenue, 0 when revenue is 0.
    """

    if revenue == 0:
        return Decimal("0.0")
    return (margin / revenue * HUNDRED).quantize(TENTH, rounding=ROUND_HALF_UP)


def margin_rate(margin: Decimal, revenue: Decimal) -> Decimal:
    if revenue == 0:
        return Decimal("0.0000")
    return (margin / revenue).quantize(RATE_STEP, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class WritePlan:
    """
    Everything one import writes: replace-by-date entries and, when the
    document carried channels, the replacement statistics blob.
    """

    entries: tuple[LedgerEntry, ...]
    channel_statistics: ChannelStatistics | None

    @property
    def dates_written(self) -> int:
        return len(self.entries)


class Reconciler:
    """
    Builds a WritePlan from an AggregationResult.
    """

    def __init__(self, *, now: Callable[[], datetime] | None = None) -> None:
        self._now = now or (lambda: datetime.now(tz=timezone.utc))

    def plan(self, result: AggregationResult) -> WritePlan:
        entries = tuple(
            self.ledger_entry(result.days[day]) for day in sorted(result.days)
        )
        statistics = self.channel_statistics(result) if result.has_channel_data else None
        return WritePlan(entries=entries, channel_statistics=statistics)

    @staticmethod
    def ledger_entry(bucket: DayBucket) -> LedgerEntry:
        revenue = round_money(bucket.revenue)
        costs = round_money(bucket.costs)
        margin = revenue - costs
        return LedgerEntry(
            date=bucket.date,
            revenue=revenue,
            costs=costs,
            margin=margin,
            margin_percentage=margin_percentage(margin, revenue),
            discounts=round_money(bucket.discounts),
            cashback=round_money(bucket.cashback),
        )

    def channel_statistics(self, result: AggregationResult) -> ChannelStatistics:
        revenue_by_channel: dict[str, Decimal] = {}
        costs_by_channel: dict[str, Decimal] = {}
        orders_by_channel: dict[str, set[str]] = {}

        for (_, channel), bucket in result.channels.items():
            revenue_by_channel[channel] = revenue_by_channel.get(channel, ZERO) + bucket.revenue
            costs_by_channel[channel] = costs_by_channel.get(channel, ZERO) + bucket.costs
            orders_by_channel.setdefault(channel, set()).update(bucket.order_numbers)

        channels: dict[str, ChannelStatisticsEntry] = {}
        for channel in sorted(revenue_by_channel):
            revenue = round_money(revenue_by_channel[channel])
            costs = round_money(costs_by_channel[channel])
            margin = revenue - costs
            order_count = len(orders_by_channel[channel])
            average = round_money(revenue / order_count) if order_count else round_money(ZERO)
            channels[channel] = ChannelStatisticsEntry(
                revenue=revenue,
                costs=costs,
                margin=margin,
                margin_rate=margin_rate(margin, revenue),
                order_count=order_count,
                average_order_value=average,
            )
        return ChannelStatistics(channels=channels, last_update=self._now())
