"""
app/services/aggregation_service.py

Fan-in of parsed line records into day, channel and order buckets.

Bucket semantics
----------------
Every bucket is an accumulator: amounts are only ever added, order numbers
are collected in sets. The fold is associative and commutative per bucket,
so the final totals never depend on line order.

    DayBucket       keyed by date
    ChannelBucket   keyed by (date, channel); only channel-tagged records
    OrderBucket     keyed by (order_number, date); only records with an order

No rounding happens here. The reconciler rounds once before writing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from app.domain.financial_import import (
    ZERO,
    ChannelBucket,
    DayBucket,
    LineRecord,
    OrderBucket,
)


@dataclass
class AggregationResult:
    """
    Mutable fold state plus read helpers used by the report builder.
    """

    days: dict[date, DayBucket] = field(default_factory=dict)
    channels: dict[tuple[date, str], ChannelBucket] = field(default_factory=dict)
    orders: dict[tuple[str, date], OrderBucket] = field(default_factory=dict)
    records_folded: int = 0

    @property
    def channel_names(self) -> tuple[str, ...]:
        return tuple(sorted({channel for _, channel in self.channels}))

    @property
    def unique_orders(self) -> int:
        return len({order_number for order_number, _ in self.orders})

    @property
    def has_channel_data(self) -> bool:
        return bool(self.channels)


class Aggregator:
    """
    Folds LineRecords into buckets. Stateless; every call starts a new fold
    unless an existing result is passed in.
    """

    def aggregate(
        self,
        records: Iterable[LineRecord],
        *,
        result: AggregationResult | None = None,
    ) -> AggregationResult:
        state = result if result is not None else AggregationResult()
        for record in records:
            self.add(state, record)
        return state

    def add(self, state: AggregationResult, record: LineRecord) -> None:
        day = state.days.get(record.date)
        if day is None:
            day = DayBucket(date=record.date)
            state.days[record.date] = day
        day.revenue += record.revenue_amount
        day.costs += record.cost_amount
        day.discounts += record.discount
        day.cashback += record.cashback
        if record.order_number:
            day.order_numbers.add(record.order_number)
        if record.channel:
            day.channels_seen.add(record.channel)

        if record.channel:
            channel_key = (record.date, record.channel)
            channel = state.channels.get(channel_key)
            if channel is None:
                channel = ChannelBucket(date=record.date, channel=record.channel)
                state.channels[channel_key] = channel
            channel.revenue += record.revenue_amount
            channel.costs += record.cost_amount
            if record.order_number:
                channel.order_numbers.add(record.order_number)

        if record.order_number:
            order_key = (record.order_number, record.date)
            order = state.orders.get(order_key)
            if order is None:
                order = OrderBucket(order_number=record.order_number, date=record.date)
                state.orders[order_key] = order
            # Lowest name wins so a split order resolves the same in any line order.
            if record.channel and (order.channel is None or record.channel < order.channel):
                order.channel = record.channel
            order.revenue += record.revenue_amount
            order.costs += record.cost_amount
            order.discounts += record.discount
            order.cashback += record.cashback
            order.line_count += 1
            order.item_count += record.quantity if record.quantity is not None else ZERO

        state.records_folded += 1
