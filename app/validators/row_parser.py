"""
app/validators/row_parser.py

Row-level parsing for financial CSV imports.

One data line becomes exactly one outcome:

    ParsedRow    a LineRecord ready for aggregation
    SkippedRow   the line carries no money (benign, not an error)
    RowError     column count mismatch, invalid amount or invalid date

Checks run in a fixed order (column count, amounts, date, zero money) and
nothing in here raises for bad input; the caller counts and moves on.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Callable

from app import failure_codes
from app.domain.financial_import import (
    ZERO,
    ColumnMap,
    CsvFormat,
    LineRecord,
    ParsedRow,
    RowError,
    RowOutcome,
    SkippedRow,
)
from app.mappers.column_mapper import split_csv_line

DAY_FIRST_FORMATS: tuple[str, ...] = (
    "%d/%m/%Y",
    "%d/%m/%Y %H:%M",
    "%d/%m/%Y %H:%M:%S",
    "%d-%m-%Y",
    "%d.%m.%Y",
    "%Y/%m/%d",
)

_NON_NUMERIC = re.compile(r"[^\d.\-]")

UNIT_GATING_FIELDS: tuple[str, ...] = ("quantity", "unit_selling_price", "unit_purchase_price")


def parse_amount(raw: str | None, *, decimal_comma: bool = False) -> Decimal | None:
    """
    Tolerant numeric parse: keep digits, '.' and '-' only.

    Returns None for blank or unparsable input (the NaN case).
    """

    if raw is None:
        return None
    value = raw.strip()
    if not value:
        return None
    if decimal_comma and "," in value:
        if "." not in value:
            if value.count(",") == 1:
                value = value.replace(",", ".")
        elif value.rfind(",") > value.rfind("."):
            # 1.234,56: dots group thousands, the last comma is the decimal point.
            value = value.replace(".", "").replace(",", ".")
    cleaned = _NON_NUMERIC.sub("", value)
    if not cleaned:
        return None
    try:
        parsed = Decimal(cleaned)
    except InvalidOperation:
        return None
    if not parsed.is_finite():
        return None
    return parsed


def parse_date(raw: str | None) -> date | None:
    """
    Parse ISO (YYYY-MM-DD, optional time part) or day-first (DD/MM/YYYY) dates.
    """

    if raw is None:
        return None
    value = raw.strip()
    if not value:
        return None

    normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        return datetime.fromisoformat(normalized).date()
    except ValueError:
        pass

    for fmt in DAY_FIRST_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


class RowParser:
    """
    Converts data lines into row outcomes for one resolved ColumnMap.
    """

    def __init__(
        self,
        *,
        column_map: ColumnMap,
        today: Callable[[], date] | None = None,
        default_channel: str = "Unspecified",
    ) -> None:
        self._column_map = column_map
        self._today = today or date.today
        self._default_channel = default_channel
        self._decimal_comma = column_map.delimiter == ";"

    @property
    def column_map(self) -> ColumnMap:
        return self._column_map

    def parse(self, line_number: int, line: str) -> RowOutcome:
        """
        Parse one non-header, non-blank line.
        """

        fields = split_csv_line(line, self._column_map.delimiter)
        expected = self._column_map.column_count
        if len(fields) != expected:
            return RowError(
                line_number=line_number,
                reason=failure_codes.COLUMN_COUNT_MISMATCH,
                message=f"Expected {expected} columns, found {len(fields)}.",
                value=line.strip()[:200],
            )

        if self._column_map.csv_format is CsvFormat.ORDER_LINE:
            return self._parse_order_line(line_number, fields)
        return self._parse_aggregate(line_number, fields)

    # ------------------------------------------------------------------
    # Order-line rows
    # ------------------------------------------------------------------

    def _parse_order_line(self, line_number: int, fields: list[str]) -> RowOutcome:
        amounts: dict[str, Decimal | None] = {
            name: self._amount(fields, name)
            for name in (
                "quantity",
                "unit_selling_price",
                "unit_purchase_price",
                "discount",
                "reward_credit",
                "total_sales",
                "total_cost",
            )
        }

        for name in UNIT_GATING_FIELDS:
            if not self._column_map.has(name):
                continue
            value = amounts[name]
            if value is None or value <= 0:
                return self._invalid_amount(
                    line_number,
                    fields,
                    name,
                    f"{name} must be greater than zero.",
                )

        for name in ("total_sales", "total_cost"):
            value = amounts[name]
            if value is not None and value < 0:
                return self._invalid_amount(
                    line_number,
                    fields,
                    name,
                    f"{name} must not be negative.",
                )

        discount = abs(amounts["discount"] or ZERO)
        cashback = abs(amounts["reward_credit"] or ZERO)
        quantity = amounts["quantity"]
        has_unit_prices = all(self._column_map.has(name) for name in UNIT_GATING_FIELDS)

        total_sales = amounts["total_sales"]
        if total_sales:
            revenue = total_sales
        elif has_unit_prices:
            revenue = quantity * amounts["unit_selling_price"] - discount  # type: ignore[operator]
        else:
            revenue = ZERO

        total_cost = amounts["total_cost"]
        if total_cost:
            cost = total_cost
        elif has_unit_prices:
            cost = quantity * amounts["unit_purchase_price"] + cashback  # type: ignore[operator]
        else:
            cost = ZERO

        if revenue < 0:
            return self._invalid_amount(
                line_number,
                fields,
                "discount",
                "Discount exceeds the line's gross revenue.",
            )

        parsed_date = self._resolve_date(fields, required=False)
        if parsed_date is None:
            return self._invalid_date(line_number, fields)

        if revenue == 0 and cost == 0 and discount == 0 and cashback == 0:
            return SkippedRow(line_number=line_number, reason=failure_codes.NO_FINANCIAL_DATA)

        return ParsedRow(
            line_number=line_number,
            record=LineRecord(
                date=parsed_date,
                channel=self._text(fields, "channel") or self._default_channel,
                order_number=self._text(fields, "order_number"),
                revenue_amount=revenue,
                cost_amount=cost,
                discount=discount,
                cashback=cashback,
                quantity=quantity,
            ),
        )

    # ------------------------------------------------------------------
    # Aggregate rows
    # ------------------------------------------------------------------

    def _parse_aggregate(self, line_number: int, fields: list[str]) -> RowOutcome:
        totals: dict[str, Decimal] = {}
        for name in ("revenue", "costs"):
            raw = self._raw(fields, name)
            value = self._amount(fields, name)
            if value is None and raw:
                return self._invalid_amount(
                    line_number,
                    fields,
                    name,
                    f"{name} is not a number.",
                )
            value = value or ZERO
            if value < 0:
                return self._invalid_amount(
                    line_number,
                    fields,
                    name,
                    f"{name} must not be negative.",
                )
            totals[name] = value

        discount = abs(self._amount(fields, "discount") or ZERO)
        cashback = abs(self._amount(fields, "reward_credit") or ZERO)

        parsed_date = self._resolve_date(fields, required=True)
        if parsed_date is None:
            return self._invalid_date(line_number, fields)

        if totals["revenue"] == 0 and totals["costs"] == 0 and discount == 0 and cashback == 0:
            return SkippedRow(line_number=line_number, reason=failure_codes.NO_FINANCIAL_DATA)

        return ParsedRow(
            line_number=line_number,
            record=LineRecord(
                date=parsed_date,
                channel=self._text(fields, "channel"),
                order_number=None,
                revenue_amount=totals["revenue"],
                cost_amount=totals["costs"],
                discount=discount,
                cashback=cashback,
            ),
        )

    # ------------------------------------------------------------------
    # Field access
    # ------------------------------------------------------------------

    def _raw(self, fields: list[str], name: str) -> str | None:
        index = self._column_map.index_of(name)
        if index is None:
            return None
        return fields[index].strip()

    def _text(self, fields: list[str], name: str) -> str | None:
        raw = self._raw(fields, name)
        return raw or None

    def _amount(self, fields: list[str], name: str) -> Decimal | None:
        return parse_amount(self._raw(fields, name), decimal_comma=self._decimal_comma)

    def _resolve_date(self, fields: list[str], *, required: bool) -> date | None:
        raw = self._raw(fields, "date")
        if not raw:
            # Optional dates are filled forward with the processing day.
            return None if required else self._today()
        return parse_date(raw)

    def _invalid_amount(
        self,
        line_number: int,
        fields: list[str],
        name: str,
        message: str,
    ) -> RowError:
        return RowError(
            line_number=line_number,
            reason=failure_codes.INVALID_AMOUNT,
            message=message,
            column=self._column_map.source_header(name) or name,
            value=self._raw(fields, name),
        )

    def _invalid_date(self, line_number: int, fields: list[str]) -> RowError:
        raw = self._raw(fields, "date")
        return RowError(
            line_number=line_number,
            reason=failure_codes.INVALID_DATE,
            message="Invalid date format; expected YYYY-MM-DD or DD/MM/YYYY."
            if raw
            else "Required date is missing.",
            column=self._column_map.source_header("date") or "date",
            value=raw,
        )
