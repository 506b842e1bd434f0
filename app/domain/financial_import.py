"""
app/domain/financial_import.py

Domain models used by the financial CSV import pipeline.

Monetary values are ``Decimal`` end to end; rounding happens once, in the
reconciler, right before entries are written.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Iterator, Mapping

ZERO = Decimal("0")


class CsvFormat(str, Enum):
    """
    The two CSV shapes the format detector recognizes.
    """

    AGGREGATE = "aggregate"
    ORDER_LINE = "order_line"


# ---------------------------------------------------------------------------
# Input document
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RawCsvDocument:
    """
    One CSV payload split into a header line and a lazy sequence of data lines.

    ``data_lines`` yields ``(line_number, text)`` pairs with 1-based line
    numbers as they appear in the source (the header is line 1). Blank lines
    are never yielded.
    """

    header_line: str
    delimiter: str
    _text: str = field(repr=False)
    _header_line_number: int = field(default=1, repr=False)

    @classmethod
    def from_text(cls, text: str) -> "RawCsvDocument | None":
        """
        Locate the header (first non-blank line) and sniff the delimiter.

        Returns None when the text holds no non-blank line at all.
        """

        cleaned = text.lstrip("\ufeff")
        for line_number, line in enumerate(_iter_lines(cleaned), start=1):
            if line.strip():
                delimiter = ";" if ";" in line else ","
                return cls(
                    header_line=line,
                    delimiter=delimiter,
                    _text=cleaned,
                    _header_line_number=line_number,
                )
        return None

    def data_lines(self) -> Iterator[tuple[int, str]]:
        start = self._header_line_number
        for line_number, line in enumerate(_iter_lines(self._text), start=1):
            if line_number <= start or not line.strip():
                continue
            yield line_number, line


_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def _iter_lines(text: str) -> Iterator[str]:
    """
    Lazily split text on \\n, \\r\\n or \\r without materializing a list.
    """

    start = 0
    for match in _LINE_BREAK.finditer(text):
        yield text[start:match.start()]
        start = match.end()
    if start < len(text):
        yield text[start:]


# ---------------------------------------------------------------------------
# Column mapping
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ColumnMap:
    """
    Logical field name -> column index for one document.

    Fields missing from ``indexes`` are absent from the document.
    """

    csv_format: CsvFormat
    indexes: Mapping[str, int]
    headers: tuple[str, ...]
    delimiter: str = ","

    @property
    def column_count(self) -> int:
        return len(self.headers)

    def index_of(self, field_name: str) -> int | None:
        return self.indexes.get(field_name)

    def has(self, field_name: str) -> bool:
        return field_name in self.indexes

    def source_header(self, field_name: str) -> str | None:
        index = self.indexes.get(field_name)
        return self.headers[index] if index is not None else None


# ---------------------------------------------------------------------------
# Row outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LineRecord:
    """
    One successfully parsed data row.
    """

    date: date
    channel: str | None
    order_number: str | None
    revenue_amount: Decimal
    cost_amount: Decimal
    discount: Decimal = ZERO
    cashback: Decimal = ZERO
    quantity: Decimal | None = None


@dataclass(frozen=True)
class ParsedRow:
    line_number: int
    record: LineRecord


@dataclass(frozen=True)
class SkippedRow:
    """
    A benign skip: the line carries no money. Never counted as an error.
    """

    line_number: int
    reason: str


@dataclass(frozen=True)
class RowError:
    """
    A recoverable per-row failure; the import continues with the next line.
    """

    line_number: int
    reason: str
    message: str
    column: str | None = None
    value: str | None = None


RowOutcome = ParsedRow | SkippedRow | RowError


# ---------------------------------------------------------------------------
# Accumulators
# ---------------------------------------------------------------------------


@dataclass
class DayBucket:
    date: date
    revenue: Decimal = ZERO
    costs: Decimal = ZERO
    discounts: Decimal = ZERO
    cashback: Decimal = ZERO
    order_numbers: set[str] = field(default_factory=set)
    channels_seen: set[str] = field(default_factory=set)


@dataclass
class ChannelBucket:
    date: date
    channel: str
    revenue: Decimal = ZERO
    costs: Decimal = ZERO
    order_numbers: set[str] = field(default_factory=set)


@dataclass
class OrderBucket:
    order_number: str
    date: date
    channel: str | None = None
    revenue: Decimal = ZERO
    costs: Decimal = ZERO
    discounts: Decimal = ZERO
    cashback: Decimal = ZERO
    line_count: int = 0
    item_count: Decimal = ZERO

    @property
    def margin(self) -> Decimal:
        return self.revenue - self.costs


# ---------------------------------------------------------------------------
# Persisted shapes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LedgerEntry:
    """
    One persisted ledger row. ``date`` is the unique key.
    """

    date: date
    revenue: Decimal
    costs: Decimal
    margin: Decimal
    margin_percentage: Decimal
    discounts: Decimal = ZERO
    cashback: Decimal = ZERO

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "revenue": float(self.revenue),
            "costs": float(self.costs),
            "margin": float(self.margin),
            "margin_percentage": float(self.margin_percentage),
            "discounts": float(self.discounts),
            "cashback": float(self.cashback),
        }


@dataclass(frozen=True)
class ChannelStatisticsEntry:
    revenue: Decimal
    costs: Decimal
    margin: Decimal
    margin_rate: Decimal
    order_count: int
    average_order_value: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "revenue": float(self.revenue),
            "costs": float(self.costs),
            "margin": float(self.margin),
            "margin_rate": float(self.margin_rate),
            "order_count": self.order_count,
            "average_order_value": float(self.average_order_value),
        }


@dataclass(frozen=True)
class ChannelStatistics:
    """
    Whole-document channel snapshot. Always replaced, never merged.
    """

    channels: Mapping[str, ChannelStatisticsEntry]
    last_update: datetime

    @property
    def total_channels(self) -> int:
        return len(self.channels)

    def to_dict(self) -> dict[str, Any]:
        return {
            "channels": {name: entry.to_dict() for name, entry in self.channels.items()},
            "last_update": self.last_update.isoformat(),
            "total_channels": self.total_channels,
        }


@dataclass(frozen=True)
class ImportConfig:
    """
    Persisted configuration of the scheduled URL import.
    """

    enabled: bool = False
    source_url: str = ""
    last_import: datetime | None = None
    import_count: int = 0

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any] | None) -> "ImportConfig":
        if not raw:
            return cls()
        source_url = raw.get("source_url")
        if source_url is None:
            source_url = raw.get("csv_url")
        last_import_raw = raw.get("last_import")
        last_import: datetime | None = None
        if isinstance(last_import_raw, str) and last_import_raw.strip():
            normalized = last_import_raw.strip()
            if normalized.endswith("Z"):
                normalized = normalized[:-1] + "+00:00"
            try:
                last_import = datetime.fromisoformat(normalized)
            except ValueError:
                last_import = None
        try:
            import_count = int(raw.get("import_count") or 0)
        except (TypeError, ValueError):
            import_count = 0
        return cls(
            enabled=bool(raw.get("enabled", False)),
            source_url=str(source_url or "").strip(),
            last_import=last_import,
            import_count=max(0, import_count),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "source_url": self.source_url,
            "last_import": self.last_import.isoformat() if self.last_import else None,
            "import_count": self.import_count,
        }


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RowIssue:
    """
    One captured row-level error sample surfaced in the report.
    """

    line_number: int
    code: str
    message: str
    value: str | None = None


@dataclass(frozen=True)
class ImportStats:
    total_lines: int
    processed: int
    errors: int
    skipped: int
    dates_written: int
    channels: tuple[str, ...]
    error_breakdown: Mapping[str, int] = field(default_factory=dict)
    skip_breakdown: Mapping[str, int] = field(default_factory=dict)
    unique_orders: int = 0
    csv_format: CsvFormat | None = None
    revenue: Decimal = ZERO
    costs: Decimal = ZERO
    discounts: Decimal = ZERO
    cashback: Decimal = ZERO
    error_samples: tuple[RowIssue, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_lines": self.total_lines,
            "processed": self.processed,
            "errors": self.errors,
            "skipped": self.skipped,
            "dates_written": self.dates_written,
            "channels": list(self.channels),
            "error_breakdown": dict(self.error_breakdown),
            "skip_breakdown": dict(self.skip_breakdown),
            "unique_orders": self.unique_orders,
            "format": self.csv_format.value if self.csv_format else None,
            "revenue": float(self.revenue),
            "costs": float(self.costs),
            "discounts": float(self.discounts),
            "cashback": float(self.cashback),
            "error_samples": [
                {
                    "line_number": issue.line_number,
                    "code": issue.code,
                    "message": issue.message,
                    "value": issue.value,
                }
                for issue in self.error_samples
            ],
        }


@dataclass(frozen=True)
class ImportReport:
    """
    End-of-run result handed back to the caller.

    ``stats`` is present on success and whenever rows were examined before
    the failure (e.g. no valid data), so a format mismatch can be diagnosed
    from the report alone.
    """

    success: bool
    stats: ImportStats | None = None
    error: str | None = None
    error_code: str | None = None
    status_code: int = 200
    details: Mapping[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": self.success}
        if self.error is not None:
            payload["error"] = self.error
            payload["error_code"] = self.error_code
        if self.details:
            payload["details"] = dict(self.details)
        if self.stats is not None:
            payload["stats"] = self.stats.to_dict()
        return payload
