"""
app/schemas/financial_import.py

Request and response schemas for the import, ledger and daily import endpoints.
"""

from __future__ import annotations

import datetime as dt
from typing import Any

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------


class CsvTextImportRequest(BaseModel):
    """
    Raw CSV text posted as JSON instead of a multipart upload.
    """

    csv_content: str


class ImportErrorSampleResponse(BaseModel):
    line_number: int = Field(..., ge=1)
    code: str
    message: str
    value: str | None = None


class ImportStatsResponse(BaseModel):
    """
    Row counters and totals of one import run.
    """

    total_lines: int = Field(..., ge=0)
    processed: int = Field(..., ge=0)
    errors: int = Field(..., ge=0)
    skipped: int = Field(..., ge=0)
    dates_written: int = Field(..., ge=0)
    channels: list[str] = Field(default_factory=list)
    error_breakdown: dict[str, int] = Field(default_factory=dict)
    skip_breakdown: dict[str, int] = Field(default_factory=dict)
    unique_orders: int = Field(default=0, ge=0)
    format: str | None = None
    revenue: float = 0.0
    costs: float = 0.0
    discounts: float = 0.0
    cashback: float = 0.0
    error_samples: list[ImportErrorSampleResponse] = Field(default_factory=list)


class ImportReportResponse(BaseModel):
    """
    API response model for one import; ``stats`` is present whenever rows were examined.
    """

    success: bool
    error: str | None = None
    error_code: str | None = None
    details: dict[str, Any] | None = None
    stats: ImportStatsResponse | None = None


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------


class LedgerEntryResponse(BaseModel):
    date: dt.date
    revenue: float
    costs: float
    margin: float
    margin_percentage: float
    discounts: float = 0.0
    cashback: float = 0.0


class LedgerTotalsResponse(BaseModel):
    revenue: float
    costs: float
    margin: float
    discounts: float
    cashback: float


class WeeklySummaryResponse(BaseModel):
    week: dt.date
    total_revenue: float
    total_costs: float
    average_margin: float
    margin_trend: str


class LedgerSnapshotResponse(BaseModel):
    date: dt.date
    revenue: float
    margin_percentage: float
    trend: str


class LedgerSummaryResponse(BaseModel):
    entry_count: int = Field(..., ge=0)
    totals: LedgerTotalsResponse
    weekly_summaries: list[WeeklySummaryResponse] = Field(default_factory=list)
    snapshot: LedgerSnapshotResponse | None = None


class PeriodStatisticsResponse(BaseModel):
    period: str
    entry_count: int = Field(..., ge=1)
    totals: LedgerTotalsResponse
    average_margin: float
    best_day: LedgerEntryResponse
    worst_day: LedgerEntryResponse
    entries: list[LedgerEntryResponse] = Field(default_factory=list)


class ChannelStatisticsEntryResponse(BaseModel):
    revenue: float
    costs: float
    margin: float
    margin_rate: float
    order_count: int = Field(..., ge=0)
    average_order_value: float


class ChannelStatisticsResponse(BaseModel):
    channels: dict[str, ChannelStatisticsEntryResponse] = Field(default_factory=dict)
    last_update: dt.datetime | None = None
    total_channels: int = Field(default=0, ge=0)


# ---------------------------------------------------------------------------
# Daily import
# ---------------------------------------------------------------------------


class DailyImportConfigRequest(BaseModel):
    enabled: bool
    source_url: str = ""


class DailyImportConfigResponse(BaseModel):
    enabled: bool
    source_url: str
    last_import: dt.datetime | None = None
    import_count: int = Field(..., ge=0)


class DailyImportRunResponse(BaseModel):
    success: bool
    reason: str | None = None
    error: str | None = None
    error_code: str | None = None
    details: dict[str, Any] | None = None
    stats: ImportStatsResponse | None = None
    config: DailyImportConfigResponse
