"""
app/schemas package marker.
"""

from app.schemas.financial_import import (
    ChannelStatisticsResponse,
    CsvTextImportRequest,
    DailyImportConfigRequest,
    DailyImportConfigResponse,
    DailyImportRunResponse,
    ImportReportResponse,
    ImportStatsResponse,
    LedgerEntryResponse,
    LedgerSummaryResponse,
    PeriodStatisticsResponse,
)
from app.schemas.health import HealthResponse

__all__ = [
    "ChannelStatisticsResponse",
    "CsvTextImportRequest",
    "DailyImportConfigRequest",
    "DailyImportConfigResponse",
    "DailyImportRunResponse",
    "HealthResponse",
    "ImportReportResponse",
    "ImportStatsResponse",
    "LedgerEntryResponse",
    "LedgerSummaryResponse",
    "PeriodStatisticsResponse",
]
