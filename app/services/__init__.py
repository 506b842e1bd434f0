"""
app/services package marker.
"""

from app.services.financial_import_service import (
    FinancialImportService,
    decode_csv_bytes,
    get_financial_import_service,
)
from app.services.daily_import_service import (
    DailyImportService,
    get_daily_import_service,
)
from app.services.ledger_summary_service import (
    LedgerSummaryService,
    get_ledger_summary_service,
)

__all__ = [
    "DailyImportService",
    "FinancialImportService",
    "LedgerSummaryService",
    "decode_csv_bytes",
    "get_daily_import_service",
    "get_financial_import_service",
    "get_ledger_summary_service",
]
