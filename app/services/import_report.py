"""
app/services/import_report.py

Collects per-row diagnostics while a document is parsed and turns them,
together with the final aggregation and write plan, into ImportStats.
"""

from __future__ import annotations

import logging
from collections import Counter

from app.domain.financial_import import (
    ZERO,
    CsvFormat,
    ImportReport,
    ImportStats,
    ParsedRow,
    RowError,
    RowIssue,
    RowOutcome,
    SkippedRow,
)
from app.errors import FinancialImportError
from app.services.aggregation_service import AggregationResult
from app.services.reconciliation_service import WritePlan

logger = logging.getLogger(__name__)


class ImportReportBuilder:
    """
    Side channel of counters for one import run.
    """

    def __init__(self, *, max_error_samples: int = 50, log_row_errors: bool = True) -> None:
        self._max_error_samples = max(0, max_error_samples)
        self._log_row_errors = log_row_errors
        self.total_lines = 0
        self.processed = 0
        self.skipped = 0
        self.errors = 0
        self.error_breakdown: Counter[str] = Counter()
        self.skip_breakdown: Counter[str] = Counter()
        self._samples: list[RowIssue] = []

    def record(self, outcome: RowOutcome) -> None:
        self.total_lines += 1
        if isinstance(outcome, ParsedRow):
            self.processed += 1
        elif isinstance(outcome, SkippedRow):
            self.skipped += 1
            self.skip_breakdown[outcome.reason] += 1
            logger.debug("CSV row skipped line=%s reason=%s", outcome.line_number, outcome.reason)
        elif isinstance(outcome, RowError):
            self.errors += 1
            self.error_breakdown[outcome.reason] += 1
            self._record_error(outcome)

    def build_stats(
        self,
        *,
        csv_format: CsvFormat | None,
        aggregation: AggregationResult | None = None,
        plan: WritePlan | None = None,
    ) -> ImportStats:
        entries = plan.entries if plan is not None else ()
        return ImportStats(
            total_lines=self.total_lines,
            processed=self.processed,
            errors=self.errors,
            skipped=self.skipped,
            dates_written=len(entries),
            channels=aggregation.channel_names if aggregation is not None else (),
            error_breakdown=dict(self.error_breakdown),
            skip_breakdown=dict(self.skip_breakdown),
            unique_orders=aggregation.unique_orders if aggregation is not None else 0,
            csv_format=csv_format,
            revenue=sum((entry.revenue for entry in entries), ZERO),
            costs=sum((entry.costs for entry in entries), ZERO),
            discounts=sum((entry.discounts for entry in entries), ZERO),
            cashback=sum((entry.cashback for entry in entries), ZERO),
            error_samples=tuple(self._samples),
        )

    @staticmethod
    def success(stats: ImportStats) -> ImportReport:
        return ImportReport(success=True, stats=stats)

    @staticmethod
    def failure(exc: FinancialImportError, stats: ImportStats | None = None) -> ImportReport:
        return ImportReport(
            success=False,
            stats=stats,
            error=exc.message,
            error_code=exc.code,
            status_code=exc.status_code,
            details=exc.details() or None,
        )

    def _record_error(self, error: RowError) -> None:
        if self._log_row_errors:
            logger.warning(
                "CSV row error line=%s reason=%s column=%s message=%s value=%r",
                error.line_number,
                error.reason,
                error.column,
                error.message,
                error.value,
            )
        if len(self._samples) < self._max_error_samples:
            self._samples.append(
                RowIssue(
                    line_number=error.line_number,
                    code=error.reason,
                    message=error.message,
                    value=error.value,
                )
            )
