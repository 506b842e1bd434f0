"""
app/services/financial_import_service.py

Entry point of the financial CSV import pipeline.

    raw text -> header + delimiter -> ColumnMap -> RowParser (per line)
             -> Aggregator -> Reconciler -> store batch -> ImportReport

``execute`` raises FinancialImportError subclasses and never commits, so a
caller can add its own writes to the same unit of work. ``run_import``
commits and turns those errors into a failed ImportReport.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from functools import lru_cache
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError

from app.config import FinancialImportSettings, get_financial_import_settings
from app.domain.financial_import import ImportReport, ImportStats, ParsedRow, RawCsvDocument
from app.errors import (
    FinancialImportError,
    NoValidDataError,
    StoreWriteFailedError,
    UnrecognizedSchemaError,
)
from app.logging_utils import log_event
from app.mappers.column_mapper import ColumnMapper
from app.repositories.base import CHANNEL_STATISTICS_KEY, UnitOfWork
from app.services.aggregation_service import AggregationResult, Aggregator
from app.services.import_report import ImportReportBuilder
from app.services.reconciliation_service import Reconciler, WritePlan
from app.validators.row_parser import RowParser

logger = logging.getLogger(__name__)


def decode_csv_bytes(raw: bytes) -> str:
    """
    Decode an uploaded CSV: UTF-8 (BOM tolerated), else Windows-1252.
    """

    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.warning("CSV payload is not UTF-8; decoding as cp1252")
        return raw.decode("cp1252", errors="replace")


class FinancialImportService:
    """
    Coordinates format detection, row parsing, aggregation and persistence.
    """

    def __init__(
        self,
        *,
        settings: FinancialImportSettings,
        mapper: ColumnMapper | None = None,
        aggregator: Aggregator | None = None,
        reconciler: Reconciler | None = None,
        today: Callable[[], date] | None = None,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self._settings = settings
        self._mapper = mapper or ColumnMapper()
        self._aggregator = aggregator or Aggregator()
        self._reconciler = reconciler or Reconciler(now=now)
        self._today = today or date.today

    def run_import(self, csv_text: str, uow: UnitOfWork) -> ImportReport:
        """
        Run the pipeline and commit. Fatal import errors become a failed report.
        """

        try:
            report = self.execute(csv_text, uow)
            self.commit(uow, stats=report.stats)
        except FinancialImportError as exc:
            return ImportReportBuilder.failure(exc, exc.stats)
        return report

    def execute(self, csv_text: str, uow: UnitOfWork) -> ImportReport:
        """
        Parse, aggregate and stage writes on ``uow`` without committing.

        Raises:
            UnrecognizedSchemaError: header lacks the required columns.
            NoValidDataError: no data line survived parsing.
            StoreWriteFailedError: the store rejected the batch (rolled back).
        """

        document = RawCsvDocument.from_text(csv_text or "")
        if document is None:
            raise UnrecognizedSchemaError(
                "CSV header row is missing.",
                missing_columns=("date", "revenue", "costs"),
            )

        column_map = self._mapper.build_column_map(document.header_line, document.delimiter)
        parser = RowParser(
            column_map=column_map,
            today=self._today,
            default_channel=self._settings.default_channel,
        )
        report = ImportReportBuilder(
            max_error_samples=self._settings.max_error_samples,
            log_row_errors=self._settings.log_row_errors,
        )
        aggregation = AggregationResult()

        for line_number, line in document.data_lines():
            outcome = parser.parse(line_number, line)
            report.record(outcome)
            if isinstance(outcome, ParsedRow):
                self._aggregator.add(aggregation, outcome.record)

        if report.processed == 0:
            stats = report.build_stats(csv_format=column_map.csv_format, aggregation=aggregation)
            log_event(
                logger,
                logging.WARNING,
                "financial_import_no_valid_data",
                format=column_map.csv_format.value,
                total_lines=stats.total_lines,
                errors=stats.errors,
                skipped=stats.skipped,
            )
            raise NoValidDataError("No valid financial rows found in CSV.", stats=stats)

        plan = self._reconciler.plan(aggregation)
        stats = report.build_stats(
            csv_format=column_map.csv_format,
            aggregation=aggregation,
            plan=plan,
        )
        self._write(plan, uow, stats)

        log_event(
            logger,
            logging.INFO,
            "financial_import_completed",
            format=column_map.csv_format.value,
            total_lines=stats.total_lines,
            processed=stats.processed,
            errors=stats.errors,
            skipped=stats.skipped,
            dates_written=stats.dates_written,
            channels=list(stats.channels),
        )
        return ImportReportBuilder.success(stats)

    @staticmethod
    def commit(uow: UnitOfWork, *, stats: ImportStats | None = None) -> None:
        try:
            uow.commit()
        except SQLAlchemyError as exc:
            uow.rollback()
            logger.error("Financial import commit failed: %s", exc)
            raise StoreWriteFailedError("Failed to persist financial data.", stats=stats) from exc

    @staticmethod
    def _write(plan: WritePlan, uow: UnitOfWork, stats: ImportStats) -> None:
        try:
            uow.ledger.upsert(plan.entries, conflict_key="date")
            # Aggregate files carry no channel breakdown, so the previous snapshot
            # stays in place instead of reflecting only the most recent import.
            if plan.channel_statistics is not None:
                uow.settings.upsert_by_key(
                    CHANNEL_STATISTICS_KEY,
                    plan.channel_statistics.to_dict(),
                )
        except SQLAlchemyError as exc:
            uow.rollback()
            logger.error("Financial import write failed dates=%s: %s", plan.dates_written, exc)
            raise StoreWriteFailedError("Failed to persist financial data.", stats=stats) from exc


@lru_cache(maxsize=1)
def get_financial_import_service() -> FinancialImportService:
    """
    Build a cached import service instance using environment settings.
    """

    return FinancialImportService(settings=get_financial_import_settings())
