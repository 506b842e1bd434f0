"""
app/services/daily_import_service.py

Scheduled URL import: reads the persisted ``daily_csv_import`` config,
fetches the configured CSV and feeds it through the import pipeline.

State machine
-------------
    Idle -> Running -> Idle

A trigger arriving while a run is in progress returns ``already_running``
immediately. The config is bumped (last_import, import_count) in the same
transaction as the ledger batch, so a failed fetch or import leaves it
exactly as it was.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Callable

from sqlalchemy.exc import SQLAlchemyError

from app.config import get_csv_source_settings
from app.connectors.csv_source import CsvSourceClient
from app.domain.financial_import import ImportConfig, ImportReport
from app.errors import FinancialImportError, StoreWriteFailedError
from app.logging_utils import log_event
from app.repositories.base import DAILY_IMPORT_CONFIG_KEY, UnitOfWork
from app.services.financial_import_service import (
    FinancialImportService,
    decode_csv_bytes,
    get_financial_import_service,
)
from app.services.import_report import ImportReportBuilder

logger = logging.getLogger(__name__)

REASON_DISABLED = "disabled"
REASON_ALREADY_RUNNING = "already_running"


@dataclass(frozen=True)
class DailyImportResult:
    success: bool
    config: ImportConfig
    report: ImportReport | None = None
    reason: str | None = None

    @property
    def status_code(self) -> int:
        if self.report is not None:
            return self.report.status_code
        if self.reason == REASON_ALREADY_RUNNING:
            return 409
        return 200

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": self.success}
        if self.reason is not None:
            payload["reason"] = self.reason
        if self.report is not None:
            report = self.report.to_dict()
            report.pop("success", None)
            payload.update(report)
        payload["config"] = self.config.to_dict()
        return payload


class DailyImportService:
    """
    Runs the configured URL import; at most one run at a time per process.
    """

    def __init__(
        self,
        *,
        import_service: FinancialImportService,
        source: CsvSourceClient,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self._import_service = import_service
        self._source = source
        self._now = now or (lambda: datetime.now(tz=timezone.utc))
        self._lock = threading.Lock()

    @property
    def state(self) -> str:
        return "running" if self._lock.locked() else "idle"

    # ------------------------------------------------------------------
    # Config management
    # ------------------------------------------------------------------

    @staticmethod
    def get_config(uow: UnitOfWork) -> ImportConfig:
        return ImportConfig.from_dict(uow.settings.get_by_key(DAILY_IMPORT_CONFIG_KEY))

    def save_config(self, uow: UnitOfWork, *, enabled: bool, source_url: str) -> ImportConfig:
        """
        Replace enabled/source_url; run bookkeeping is carried over untouched.
        """

        updated = replace(
            self.get_config(uow),
            enabled=enabled,
            source_url=(source_url or "").strip(),
        )
        try:
            uow.settings.upsert_by_key(DAILY_IMPORT_CONFIG_KEY, updated.to_dict())
        except SQLAlchemyError as exc:
            uow.rollback()
            raise StoreWriteFailedError("Failed to save daily import config.") from exc
        self._import_service.commit(uow)
        logger.info(
            "Daily import config saved enabled=%s source_url=%s",
            updated.enabled,
            updated.source_url,
        )
        return updated

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(self, uow: UnitOfWork) -> DailyImportResult:
        if not self._lock.acquire(blocking=False):
            logger.warning("Daily import trigger ignored: a run is already in progress")
            return DailyImportResult(
                success=False,
                config=self.get_config(uow),
                reason=REASON_ALREADY_RUNNING,
            )
        try:
            return self._run_locked(uow)
        finally:
            self._lock.release()

    def _run_locked(self, uow: UnitOfWork) -> DailyImportResult:
        config = self.get_config(uow)
        if not config.enabled or not config.source_url:
            logger.info("Daily import skipped: disabled or no source URL")
            return DailyImportResult(success=False, config=config, reason=REASON_DISABLED)

        log_event(logger, logging.INFO, "daily_import_started", source_url=config.source_url)
        try:
            body = self._source.fetch_bytes(config.source_url)
            report = self._import_service.execute(decode_csv_bytes(body), uow)
            updated = replace(
                config,
                last_import=self._now(),
                import_count=config.import_count + 1,
            )
            try:
                uow.settings.upsert_by_key(DAILY_IMPORT_CONFIG_KEY, updated.to_dict())
            except SQLAlchemyError as exc:
                uow.rollback()
                raise StoreWriteFailedError(
                    "Failed to update daily import config.",
                    stats=report.stats,
                ) from exc
            self._import_service.commit(uow, stats=report.stats)
        except FinancialImportError as exc:
            uow.rollback()
            failed = ImportReportBuilder.failure(exc, exc.stats)
            log_event(
                logger,
                logging.WARNING,
                "daily_import_failed",
                source_url=config.source_url,
                error_code=exc.code,
                error=exc.message,
            )
            return DailyImportResult(success=False, config=config, report=failed, reason=exc.code)

        log_event(
            logger,
            logging.INFO,
            "daily_import_completed",
            source_url=config.source_url,
            import_count=updated.import_count,
            dates_written=report.stats.dates_written if report.stats else 0,
        )
        return DailyImportResult(success=True, config=updated, report=report)


@lru_cache(maxsize=1)
def get_daily_import_service() -> DailyImportService:
    """
    Process-wide instance so the API and the scheduler share one run lock.
    """

    return DailyImportService(
        import_service=get_financial_import_service(),
        source=CsvSourceClient(settings=get_csv_source_settings()),
    )
