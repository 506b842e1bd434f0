"""
app/repositories/base.py

Store contracts used by the import pipeline and the read-side summaries.

Repositories never commit. The unit of work owns the transaction so that
a ledger batch and the settings documents written by the same import land
together or not at all.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Protocol, Sequence

from app.domain.financial_import import LedgerEntry

CHANNEL_STATISTICS_KEY = "channel_statistics"
DAILY_IMPORT_CONFIG_KEY = "daily_csv_import"


class LedgerStore(Protocol):
    def upsert(
        self,
        entries: Sequence[LedgerEntry],
        *,
        conflict_key: str = "date",
    ) -> list[LedgerEntry]:
        """
        Replace-on-conflict write of ledger entries keyed by ``conflict_key``.
        """
        ...

    def query(
        self,
        *,
        since: date | None = None,
        until: date | None = None,
        descending: bool = True,
        limit: int | None = None,
    ) -> list[LedgerEntry]:
        ...


class SettingsStore(Protocol):
    def get_by_key(self, key: str) -> dict[str, Any] | None:
        ...

    def upsert_by_key(self, key: str, value: dict[str, Any]) -> None:
        ...


class UnitOfWork(Protocol):
    ledger: LedgerStore
    settings: SettingsStore

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        ...


def check_conflict_key(conflict_key: str) -> None:
    if conflict_key != "date":
        raise ValueError(f"Ledger entries are keyed by date, not {conflict_key!r}.")
