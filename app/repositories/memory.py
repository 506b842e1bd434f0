"""
app/repositories/memory.py

In-process stores for dry runs and tests.

Writes are staged until ``commit()``; ``rollback()`` discards them, so a
failed import leaves the committed state exactly as it was.
"""

from __future__ import annotations

import copy
from datetime import date
from typing import Any, Sequence

from app.domain.financial_import import LedgerEntry
from app.repositories.base import check_conflict_key


class InMemoryLedgerStore:
    def __init__(self, entries: Sequence[LedgerEntry] = ()) -> None:
        self._committed: dict[date, LedgerEntry] = {entry.date: entry for entry in entries}
        self._staged: dict[date, LedgerEntry] = {}

    def upsert(
        self,
        entries: Sequence[LedgerEntry],
        *,
        conflict_key: str = "date",
    ) -> list[LedgerEntry]:
        check_conflict_key(conflict_key)
        for entry in entries:
            self._staged[entry.date] = entry
        return list(entries)

    def query(
        self,
        *,
        since: date | None = None,
        until: date | None = None,
        descending: bool = True,
        limit: int | None = None,
    ) -> list[LedgerEntry]:
        visible = {**self._committed, **self._staged}
        rows = [
            entry
            for entry in visible.values()
            if (since is None or entry.date >= since) and (until is None or entry.date <= until)
        ]
        rows.sort(key=lambda entry: entry.date, reverse=descending)
        if limit is not None:
            rows = rows[: max(0, limit)]
        return rows

    @property
    def committed(self) -> dict[date, LedgerEntry]:
        return dict(self._committed)

    def flush(self) -> None:
        self._committed.update(self._staged)
        self._staged.clear()

    def discard(self) -> None:
        self._staged.clear()


class InMemorySettingsStore:
    def __init__(self, documents: dict[str, dict[str, Any]] | None = None) -> None:
        self._committed: dict[str, dict[str, Any]] = copy.deepcopy(documents or {})
        self._staged: dict[str, dict[str, Any]] = {}

    def get_by_key(self, key: str) -> dict[str, Any] | None:
        if key in self._staged:
            return copy.deepcopy(self._staged[key])
        if key in self._committed:
            return copy.deepcopy(self._committed[key])
        return None

    def upsert_by_key(self, key: str, value: dict[str, Any]) -> None:
        self._staged[key] = copy.deepcopy(value)

    @property
    def committed(self) -> dict[str, dict[str, Any]]:
        return copy.deepcopy(self._committed)

    def flush(self) -> None:
        self._committed.update(self._staged)
        self._staged.clear()

    def discard(self) -> None:
        self._staged.clear()


class InMemoryUnitOfWork:
    def __init__(
        self,
        *,
        ledger: InMemoryLedgerStore | None = None,
        settings: InMemorySettingsStore | None = None,
    ) -> None:
        self.ledger = ledger or InMemoryLedgerStore()
        self.settings = settings or InMemorySettingsStore()
        self.commits = 0
        self.rollbacks = 0

    def commit(self) -> None:
        self.ledger.flush()
        self.settings.flush()
        self.commits += 1

    def rollback(self) -> None:
        self.ledger.discard()
        self.settings.discard()
        self.rollbacks += 1
