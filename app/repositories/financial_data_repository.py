"""
app/repositories/financial_data_repository.py

PostgreSQL persistence for ledger entries.
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import Any, Sequence

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.orm import Session

from app.domain.financial_import import LedgerEntry
from app.repositories.base import check_conflict_key
from db.models.financial_data import LEDGER_DATE_CONSTRAINT, FinancialData

_REPLACED_COLUMNS: tuple[str, ...] = (
    "revenue",
    "costs",
    "margin",
    "margin_percentage",
    "discounts",
    "cashback",
)


class FinancialDataRepository:
    """
    Repository for the per-day ledger. The caller owns commit/rollback.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def upsert(
        self,
        entries: Sequence[LedgerEntry],
        *,
        conflict_key: str = "date",
    ) -> list[LedgerEntry]:
        """
        Insert entries, overwriting every money column of an existing date.
        """

        check_conflict_key(conflict_key)
        if not entries:
            return []

        payloads: list[dict[str, Any]] = [
            {
                "id": uuid.uuid4(),
                "date": entry.date,
                "revenue": entry.revenue,
                "costs": entry.costs,
                "margin": entry.margin,
                "margin_percentage": entry.margin_percentage,
                "discounts": entry.discounts,
                "cashback": entry.cashback,
            }
            for entry in entries
        ]
        stmt = pg_insert(FinancialData).values(payloads)
        replace = {column: stmt.excluded[column] for column in _REPLACED_COLUMNS}
        replace["updated_at"] = func.now()
        self._session.execute(
            stmt.on_conflict_do_update(constraint=LEDGER_DATE_CONSTRAINT, set_=replace)
        )
        return list(entries)

    def query(
        self,
        *,
        since: date | None = None,
        until: date | None = None,
        descending: bool = True,
        limit: int | None = None,
    ) -> list[LedgerEntry]:
        stmt = select(FinancialData)
        if since is not None:
            stmt = stmt.where(FinancialData.date >= since)
        if until is not None:
            stmt = stmt.where(FinancialData.date <= until)
        stmt = stmt.order_by(
            FinancialData.date.desc() if descending else FinancialData.date.asc()
        )
        if limit is not None:
            stmt = stmt.limit(max(0, limit))
        rows = self._session.execute(stmt).scalars().all()
        return [_to_entry(row) for row in rows]


def _to_entry(row: FinancialData) -> LedgerEntry:
    return LedgerEntry(
        date=row.date,
        revenue=row.revenue,
        costs=row.costs,
        margin=row.margin,
        margin_percentage=row.margin_percentage,
        discounts=row.discounts,
        cashback=row.cashback,
    )
