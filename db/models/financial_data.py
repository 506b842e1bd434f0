"""
db/models/financial_data.py

Canonical per-day financial ledger.
One row per calendar date; re-imports overwrite the row in place.
"""

from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

from sqlalchemy import Date, Numeric, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin

LEDGER_DATE_CONSTRAINT = "uq_financial_data_date"


class FinancialData(Base, TimestampMixin):
    """
    One ledger entry: a day's revenue, costs and derived margin.

    ``margin`` and ``margin_percentage`` are written by the reconciler
    alongside the totals so that readers never recompute them.
    """

    __tablename__ = "financial_data"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    date: Mapped[dt.date] = mapped_column(
        Date,
        nullable=False,
        comment="Calendar day summarized by this entry; upsert conflict key",
    )
    revenue: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    costs: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    margin: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    margin_percentage: Mapped[Decimal] = mapped_column(
        Numeric(20, 1),
        nullable=False,
        default=Decimal("0"),
        comment="margin / revenue * 100; 0 when revenue is 0",
    )
    discounts: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    cashback: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    __table_args__ = (
        UniqueConstraint("date", name=LEDGER_DATE_CONSTRAINT),
    )

    def __repr__(self) -> str:
        return f"<FinancialData date={self.date} revenue={self.revenue} costs={self.costs}>"
