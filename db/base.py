"""
db/base.py

Declarative base and shared mixins for the ledger models.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import DateTime, Numeric, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """
    Project-wide declarative base.

    ``Decimal`` annotations map to a two-decimal NUMERIC so monetary
    columns keep the rounding the reconciler applies.
    """

    type_annotation_map: dict[type, Any] = {
        Decimal: Numeric(14, 2),
    }


class TimestampMixin:
    """
    Adds created_at / updated_at; updated_at is refreshed on every UPDATE.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=lambda: datetime.now(timezone.utc),
    )
