"""
app/errors.py

Document- and store-level exceptions for the financial import pipeline.

Row-level problems never surface as exceptions; they are returned as
RowError / SkippedRow values by the row parser and counted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

from app import failure_codes

if TYPE_CHECKING:
    from app.domain.financial_import import ImportStats


class FinancialImportError(Exception):
    """Base exception for fatal import failures."""

    code: str = "import_failed"
    status_code: int = 500

    def __init__(self, message: str, *, stats: "ImportStats | None" = None) -> None:
        super().__init__(message)
        self.message = message
        self.stats = stats

    def details(self) -> dict[str, Any] | None:
        return None


class UnrecognizedSchemaError(FinancialImportError):
    """Raised when the header lacks the logical columns of every known format."""

    code = failure_codes.UNRECOGNIZED_SCHEMA
    status_code = 400

    def __init__(self, message: str, *, missing_columns: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.missing_columns = tuple(missing_columns)

    def details(self) -> dict[str, Any] | None:
        if not self.missing_columns:
            return None
        return {"missing_columns": list(self.missing_columns)}


class NoValidDataError(FinancialImportError):
    """Raised when zero rows survived parsing; carries the row counters."""

    code = failure_codes.NO_VALID_DATA
    status_code = 400


class FetchFailedError(FinancialImportError):
    """Raised when the remote CSV source cannot be fetched."""

    code = failure_codes.FETCH_FAILED
    status_code = 500


class StoreWriteFailedError(FinancialImportError):
    """
    Raised when the store rejects the write batch. Nothing is committed.

    ``stats`` holds the counters of the parsed batch; its written counts
    describe what was attempted, not what is durable.
    """

    code = failure_codes.STORE_WRITE_FAILED
    status_code = 500


class NoLedgerDataError(LookupError):
    """Raised by read-side summaries when the ledger holds no entry in range."""
