"""Shared failure code constants for financial import error handling."""

# Row-level, recoverable: the line is dropped and counted, the import goes on.
COLUMN_COUNT_MISMATCH = "column_count_mismatch"
INVALID_AMOUNT = "invalid_amount"
INVALID_DATE = "invalid_date"

# Row-level, benign: not an error.
NO_FINANCIAL_DATA = "no_financial_data"

ROW_ERROR_CODES = [
    COLUMN_COUNT_MISMATCH,
    INVALID_AMOUNT,
    INVALID_DATE,
]

# Document / run level, fatal for the import.
UNRECOGNIZED_SCHEMA = "unrecognized_schema"
NO_VALID_DATA = "no_valid_data"
FETCH_FAILED = "fetch_failed"
STORE_WRITE_FAILED = "store_write_failed"
