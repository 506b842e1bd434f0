"""
app/mappers package marker.
"""

from app.mappers.column_mapper import (
    AGGREGATE_ALIASES,
    ORDER_LINE_ALIASES,
    ColumnMapper,
    split_csv_line,
)

__all__ = [
    "AGGREGATE_ALIASES",
    "ORDER_LINE_ALIASES",
    "ColumnMapper",
    "split_csv_line",
]
