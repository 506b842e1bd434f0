"""
app/connectors package marker.
"""

from app.connectors.csv_source import CsvSourceClient

__all__ = [
    "CsvSourceClient",
]
