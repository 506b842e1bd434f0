"""
app/validators/mapping_validator.py

Validation of resolved column maps against the required logical columns
of each CSV format.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from app.domain.financial_import import CsvFormat
from app.errors import UnrecognizedSchemaError

# Each format lists alternative groups; one complete group is enough.
REQUIRED_FIELD_GROUPS: dict[CsvFormat, tuple[tuple[str, ...], ...]] = {
    CsvFormat.ORDER_LINE: (
        ("quantity", "unit_selling_price", "unit_purchase_price"),
        ("total_sales", "total_cost"),
    ),
    CsvFormat.AGGREGATE: (
        ("date", "revenue", "costs"),
    ),
}


@dataclass(frozen=True)
class MappingErrorDetail:
    """
    Structured detail for one unmapped logical column.
    """

    code: str
    message: str
    logical_field: str | None = None
    context: dict[str, Any] | None = None


class MappingValidator:
    """
    Checks that a column map covers one required group of its format.
    """

    def __init__(
        self,
        *,
        required_groups: Mapping[CsvFormat, Sequence[Sequence[str]]] | None = None,
    ) -> None:
        source = required_groups or REQUIRED_FIELD_GROUPS
        self._required_groups: dict[CsvFormat, tuple[tuple[str, ...], ...]] = {
            csv_format: tuple(tuple(group) for group in groups)
            for csv_format, groups in source.items()
        }

    def missing_fields(
        self,
        *,
        csv_format: CsvFormat,
        mapping: Mapping[str, int],
    ) -> tuple[str, ...]:
        """
        Return the missing fields of the closest group, or () when satisfied.
        """

        best: tuple[str, ...] | None = None
        for group in self._required_groups.get(csv_format, ()):
            missing = tuple(field_name for field_name in group if field_name not in mapping)
            if not missing:
                return ()
            if best is None or len(missing) < len(best):
                best = missing
        return best or ()

    def errors_for(
        self,
        *,
        csv_format: CsvFormat,
        mapping: Mapping[str, int],
        source_headers: Sequence[str],
    ) -> list[MappingErrorDetail]:
        return [
            MappingErrorDetail(
                code="required_field_unmapped",
                message="Required logical column is not present in the CSV header.",
                logical_field=field_name,
                context={"format": csv_format.value, "source_headers": list(source_headers)},
            )
            for field_name in self.missing_fields(csv_format=csv_format, mapping=mapping)
        ]

    def unrecognized_schema_error(
        self,
        *,
        csv_format: CsvFormat,
        mapping: Mapping[str, int],
        source_headers: Sequence[str],
    ) -> UnrecognizedSchemaError:
        """
        Build the UnrecognizedSchemaError listing the missing logical columns.
        """

        errors = self.errors_for(
            csv_format=csv_format,
            mapping=mapping,
            source_headers=source_headers,
        )
        missing = [error.logical_field for error in errors if error.logical_field]
        alternatives = [
            group
            for group in self._required_groups.get(csv_format, ())
            if tuple(missing) != tuple(f for f in group if f not in mapping)
        ]
        message = f"Missing required columns: {', '.join(missing) or 'unknown'}."
        if alternatives:
            alternative_text = " or ".join(", ".join(group) for group in alternatives)
            message += f" Alternatively provide: {alternative_text}."
        return UnrecognizedSchemaError(message, missing_columns=missing)
