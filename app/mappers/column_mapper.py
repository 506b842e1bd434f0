"""
app/mappers/column_mapper.py

Format detection and column mapping for financial CSV exports.

Two shapes are recognized:

    aggregate   one row per day: date, revenue, costs (+ optional discounts,
                cashback, channel)
    order_line  one row per sold line item: channel, order number, quantity,
                unit prices, discount, reward credit, explicit totals

Headers are matched by substring against alias lists (English and French),
exact token matches first, then containment, each column used at most once.
"""

from __future__ import annotations

import csv
import logging
from typing import Mapping, Sequence

from app.domain.financial_import import ColumnMap, CsvFormat
from app.errors import UnrecognizedSchemaError
from app.validators.mapping_validator import MappingValidator

logger = logging.getLogger(__name__)

ORDER_LINE_MARKERS: tuple[str, ...] = (
    "order",
    "commande",
    "quantity",
    "quantité",
    "quantite",
    "quantit",
    "selling price",
    "prix de vente",
    "purchase price",
    "prix d'achat",
    "prix achat",
)

# Resolution order matters: "order date" must be claimed by date before
# order_number looks for "order".
ORDER_LINE_ALIASES: dict[str, tuple[str, ...]] = {
    "quantity": ("quantity", "quantité", "quantite", "quantit", "qty"),
    "unit_selling_price": (
        "unit selling price",
        "selling price",
        "prix de vente",
        "prix vente",
        "sale price",
    ),
    "unit_purchase_price": (
        "unit purchase price",
        "purchase price",
        "prix d'achat",
        "prix achat",
        "cost price",
    ),
    "total_sales": ("total sales", "total ventes", "total vente"),
    "total_cost": ("total cost", "total coût", "total cout"),
    "discount": ("discount", "remise"),
    "reward_credit": ("reward credit", "reward", "cashback", "cagnotte", "loyalty"),
    "date": ("order date", "date"),
    "channel": ("channel", "chanel", "canal"),
    "order_number": (
        "order number",
        "numero commande",
        "numéro commande",
        "numero de commande",
        "numéro de commande",
        "order id",
        "order",
        "commande",
    ),
}

AGGREGATE_ALIASES: dict[str, tuple[str, ...]] = {
    "date": ("date",),
    "revenue": ("revenue", "chiffre", "ca"),
    "costs": ("costs", "cout", "coût", "charge", "cost"),
    "discount": ("discounts", "discount", "remise"),
    "reward_credit": ("cashback", "cagnotte", "reward"),
    "channel": ("channel", "canal"),
}


def strip_quotes(value: str) -> str:
    """
    Trim whitespace and one layer of surrounding quotes.
    """

    stripped = value.strip()
    if len(stripped) >= 2 and stripped[0] == stripped[-1] and stripped[0] in {'"', "'"}:
        stripped = stripped[1:-1].strip()
    return stripped.replace('"', "")


def split_csv_line(line: str, delimiter: str) -> list[str]:
    """
    Split one CSV line on ``delimiter`` honouring double quotes.
    """

    try:
        fields = next(csv.reader([line], delimiter=delimiter), [])
    except csv.Error:
        fields = line.split(delimiter)
    return [strip_quotes(value) for value in fields]


def normalize_header(header: str) -> str:
    """
    Lower-case, quote-stripped header token.
    """

    return strip_quotes(header.lstrip("\ufeff")).lower()


def searchable(token: str) -> str:
    """
    Header token with separators folded to single spaces for alias matching.
    """

    folded = token.replace("_", " ").replace("-", " ").replace("\u2019", "'")
    return " ".join(folded.split())


class ColumnMapper:
    """
    Detects the CSV format from its header and builds the ColumnMap.
    """

    def __init__(
        self,
        *,
        order_line_aliases: Mapping[str, Sequence[str]] | None = None,
        aggregate_aliases: Mapping[str, Sequence[str]] | None = None,
        validator: MappingValidator | None = None,
    ) -> None:
        self._aliases: dict[CsvFormat, dict[str, tuple[str, ...]]] = {
            CsvFormat.ORDER_LINE: {
                name: tuple(values)
                for name, values in (order_line_aliases or ORDER_LINE_ALIASES).items()
            },
            CsvFormat.AGGREGATE: {
                name: tuple(values)
                for name, values in (aggregate_aliases or AGGREGATE_ALIASES).items()
            },
        }
        self._validator = validator or MappingValidator()

    def header_tokens(self, header_line: str, delimiter: str) -> tuple[str, ...]:
        return tuple(normalize_header(token) for token in split_csv_line(header_line, delimiter))

    def looks_like_order_lines(self, headers: Sequence[str]) -> bool:
        for header in headers:
            token = searchable(header)
            if any(marker in token for marker in ORDER_LINE_MARKERS):
                return True
        return False

    def detect_format(self, headers: Sequence[str]) -> CsvFormat:
        """
        Classify header tokens as aggregate or order-line.

        Raises UnrecognizedSchemaError when neither format's required
        columns are present.
        """

        return self.resolve(headers).csv_format

    def build_column_map(self, header_line: str, delimiter: str) -> ColumnMap:
        """
        Split the header line and resolve it into a ColumnMap.
        """

        headers = self.header_tokens(header_line, delimiter)
        return self.resolve(headers, delimiter=delimiter)

    def resolve(self, headers: Sequence[str], *, delimiter: str = ",") -> ColumnMap:
        source_headers = tuple(normalize_header(header) for header in headers)
        if not any(source_headers):
            raise UnrecognizedSchemaError(
                "CSV header row is missing.",
                missing_columns=("date", "revenue", "costs"),
            )

        preferred = (
            CsvFormat.ORDER_LINE
            if self.looks_like_order_lines(source_headers)
            else CsvFormat.AGGREGATE
        )
        candidates = [preferred]
        if preferred is CsvFormat.ORDER_LINE:
            candidates.append(CsvFormat.AGGREGATE)

        for csv_format in candidates:
            indexes = self._match_columns(source_headers, self._aliases[csv_format])
            missing = self._validator.missing_fields(csv_format=csv_format, mapping=indexes)
            if not missing:
                logger.info(
                    "CSV format detected format=%s columns=%s",
                    csv_format.value,
                    {name: source_headers[index] for name, index in indexes.items()},
                )
                return ColumnMap(
                    csv_format=csv_format,
                    indexes=indexes,
                    headers=source_headers,
                    delimiter=delimiter,
                )

        raise self._validator.unrecognized_schema_error(
            csv_format=preferred,
            mapping=self._match_columns(source_headers, self._aliases[preferred]),
            source_headers=source_headers,
        )

    @staticmethod
    def _match_columns(
        headers: Sequence[str],
        aliases: Mapping[str, Sequence[str]],
    ) -> dict[str, int]:
        tokens = [searchable(header) for header in headers]
        used: set[int] = set()
        resolved: dict[str, int] = {}

        for field_name, field_aliases in aliases.items():
            match = _find_exact(tokens, field_aliases, used)
            if match is None:
                match = _find_containing(tokens, field_aliases, used)
            if match is not None:
                resolved[field_name] = match
                used.add(match)
        return resolved


def _find_exact(tokens: Sequence[str], aliases: Sequence[str], used: set[int]) -> int | None:
    for alias in aliases:
        for index, token in enumerate(tokens):
            if index not in used and token == alias:
                return index
    return None


def _find_containing(tokens: Sequence[str], aliases: Sequence[str], used: set[int]) -> int | None:
    for alias in aliases:
        for index, token in enumerate(tokens):
            if index not in used and token and alias in token:
                return index
    return None
