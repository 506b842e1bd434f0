from __future__ import annotations

import unittest

from app.domain.financial_import import CsvFormat
from app.errors import UnrecognizedSchemaError
from app.validators.mapping_validator import MappingValidator


class TestMappingValidator(unittest.TestCase):
    def setUp(self) -> None:
        self.validator = MappingValidator()

    def test_complete_aggregate_mapping_has_no_missing_fields(self) -> None:
        missing = self.validator.missing_fields(
            csv_format=CsvFormat.AGGREGATE,
            mapping={"date": 0, "revenue": 1, "costs": 2},
        )

        self.assertEqual(missing, ())

    def test_reports_missing_aggregate_fields(self) -> None:
        missing = self.validator.missing_fields(
            csv_format=CsvFormat.AGGREGATE,
            mapping={"revenue": 0},
        )

        self.assertEqual(missing, ("date", "costs"))

    def test_order_line_accepts_either_group(self) -> None:
        unit_prices = {"quantity": 0, "unit_selling_price": 1, "unit_purchase_price": 2}
        totals = {"total_sales": 0, "total_cost": 1}

        self.assertEqual(
            self.validator.missing_fields(csv_format=CsvFormat.ORDER_LINE, mapping=unit_prices),
            (),
        )
        self.assertEqual(
            self.validator.missing_fields(csv_format=CsvFormat.ORDER_LINE, mapping=totals),
            (),
        )

    def test_order_line_reports_closest_group(self) -> None:
        missing = self.validator.missing_fields(
            csv_format=CsvFormat.ORDER_LINE,
            mapping={"quantity": 0, "unit_selling_price": 1},
        )

        self.assertEqual(missing, ("unit_purchase_price",))

    def test_errors_carry_format_and_headers(self) -> None:
        errors = self.validator.errors_for(
            csv_format=CsvFormat.AGGREGATE,
            mapping={"date": 0, "revenue": 1},
            source_headers=("date", "revenue"),
        )

        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].code, "required_field_unmapped")
        self.assertEqual(errors[0].logical_field, "costs")
        self.assertEqual(errors[0].context["format"], "aggregate")
        self.assertEqual(errors[0].context["source_headers"], ["date", "revenue"])

    def test_unrecognized_schema_error_lists_missing_columns(self) -> None:
        error = self.validator.unrecognized_schema_error(
            csv_format=CsvFormat.AGGREGATE,
            mapping={"revenue": 1, "costs": 2},
            source_headers=("day", "revenue", "costs"),
        )

        self.assertIsInstance(error, UnrecognizedSchemaError)
        self.assertEqual(error.missing_columns, ("date",))
        self.assertEqual(error.message, "Missing required columns: date.")
        self.assertEqual(error.status_code, 400)
        self.assertEqual(error.details(), {"missing_columns": ["date"]})

    def test_order_line_error_mentions_alternative_group(self) -> None:
        error = self.validator.unrecognized_schema_error(
            csv_format=CsvFormat.ORDER_LINE,
            mapping={"total_sales": 3},
            source_headers=("order", "channel", "date", "total sales"),
        )

        self.assertEqual(error.missing_columns, ("total_cost",))
        self.assertIn("Missing required columns: total_cost.", error.message)
        self.assertIn("quantity, unit_selling_price, unit_purchase_price", error.message)


if __name__ == "__main__":
    unittest.main()
