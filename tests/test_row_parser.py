from __future__ import annotations

import unittest
from datetime import date
from decimal import Decimal

from app import failure_codes
from app.domain.financial_import import ParsedRow, RowError, SkippedRow
from app.mappers.column_mapper import ColumnMapper
from app.validators.row_parser import RowParser, parse_amount, parse_date

ORDER_LINE_HEADER = (
    "order date,channel,order number,quantity,unit selling price,"
    "unit purchase price,discount,reward credit"
)
PROCESSING_DAY = date(2024, 3, 1)


def _parser(header: str, delimiter: str = ",") -> RowParser:
    column_map = ColumnMapper().build_column_map(header, delimiter)
    return RowParser(column_map=column_map, today=lambda: PROCESSING_DAY)


class TestAggregateRows(unittest.TestCase):
    def setUp(self) -> None:
        self.parser = _parser("date,revenue,costs")

    def test_parses_valid_row(self) -> None:
        outcome = self.parser.parse(2, "2024-01-15,100.00,60.00")

        self.assertIsInstance(outcome, ParsedRow)
        assert isinstance(outcome, ParsedRow)
        record = outcome.record
        self.assertEqual(record.date, date(2024, 1, 15))
        self.assertEqual(record.revenue_amount, Decimal("100.00"))
        self.assertEqual(record.cost_amount, Decimal("60.00"))
        self.assertIsNone(record.channel)
        self.assertIsNone(record.order_number)

    def test_column_count_mismatch(self) -> None:
        outcome = self.parser.parse(3, "2024-01-15,100.00")

        self.assertIsInstance(outcome, RowError)
        assert isinstance(outcome, RowError)
        self.assertEqual(outcome.reason, failure_codes.COLUMN_COUNT_MISMATCH)
        self.assertEqual(outcome.line_number, 3)

    def test_negative_revenue_is_invalid_amount(self) -> None:
        outcome = self.parser.parse(2, "2024-01-15,-5,10")

        assert isinstance(outcome, RowError)
        self.assertEqual(outcome.reason, failure_codes.INVALID_AMOUNT)
        self.assertEqual(outcome.column, "revenue")
        self.assertEqual(outcome.value, "-5")

    def test_unparsable_amount_is_invalid_amount(self) -> None:
        outcome = self.parser.parse(2, "2024-01-15,abc,10")

        assert isinstance(outcome, RowError)
        self.assertEqual(outcome.reason, failure_codes.INVALID_AMOUNT)

    def test_blank_amount_counts_as_zero(self) -> None:
        outcome = self.parser.parse(2, "2024-01-15,,10")

        assert isinstance(outcome, ParsedRow)
        self.assertEqual(outcome.record.revenue_amount, Decimal("0"))
        self.assertEqual(outcome.record.cost_amount, Decimal("10"))

    def test_tolerant_numeric_parsing(self) -> None:
        outcome = self.parser.parse(2, '2024-01-15,"1,234.50",€60')

        assert isinstance(outcome, ParsedRow)
        self.assertEqual(outcome.record.revenue_amount, Decimal("1234.50"))
        self.assertEqual(outcome.record.cost_amount, Decimal("60"))

    def test_day_first_date(self) -> None:
        outcome = self.parser.parse(2, "15/01/2024,100,60")

        assert isinstance(outcome, ParsedRow)
        self.assertEqual(outcome.record.date, date(2024, 1, 15))

    def test_invalid_date(self) -> None:
        outcome = self.parser.parse(2, "2024-13-45,100,60")

        assert isinstance(outcome, RowError)
        self.assertEqual(outcome.reason, failure_codes.INVALID_DATE)
        self.assertEqual(outcome.value, "2024-13-45")

    def test_missing_required_date_is_invalid(self) -> None:
        outcome = self.parser.parse(2, ",100,60")

        assert isinstance(outcome, RowError)
        self.assertEqual(outcome.reason, failure_codes.INVALID_DATE)

    def test_zero_money_row_is_skipped(self) -> None:
        outcome = self.parser.parse(2, "2024-01-15,0,0.00")

        self.assertIsInstance(outcome, SkippedRow)
        assert isinstance(outcome, SkippedRow)
        self.assertEqual(outcome.reason, failure_codes.NO_FINANCIAL_DATA)

    def test_semicolon_document_reads_decimal_comma(self) -> None:
        parser = _parser("date;revenue;costs", ";")

        outcome = parser.parse(2, "2024-01-15;100,50;60")

        assert isinstance(outcome, ParsedRow)
        self.assertEqual(outcome.record.revenue_amount, Decimal("100.50"))

    def test_semicolon_document_reads_thousands_dots(self) -> None:
        parser = _parser("date;revenue;costs", ";")

        outcome = parser.parse(2, "2024-01-15;1.234,56;100,00")

        assert isinstance(outcome, ParsedRow)
        self.assertEqual(outcome.record.revenue_amount, Decimal("1234.56"))
        self.assertEqual(outcome.record.cost_amount, Decimal("100.00"))

    def test_channel_column_is_carried(self) -> None:
        parser = _parser("date,channel,revenue,costs")

        outcome = parser.parse(2, "2024-01-15,Website,100,60")

        assert isinstance(outcome, ParsedRow)
        self.assertEqual(outcome.record.channel, "Website")


class TestOrderLineRows(unittest.TestCase):
    def setUp(self) -> None:
        self.parser = _parser(ORDER_LINE_HEADER)

    def test_computes_revenue_and_cost(self) -> None:
        outcome = self.parser.parse(2, "2024-01-15,Website,A1,2,25.00,18.00,5.00,0")

        assert isinstance(outcome, ParsedRow)
        record = outcome.record
        self.assertEqual(record.revenue_amount, Decimal("45.00"))
        self.assertEqual(record.cost_amount, Decimal("36.00"))
        self.assertEqual(record.discount, Decimal("5.00"))
        self.assertEqual(record.order_number, "A1")
        self.assertEqual(record.channel, "Website")
        self.assertEqual(record.quantity, Decimal("2"))

    def test_reward_credit_adds_to_cost(self) -> None:
        outcome = self.parser.parse(2, "2024-01-15,Website,A1,2,25.00,18.00,0,1.50")

        assert isinstance(outcome, ParsedRow)
        self.assertEqual(outcome.record.cost_amount, Decimal("37.50"))
        self.assertEqual(outcome.record.cashback, Decimal("1.50"))

    def test_zero_quantity_is_invalid_amount_not_skip(self) -> None:
        outcome = self.parser.parse(2, "2024-01-15,Website,A1,0,25.00,18.00,0,0")

        self.assertIsInstance(outcome, RowError)
        assert isinstance(outcome, RowError)
        self.assertEqual(outcome.reason, failure_codes.INVALID_AMOUNT)
        self.assertEqual(outcome.column, "quantity")

    def test_discount_larger_than_gross_is_invalid(self) -> None:
        outcome = self.parser.parse(2, "2024-01-15,Website,A1,1,5.00,2.00,10.00,0")

        assert isinstance(outcome, RowError)
        self.assertEqual(outcome.reason, failure_codes.INVALID_AMOUNT)

    def test_missing_date_defaults_to_processing_day(self) -> None:
        outcome = self.parser.parse(2, ",Website,A1,1,10,5,0,0")

        assert isinstance(outcome, ParsedRow)
        self.assertEqual(outcome.record.date, PROCESSING_DAY)

    def test_blank_channel_uses_default(self) -> None:
        outcome = self.parser.parse(2, "2024-01-15,,A1,1,10,5,0,0")

        assert isinstance(outcome, ParsedRow)
        self.assertEqual(outcome.record.channel, "Unspecified")

    def test_explicit_totals_win_over_recomputation(self) -> None:
        parser = _parser("date,quantity,unit selling price,unit purchase price,total sales,total cost")

        outcome = parser.parse(2, "2024-01-15,2,25,18,50,30")

        assert isinstance(outcome, ParsedRow)
        self.assertEqual(outcome.record.revenue_amount, Decimal("50"))
        self.assertEqual(outcome.record.cost_amount, Decimal("30"))

    def test_zero_totals_fall_back_to_unit_prices(self) -> None:
        parser = _parser("date,quantity,unit selling price,unit purchase price,total sales,total cost")

        outcome = parser.parse(2, "2024-01-15,2,25,18,0,0")

        assert isinstance(outcome, ParsedRow)
        self.assertEqual(outcome.record.revenue_amount, Decimal("50"))
        self.assertEqual(outcome.record.cost_amount, Decimal("36"))

    def test_totals_only_document(self) -> None:
        parser = _parser("date,order,total sales,total cost")

        outcome = parser.parse(2, "2024-01-15,A7,45.00,36.00")

        assert isinstance(outcome, ParsedRow)
        self.assertEqual(outcome.record.revenue_amount, Decimal("45.00"))
        self.assertEqual(outcome.record.order_number, "A7")

    def test_totals_only_zero_row_is_skipped(self) -> None:
        parser = _parser("date,order,total sales,total cost")

        outcome = parser.parse(2, "2024-01-15,A7,0,0")

        assert isinstance(outcome, SkippedRow)


class TestValueParsing(unittest.TestCase):
    def test_parse_amount(self) -> None:
        self.assertEqual(parse_amount(" 12.5 "), Decimal("12.5"))
        self.assertEqual(parse_amount("$1,000"), Decimal("1000"))
        self.assertEqual(parse_amount("12,5", decimal_comma=True), Decimal("12.5"))
        self.assertEqual(parse_amount("1.234,56", decimal_comma=True), Decimal("1234.56"))
        self.assertEqual(parse_amount("1.234.567,8", decimal_comma=True), Decimal("1234567.8"))
        self.assertEqual(parse_amount("1,234.56", decimal_comma=True), Decimal("1234.56"))
        self.assertIsNone(parse_amount(""))
        self.assertIsNone(parse_amount(None))
        self.assertIsNone(parse_amount("n/a"))
        self.assertIsNone(parse_amount("1.2.3"))

    def test_parse_date(self) -> None:
        self.assertEqual(parse_date("2024-01-15"), date(2024, 1, 15))
        self.assertEqual(parse_date("2024-01-15T23:30:00Z"), date(2024, 1, 15))
        self.assertEqual(parse_date("15/01/2024"), date(2024, 1, 15))
        self.assertEqual(parse_date("15.01.2024"), date(2024, 1, 15))
        self.assertEqual(parse_date("2024/01/15"), date(2024, 1, 15))
        self.assertIsNone(parse_date("31/02/2024"))
        self.assertIsNone(parse_date("yesterday"))
        self.assertIsNone(parse_date(""))


if __name__ == "__main__":
    unittest.main()
