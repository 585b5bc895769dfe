"""Tests for integrations.parsing_utils."""

from datetime import date, datetime, timezone
from decimal import Decimal

from integrations.parsing_utils import parse_date, parse_iso_datetime, to_decimal, to_jsonable


class TestParseIsoDatetime:
    def test_z_suffix(self):
        assert parse_iso_datetime("2024-01-15T10:30:00Z") == datetime(
            2024, 1, 15, 10, 30, tzinfo=timezone.utc
        )

    def test_offset(self):
        dt = parse_iso_datetime("2024-06-28T18:42:46+00:00")
        assert dt.tzinfo is not None
        assert dt.hour == 18

    def test_naive_string_is_utc(self):
        assert parse_iso_datetime("2024-06-28T00:00:00").tzinfo == timezone.utc

    def test_datetime_passthrough(self):
        naive = datetime(2024, 1, 1, 12, 0)
        assert parse_iso_datetime(naive) == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_date_object(self):
        assert parse_iso_datetime(date(2024, 1, 1)) == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_invalid(self):
        assert parse_iso_datetime("not-a-date") is None
        assert parse_iso_datetime(None) is None


class TestParseDate:
    def test_iso_string(self):
        assert parse_date("2024-01-15") == date(2024, 1, 15)

    def test_keeps_calendar_date_of_timestamp(self):
        # No timezone conversion: the calendar date is kept as sent
        assert parse_date("2024-01-15T23:30:00-08:00") == date(2024, 1, 15)

    def test_date_and_datetime_objects(self):
        assert parse_date(date(2024, 1, 15)) == date(2024, 1, 15)
        assert parse_date(datetime(2024, 1, 15, 23, 59)) == date(2024, 1, 15)

    def test_empty_and_invalid(self):
        assert parse_date(None) is None
        assert parse_date("") is None
        assert parse_date("15/01/2024") is None


class TestToDecimal:
    def test_float_goes_through_str(self):
        assert to_decimal(12.3) == Decimal("12.3")
        assert to_decimal(-0.1) == Decimal("-0.1")

    def test_sign_preserved(self):
        assert to_decimal(-5850.0) < 0
        assert to_decimal(72.1) > 0

    def test_invalid(self):
        assert to_decimal(None) is None
        assert to_decimal("abc") is None


class TestToJsonable:
    def test_nested_structures(self):
        value = {
            "date": date(2024, 1, 15),
            "amounts": (Decimal("1.5"), 2),
            "nested": {"at": datetime(2024, 1, 15, 10, 0)},
            "none": None,
        }
        assert to_jsonable(value) == {
            "date": "2024-01-15",
            "amounts": [1.5, 2],
            "nested": {"at": "2024-01-15T10:00:00"},
            "none": None,
        }

    def test_unknown_objects_stringified(self):
        class Opaque:
            def __str__(self):
                return "opaque"

        assert to_jsonable({"x": Opaque()}) == {"x": "opaque"}
