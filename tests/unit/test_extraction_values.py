from datetime import date, datetime

import pytest

from adinvoice.extraction.values import parse_date, to_int, to_number, to_text


class TestToNumber:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (12, 12.0),
            (1.5, 1.5),
            ("1,234.56", 1234.56),
            ("₹ 1,000.00", 1000.0),
            ("INR 50", 50.0),
            ("$7.25", 7.25),
        ],
    )
    def test_coerces(self, raw: object, expected: float) -> None:
        assert to_number(raw) == expected

    @pytest.mark.parametrize("raw", [None, True, "", "abc", "nan", float("inf"), [1]])
    def test_rejects(self, raw: object) -> None:
        assert to_number(raw) is None

    def test_to_int_truncates(self) -> None:
        assert to_int("1,200") == 1200
        assert to_int(None) is None


class TestToText:
    def test_strips_and_keeps_numbers(self) -> None:
        assert to_text("  a ") == "a"
        assert to_text(42) == "42"
        assert to_text("   ") is None
        assert to_text({"a": 1}) is None


class TestParseDate:
    def test_iso(self) -> None:
        assert parse_date("2024-03-05") == date(2024, 3, 5)

    def test_long_form(self) -> None:
        assert parse_date("5 March 2024") == date(2024, 3, 5)

    def test_day_first(self) -> None:
        assert parse_date("05/03/2024") == date(2024, 3, 5)

    def test_datetime_and_date_pass_through(self) -> None:
        assert parse_date(datetime(2024, 1, 2, 10, 0)) == date(2024, 1, 2)
        assert parse_date(date(2024, 1, 2)) == date(2024, 1, 2)

    @pytest.mark.parametrize("raw", [None, "", "not a date", 20240305])
    def test_unparseable_is_none(self, raw: object) -> None:
        assert parse_date(raw) is None
