"""Unit tests for remote value coercion helpers."""

import math
from datetime import date, datetime

import pytest

from storefront_service.services.coercion import (
    day_range,
    money_amount,
    money_currency,
    safe_datetime,
    safe_int,
    safe_number,
    safe_string,
)


class TestSafeNumber:
    @pytest.mark.parametrize("value", [None, "", "abc", True, float("nan"), math.inf])
    def test_falls_back_to_default(self, value) -> None:
        assert safe_number(value) == 0
        assert safe_number(value, 1.5) == 1.5

    def test_parses_decimal_strings(self) -> None:
        assert safe_number("19.99") == pytest.approx(19.99)
        assert safe_number(" 3 ") == 3.0

    def test_keeps_zero(self) -> None:
        assert safe_number(0, 7) == 0.0

    def test_safe_int_truncates(self) -> None:
        assert safe_int("4.9") == 4
        assert safe_int(None) == 0


class TestSafeString:
    def test_none_uses_default(self) -> None:
        assert safe_string(None) is None
        assert safe_string(None, "UNKNOWN") == "UNKNOWN"

    def test_empty_string_is_kept(self) -> None:
        assert safe_string("", "UNKNOWN") == ""

    def test_non_strings_are_converted(self) -> None:
        assert safe_string(42) == "42"


class TestSafeDatetime:
    def test_parses_zulu_timestamp_to_naive_utc(self) -> None:
        assert safe_datetime("2024-03-10T15:45:00Z") == datetime(2024, 3, 10, 15, 45)

    def test_converts_offsets_to_utc(self) -> None:
        assert safe_datetime("2024-03-10T17:45:00+02:00") == datetime(2024, 3, 10, 15, 45)

    def test_invalid_or_missing_returns_default(self) -> None:
        fallback = datetime(2024, 1, 1)
        assert safe_datetime("not a date", fallback) == fallback
        assert safe_datetime(None) is None
        assert safe_datetime("") is None


class TestMoney:
    def test_amount_and_currency(self) -> None:
        money = {"amount": "12.50", "currencyCode": "EUR"}
        assert money_amount(money) == 12.5
        assert money_currency(money) == "EUR"

    def test_missing_money_uses_defaults(self) -> None:
        assert money_amount(None) == 0
        assert money_currency(None, "USD") == "USD"
        assert money_amount({"currencyCode": "EUR"}) == 0


class TestDayRange:
    def test_end_day_is_inclusive(self) -> None:
        lower, upper = day_range(date(2024, 3, 1), date(2024, 3, 31))
        assert lower == datetime(2024, 3, 1)
        assert upper == datetime(2024, 4, 1)

    def test_open_bounds(self) -> None:
        assert day_range(None, None) == (None, None)
        assert day_range(date(2024, 3, 1), None) == (datetime(2024, 3, 1), None)
