"""Tests for money helpers, error classification, logging sanitizers and settings"""
import logging
from decimal import Decimal

import pytest

from farmcart.config import get_settings
from farmcart.errors import LineConflictError, PersistenceError, is_duplicate_key_error
from farmcart.logging import _get_log_level, get_logger, sanitize_id_for_logging, sanitize_string_for_logging
from farmcart.services.money import format_money, multiply, round_money, to_decimal, to_float, total


class TestMoney:
    """Tests for money helpers."""

    def test_to_decimal_from_float_keeps_digits(self):
        assert to_decimal(0.1) == Decimal("0.1")

    @pytest.mark.parametrize("value", [None, "abc", object()])
    def test_to_decimal_invalid_is_zero(self, value):
        assert to_decimal(value) == Decimal("0")

    def test_round_money(self):
        assert round_money("2.345") == Decimal("2.35")

    def test_multiply_and_total(self):
        assert total([multiply(18.75, 3), multiply("0.1", 3)]) == Decimal("56.55")

    def test_format_and_float(self):
        assert format_money(Decimal("1250")) == "$1,250.00"
        assert to_float(Decimal("12.50")) == 12.5


class TestErrors:
    """Tests for error helpers."""

    def test_duplicate_key_by_code(self):
        error = Exception("boom")
        error.code = "23505"

        assert is_duplicate_key_error(error)

    def test_duplicate_key_by_message(self):
        assert is_duplicate_key_error(Exception("duplicate key value violates unique constraint"))

    def test_other_errors(self):
        assert not is_duplicate_key_error(Exception("connection refused"))

    def test_codes(self):
        assert LineConflictError().code == "CONFLICT"
        assert PersistenceError().code == "PERSISTENCE_FAILURE"


class TestLoggingSanitizers:
    """Tests for log sanitizers."""

    def test_id_truncated_and_escaped(self):
        assert sanitize_id_for_logging("ab\ncdefghijk") == "ab\\ncdef"
        assert sanitize_id_for_logging(None) == "N/A"

    def test_string_truncated(self):
        assert sanitize_string_for_logging("x" * 60, max_length=10) == "x" * 10 + "..."

    def test_loggers_live_under_package(self):
        assert get_logger("farmcart.cart.engine").name == "farmcart.cart.engine"
        assert get_logger("storefront.views").name == "farmcart.storefront.views"

    def test_package_level_overrides_global(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        monkeypatch.setenv("FARMCART_LOG_LEVEL", "debug")

        assert _get_log_level() == logging.DEBUG


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://farm.supabase.co")
    monkeypatch.setenv("SUPABASE_KEY", "anon")
    monkeypatch.setenv("FARMCART_FEATURED_LIMIT", "9")
    get_settings.cache_clear()

    try:
        settings = get_settings()
    finally:
        get_settings.cache_clear()

    assert settings.supabase_url == "https://farm.supabase.co"
    assert settings.supabase_key == "anon"
    assert settings.featured_limit == 9
    assert settings.cart_table == "cart_items"
