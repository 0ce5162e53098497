import math

from smb_opsboard.parsing import parse_currency, sum_currency


def test_parse_currency_strips_symbols_and_separators():
    """Currency symbols, spaces and thousands separators are ignored."""
    assert parse_currency("$12,500") == 12500.0
    assert parse_currency("1,200.50 USD") == 1200.5
    assert parse_currency("-1,000") == -1000.0
    assert parse_currency("€ 3 200.50") == 3200.5


def test_parse_currency_malformed_values_are_zero():
    """Anything without digits parses to exactly 0."""
    for value in ("", "abc", "$", "-", ".", "N/A", None):
        assert parse_currency(value) == 0.0


def test_parse_currency_uses_longest_numeric_prefix():
    """Only the longest leading number is kept."""
    assert parse_currency("1.2.3") == 1.2
    assert parse_currency("5-3") == 5.0
    # Magnitude letters are dropped, not interpreted.
    assert parse_currency("45k") == 45.0


def test_parse_currency_passes_numbers_through():
    """Numbers are returned as floats; NaN and booleans give 0."""
    assert parse_currency(42) == 42.0
    assert parse_currency(-3.5) == -3.5
    assert parse_currency(float("nan")) == 0.0
    assert parse_currency(True) == 0.0


def test_sum_currency_matches_arithmetic_sum():
    """sum_currency adds parsed values and never returns NaN."""
    values = ["$1,000", "2500", None, "oops", 500]
    assert sum_currency(values) == 4000.0
    assert sum_currency([]) == 0.0
    assert not math.isnan(sum_currency(["", ""]))
