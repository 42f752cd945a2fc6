import pytest

from rainbet_leaderboard.classes.amounts import format_money, parse_amount


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("10", 10.0),
        ("12.5", 12.5),
        ("-3.25", -3.25),
        ("+4", 4.0),
        (".5", 0.5),
        ("7.", 7.0),
        ("1e3", 1000.0),
        ("  42", 42.0),
    ],
)
def test_parse_amount_numeric_strings(text, expected):
    assert parse_amount(text) == expected


def test_parse_amount_missing_or_empty_is_zero():
    assert parse_amount(None) == 0
    assert parse_amount() == 0
    assert parse_amount("") == 0


def test_parse_amount_reads_leading_prefix_only():
    assert parse_amount("12.5abc") == 12.5
    assert parse_amount("1,234.56") == 1.0
    assert parse_amount("3.2.1") == 3.2


def test_parse_amount_garbage_is_zero():
    assert parse_amount("abc") == 0
    assert parse_amount("$100") == 0
    assert parse_amount("NaN") == 0


def test_parse_amount_non_finite_is_zero():
    assert parse_amount("Infinity") == 0
    assert parse_amount("-Infinity") == 0
    assert parse_amount("1e999") == 0


def test_parse_amount_accepts_numbers():
    assert parse_amount(15) == 15.0
    assert parse_amount(2.5) == 2.5


def test_format_money_usd():
    assert format_money(0) == "$0.00"
    assert format_money(1234.5) == "$1,234.50"
    assert format_money(-5) == "-$5.00"
