import pytest

from flouz.errors import ValidationError
from flouz.money import average_cents, format_cents, parse_money


@pytest.mark.parametrize(
    "value,expected",
    [
        ("2.50", 250),
        ("3", 300),
        (" 0.05 ", 5),
        (2.5, 250),
        (1.2, 120),
        (7, 700),
        ("0", 0),
    ],
)
def test_parse_money(value, expected):
    assert parse_money(value) == expected


@pytest.mark.parametrize("value", ["1.234", "-0.01", "abc", "", None, True, "NaN", "Infinity", [], "1e20"])
def test_parse_money_rejects(value):
    with pytest.raises(ValidationError):
        parse_money(value, "price")


def test_format_cents():
    assert format_cents(750) == "7.50"
    assert format_cents(5) == "0.05"
    assert format_cents(0) == "0.00"
    assert format_cents(None) is None


def test_average_rounds_half_up():
    assert average_cents(0, 0) == 0
    assert average_cents(750, 2) == 375
    assert average_cents(100, 3) == 33
    assert average_cents(5, 2) == 3
