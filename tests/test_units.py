from decimal import Decimal

import pytest

from loan_to_card.units import format_units, parse_units, to_base_units


@pytest.mark.parametrize(
    "value,decimals,expected",
    [
        ("100", 6, 100_000_000),
        ("0.5", 18, 5 * 10**17),
        ("1.000001", 6, 1_000_001),
        (Decimal("2.5"), 0, None),
        (" 7 ", 2, 700),
    ],
)
def test_parse_units(value, decimals, expected):
    if expected is None:
        with pytest.raises(ValueError):
            parse_units(value, decimals)
    else:
        assert parse_units(value, decimals) == expected


def test_parse_units_keeps_full_uint256_precision():
    big = "115792089237316195423570985008687907853269984665640564039457.584007913129639935"
    assert parse_units(big, 18) == 2**256 - 1


@pytest.mark.parametrize("value", ["abc", "", "NaN", "Infinity"])
def test_parse_units_rejects_non_numbers(value):
    with pytest.raises(ValueError, match="Invalid amount"):
        parse_units(value, 18)


def test_parse_units_rejects_excess_precision():
    with pytest.raises(ValueError, match="more than 6 decimal places"):
        parse_units("0.0000001", 6)


def test_to_base_units_truncates():
    assert to_base_units(Decimal("0.1234567"), 6) == 123456
    assert to_base_units(Decimal("50"), 18) == 50 * 10**18


@pytest.mark.parametrize(
    "value,decimals,expected",
    [
        (50 * 10**18, 18, "50"),
        (5 * 10**17, 18, "0.5"),
        (1, 6, "0.000001"),
        (0, 18, "0"),
        (123_450_000, 6, "123.45"),
        (-1_500_000, 6, "-1.5"),
        (42, 0, "42"),
    ],
)
def test_format_units(value, decimals, expected):
    assert format_units(value, decimals) == expected
