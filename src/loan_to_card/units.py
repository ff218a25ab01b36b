from __future__ import annotations

from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext

# uint256 needs 78 significant digits
_PRECISION = 80


def parse_units(value: str | Decimal, decimals: int) -> int:
    """Convert a decimal amount into integer base units.

    Args:
        value: Human-readable amount, e.g. ``"100.5"``.
        decimals: Token decimal precision.

    Returns:
        ``value * 10**decimals`` as an integer.

    Raises:
        ValueError: If ``value`` is not a finite number or carries more
            fractional digits than ``decimals`` allows.
    """
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValueError(f"Invalid amount: {value!r}") from e
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        scaled = amount.scaleb(decimals)
        if scaled != scaled.to_integral_value():
            raise ValueError(
                f"Amount {value} has more than {decimals} decimal places"
            )
        return int(scaled)


def to_base_units(amount: Decimal, decimals: int) -> int:
    """Like :func:`parse_units` but truncates excess precision toward zero."""
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return int(amount.scaleb(decimals).to_integral_value(rounding=ROUND_DOWN))


def format_units(value: int, decimals: int) -> str:
    """Render integer base units as a decimal string without trailing zeros."""
    digits = str(abs(value)).rjust(decimals + 1, "0")
    split = len(digits) - decimals
    whole, fraction = digits[:split], digits[split:].rstrip("0")
    text = f"{whole}.{fraction}" if fraction else whole
    return f"-{text}" if value < 0 else text
