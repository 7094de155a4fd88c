"""
Numeric and validation helpers shared by the order pipeline.

Amounts cross the signing boundary as integers in base units (the decimal
amount scaled by ``10 ** decimals``).  Conversions use :class:`decimal.Decimal`
with a context wide enough for 256-bit values so that no step goes through
binary floating point.
"""

from __future__ import annotations

import re
import time
from decimal import ROUND_DOWN, ROUND_HALF_UP, Context, Decimal, InvalidOperation
from typing import Union

from .errors import ValidationError


Numeric = Union[str, int, float, Decimal]

# 78 digits covers uint256; extra headroom for the fractional part.
_CTX = Context(prec=120)

ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")
PRIVATE_KEY_RE = re.compile(r"^0x[a-fA-F0-9]{64}$")

ONE_WEEK_SECONDS = 7 * 24 * 60 * 60

# Precision of prices and sizes on the venue (ETH-like 18 decimals).
DECIMALS = 18


def _to_decimal(value: Numeric) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(
            f"Invalid amount: {value!r}",
            {"value": repr(value), "reason": "invalid_amount"},
        )
    try:
        # floats go through their shortest repr, not their binary expansion
        result = Decimal(str(value).strip()) if isinstance(value, (str, float)) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValidationError(
            f"Invalid amount: {value!r}",
            {"value": repr(value), "reason": "invalid_amount"},
        ) from exc
    if not result.is_finite():
        raise ValidationError(
            f"Invalid amount: {value!r}",
            {"value": repr(value), "reason": "invalid_amount"},
        )
    return result


def to_base_units(value: Numeric, decimals: int = DECIMALS) -> int:
    """Convert a decimal amount to base units, truncating toward zero.

    >>> to_base_units("0.001")
    1000000000000000
    """
    scaled = _CTX.multiply(_to_decimal(value), _CTX.power(Decimal(10), decimals))
    return int(scaled.to_integral_value(rounding=ROUND_DOWN))


def from_base_units(value: Union[int, str], decimals: int = DECIMALS) -> str:
    """Convert base units back to a plain decimal string.

    Trailing zeros are dropped and exponent notation is never used.
    """
    try:
        raw = int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(
            f"Invalid base unit value: {value!r}",
            {"value": repr(value), "reason": "invalid_amount"},
        ) from exc
    result = _CTX.divide(Decimal(raw), _CTX.power(Decimal(10), decimals))
    text = format(result, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    return text


def to_display_price(
    value: Union[int, str],
    decimals: int = DECIMALS,
    display_decimals: int = 4,
) -> str:
    """Render a base-unit price for display.  Lossy; never sign this value."""
    exact = Decimal(from_base_units(value, decimals))
    quantum = Decimal(1).scaleb(-display_decimals)
    return format(exact.quantize(quantum, rounding=ROUND_HALF_UP, context=_CTX), "f")


def calculate_position_value(size: int, price: int, decimals: int = DECIMALS) -> str:
    """USD value of ``size`` units at ``price``, both in base units, to 2 decimals."""
    value = _CTX.multiply(
        Decimal(from_base_units(size, decimals)),
        Decimal(from_base_units(price, decimals)),
    )
    return format(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP, context=_CTX), "f")


def acceptable_price(reference_price: int, slippage_percent: int, is_long: bool) -> int:
    """Worst execution price a trader accepts given a slippage tolerance.

    Longs accept paying up to ``slippage_percent`` more than the reference,
    shorts accept receiving up to ``slippage_percent`` less.  Integer
    division truncates.
    """
    if isinstance(reference_price, bool) or not isinstance(reference_price, int) or reference_price < 0:
        raise ValidationError(
            "Reference price must be a non-negative integer in base units",
            {"referencePrice": repr(reference_price)},
        )
    validate_slippage(slippage_percent)
    multiplier = 100 + slippage_percent if is_long else 100 - slippage_percent
    return reference_price * multiplier // 100


def require_base_units(value: object, field: str, *, allow_zero: bool) -> int:
    """Return ``value`` as a non-negative (or positive) integer in base units.

    Digit strings are accepted; floats, booleans and negatives are not.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer in base units", {field: repr(value)})
    if isinstance(value, str) and value.isdigit():
        value = int(value)
    if not isinstance(value, int) or value < 0 or (value == 0 and not allow_zero):
        expected = "a non-negative" if allow_zero else "a positive"
        raise ValidationError(f"{field} must be {expected} integer in base units", {field: repr(value)})
    return value


def validate_slippage(slippage_percent: int) -> int:
    if (
        isinstance(slippage_percent, bool)
        or not isinstance(slippage_percent, int)
        or not 0 <= slippage_percent <= 100
    ):
        raise ValidationError(
            "Slippage must be an integer percentage between 0 and 100",
            {"slippagePercent": repr(slippage_percent)},
        )
    return slippage_percent


def percentage_to_basis_points(percentage: Numeric) -> int:
    return int((_to_decimal(percentage) * 100).to_integral_value(rounding=ROUND_HALF_UP))


def basis_points_to_percentage(basis_points: int) -> Decimal:
    return Decimal(basis_points) / 100


def is_valid_address(address: object) -> bool:
    return isinstance(address, str) and ADDRESS_RE.fullmatch(address) is not None


def is_valid_private_key(private_key: object) -> bool:
    return isinstance(private_key, str) and PRIVATE_KEY_RE.fullmatch(private_key) is not None


def require_address(address: object, field: str = "walletAddress") -> str:
    """Return ``address`` unchanged or raise :class:`ValidationError`."""
    if not is_valid_address(address):
        raise ValidationError("Invalid wallet address format", {field: address})
    return address  # type: ignore[return-value]


def week_from_now_timestamp() -> int:
    return int(time.time()) + ONE_WEEK_SECONDS


def generate_nonce() -> str:
    # Millisecond resolution: two orders built in the same millisecond collide.
    return str(int(time.time() * 1000))
