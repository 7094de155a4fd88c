"""Tests for base-unit conversion and the numeric helpers."""

from __future__ import annotations

from decimal import Decimal

import pytest

from polynomial import utils
from polynomial.errors import ValidationError
from polynomial.utils import (
    basis_points_to_percentage,
    calculate_position_value,
    from_base_units,
    is_valid_address,
    is_valid_private_key,
    percentage_to_basis_points,
    to_base_units,
    to_display_price,
)


def test_size_round_trips_through_base_units() -> None:
    units = to_base_units("0.001")
    assert units == 1_000_000_000_000_000
    assert from_base_units(units) == "0.001"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("1", 10**18),
        ("1.5", 15 * 10**17),
        (2, 2 * 10**18),
        (Decimal("2000"), 2000 * 10**18),
        (0.1, 10**17),
        ("-1.5", -15 * 10**17),
    ],
)
def test_to_base_units(value, expected) -> None:
    assert to_base_units(value) == expected


def test_to_base_units_truncates_extra_precision() -> None:
    assert to_base_units("0.0000000000000000019") == 1
    assert to_base_units("1.239", decimals=2) == 123


def test_to_base_units_handles_uint256_scale_without_float() -> None:
    big = "115792089237316195423570985008687907853269984665640564039457.584007913129639935"
    assert to_base_units(big) == 2**256 - 1


@pytest.mark.parametrize("value", ["abc", "", "NaN", "inf", True, None, "1e"])
def test_invalid_amounts_raise_validation_error(value) -> None:
    with pytest.raises(ValidationError) as excinfo:
        to_base_units(value)
    assert excinfo.value.context["reason"] == "invalid_amount"


def test_from_base_units_formats_plain_decimals() -> None:
    assert from_base_units(10**18) == "1"
    assert from_base_units("1") == "0.000000000000000001"
    assert from_base_units(0) == "0"
    assert from_base_units(-25 * 10**16) == "-0.25"
    assert from_base_units(12345, decimals=2) == "123.45"


def test_from_base_units_rejects_non_integers() -> None:
    with pytest.raises(ValidationError):
        from_base_units("1.5")


@pytest.mark.parametrize("value", [0, 1, 10**18 + 7, 2**255, 123456789012345678901234567890])
def test_base_units_are_preserved_through_decimal_strings(value) -> None:
    assert to_base_units(from_base_units(value)) == value


def test_to_display_price_rounds_for_display_only() -> None:
    assert to_display_price(1234567800000000000000) == "1234.5678"
    assert to_display_price(2 * 10**18) == "2.0000"
    assert to_display_price(123456 * 10**13, display_decimals=2) == "1.23"
    assert to_display_price(125 * 10**16, display_decimals=1) == "1.3"


def test_calculate_position_value() -> None:
    assert calculate_position_value(2 * 10**18, 1500 * 10**18) == "3000.00"
    assert calculate_position_value(10**15, 2000 * 10**18) == "2.00"


def test_basis_point_conversions() -> None:
    assert percentage_to_basis_points("1.5") == 150
    assert percentage_to_basis_points(10) == 1000
    assert basis_points_to_percentage(150) == Decimal("1.5")


def test_address_and_key_formats() -> None:
    assert is_valid_address("0x4D387f5c0Ec87e47b9Df9b8C97B89D2977431b27")
    assert not is_valid_address("invalid-address")
    assert not is_valid_address("0x4D387f5c0Ec87e47b9Df9b8C97B89D2977431b27\n")
    assert not is_valid_address(None)
    assert is_valid_private_key("0x" + "ab" * 32)
    assert not is_valid_private_key("ab" * 32)
    assert not is_valid_private_key("0x" + "ab" * 31)
    assert not is_valid_private_key("0x" + "zz" * 32)


def test_expiration_and_nonce_follow_the_clock(monkeypatch) -> None:
    monkeypatch.setattr(utils.time, "time", lambda: 1_700_000_000.25)
    assert utils.week_from_now_timestamp() == 1_700_000_000 + 604_800
    assert utils.generate_nonce() == "1700000000250"
