"""Tests for the acceptable-price calculation."""

from __future__ import annotations

import pytest

from polynomial.errors import ValidationError
from polynomial.utils import acceptable_price, validate_slippage


PRICE = 2000 * 10**18


def test_long_tolerates_paying_more() -> None:
    assert acceptable_price(PRICE, 5, True) == 2100 * 10**18


def test_short_tolerates_receiving_less() -> None:
    assert acceptable_price(PRICE, 5, False) == 1900 * 10**18


@pytest.mark.parametrize("is_long", [True, False])
def test_zero_slippage_is_a_no_op(is_long: bool) -> None:
    assert acceptable_price(PRICE, 0, is_long) == PRICE


@pytest.mark.parametrize("slippage", [1, 5, 10, 50, 100])
def test_protection_always_moves_against_the_trader(slippage: int) -> None:
    assert acceptable_price(PRICE, slippage, True) > PRICE
    assert acceptable_price(PRICE, slippage, False) < PRICE


def test_integer_division_truncates() -> None:
    assert acceptable_price(999, 10, True) == 1098
    assert acceptable_price(999, 10, False) == 899


def test_full_slippage_short_floors_at_zero() -> None:
    assert acceptable_price(PRICE, 100, False) == 0


@pytest.mark.parametrize("slippage", [-1, 101, 5.5, "5", True])
def test_out_of_range_slippage_is_rejected(slippage) -> None:
    with pytest.raises(ValidationError):
        acceptable_price(PRICE, slippage, False)
    with pytest.raises(ValidationError):
        validate_slippage(slippage)


@pytest.mark.parametrize("price", [-1, 1.5, "2000", None])
def test_reference_price_must_be_base_units(price) -> None:
    with pytest.raises(ValidationError):
        acceptable_price(price, 5, True)
