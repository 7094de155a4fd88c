"""Tests for account, position and margin queries."""

from __future__ import annotations

import pytest

from polynomial.errors import AccountError, NetworkError, ValidationError
from polynomial.services.accounts import Accounts
from tests.helpers.fake_transport import FakeHttpClient


ACCOUNT = {
    "owner": "0x4D387f5c0Ec87e47b9Df9b8C97B89D2977431b27",
    "superOwner": "0x4D387f5c0Ec87e47b9Df9b8C97B89D2977431b27",
    "accountId": "4242",
    "chainId": 8008,
}


def _accounts(http: FakeHttpClient) -> Accounts:
    return Accounts(http, 8008)


@pytest.mark.asyncio
async def test_invalid_address_fails_before_any_request() -> None:
    http = FakeHttpClient()
    accounts = _accounts(http)
    for call in (
        accounts.get_account,
        accounts.get_all_accounts_for_wallet,
        accounts.account_exists,
        accounts.get_account_summary,
        accounts.get_margin_info,
    ):
        with pytest.raises(ValidationError) as excinfo:
            await call("invalid-address")
        assert excinfo.value.message == "Invalid wallet address format"
    with pytest.raises(ValidationError):
        await accounts.get_max_trade_size("invalid-address", "100")
    assert http.calls == []


@pytest.mark.asyncio
async def test_get_account_filters_to_chain(wallet_address: str) -> None:
    other_chain = {**ACCOUNT, "accountId": "1", "chainId": 1}
    http = FakeHttpClient().on("GET", "accounts", [other_chain, ACCOUNT])
    account = await _accounts(http).get_account(wallet_address)
    assert account is not None
    assert account.account_id == "4242"
    _, _, _, params = http.calls[0]
    assert params == {"owner": wallet_address, "ownershipType": "SuperOwner", "chainIds": 8008}


@pytest.mark.asyncio
async def test_missing_account_is_none(wallet_address: str) -> None:
    http = FakeHttpClient().on("GET", "accounts", [])
    accounts = _accounts(http)
    assert await accounts.get_account(wallet_address) is None
    assert await accounts.account_exists(wallet_address) is False
    assert await accounts.get_max_trade_size(wallet_address, "100") is None


@pytest.mark.asyncio
async def test_transport_failure_becomes_account_error(wallet_address: str) -> None:
    http = FakeHttpClient().on("GET", "accounts", NetworkError("Network error"))
    with pytest.raises(AccountError) as excinfo:
        await _accounts(http).get_account(wallet_address)
    assert excinfo.value.context["walletAddress"] == wallet_address
    assert isinstance(excinfo.value.__cause__, NetworkError)


@pytest.mark.asyncio
async def test_account_summary_totals(wallet_address: str) -> None:
    positions = [
        {"accountId": "4242", "marketId": "100", "size": "1000", "unrealisedPnlUsd": "10.5", "totalRealisedPnlUsd": "1"},
        {"accountId": "4242", "marketId": "200", "size": "-5", "unrealisedPnlUsd": "-2.25"},
    ]
    http = (
        FakeHttpClient()
        .on("GET", "accounts", [ACCOUNT])
        .on("GET", "positions/v2", {"positions": positions})
    )
    summary = await _accounts(http).get_account_summary(wallet_address)
    assert summary.total_positions == 2
    assert summary.total_unrealized_pnl == "8.25"
    assert summary.total_realized_pnl == "1.00"
    assert summary.positions[0].is_long and not summary.positions[1].is_long
    assert http.calls[1][3] == {"accountId": "4242", "chainId": 8008}


@pytest.mark.asyncio
async def test_account_summary_without_account(wallet_address: str) -> None:
    http = FakeHttpClient().on("GET", "accounts", [])
    with pytest.raises(AccountError):
        await _accounts(http).get_account_summary(wallet_address)


@pytest.mark.asyncio
async def test_position_by_market() -> None:
    http = FakeHttpClient().on(
        "GET", "positions/v2", {"positions": [{"accountId": "4242", "marketId": 100, "size": "7"}]}
    )
    accounts = _accounts(http)
    position = await accounts.get_position_by_market("4242", "100")
    assert position is not None and position.size == "7"
    assert await accounts.get_position_by_market("4242", "300") is None


@pytest.mark.asyncio
async def test_margin_info(wallet_address: str) -> None:
    http = FakeHttpClient().on(
        "GET",
        "margins/all-margins",
        [{"chainId": 8008, "availableMargin": "1000", "requiredMaintenanceMargin": "50"}],
    )
    margin = await _accounts(http).get_margin_info(wallet_address)
    assert margin is not None
    assert margin.available_margin == "1000"

    http.on("GET", "margins/all-margins", [])
    assert await _accounts(http).get_margin_info(wallet_address) is None


@pytest.mark.asyncio
async def test_max_trade_size(wallet_address: str) -> None:
    http = (
        FakeHttpClient()
        .on("GET", "accounts", [ACCOUNT])
        .on(
            "POST",
            "margins/max-possible-trade-sizes",
            {"marketId": "100", "maxPossibleTradeSizeForLong": "5", "maxPossibleTradeSizeForShort": "4"},
        )
    )
    sizes = await _accounts(http).get_max_trade_size(wallet_address, "100")
    assert sizes is not None
    assert sizes.max_possible_trade_size_for_long == "5"
    _, _, payload, _ = http.calls[1]
    assert payload == {"accountId": "4242", "chainId": 8008, "marketId": "100", "addedCollaterals": []}
