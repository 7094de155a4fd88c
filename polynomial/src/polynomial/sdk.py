"""
High-level client for Polynomial perpetual futures.

:class:`PolynomialSDK` validates its configuration once, then wires the
domain services to two HTTP clients (REST API and orderbook) that share a
single API-key credential.  Rotating the key with :meth:`update_api_key`
therefore takes effect on both endpoints at once.

The client keeps no state beyond its configuration.  Markets, accounts and
positions are fetched on every call.  When no account id is configured it
is looked up from the API by wallet address whenever an order needs it.

Example::

    async with PolynomialSDK.create(
        api_key="...", session_key="0x...", wallet_address="0x..."
    ) as sdk:
        markets = await sdk.markets.get_markets()
        await sdk.create_order(markets[0].market_id, 10**18)
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError as ModelValidationError

from .clients import ApiKeyProvider, HttpClient
from .config import NetworkConfig, ResolvedConfig, SDKConfig, resolve_config
from .errors import ConfigurationError, MarketError, ValidationError
from .models import AccountSummary, Market, MarketStats, PostTradeDetails
from .secrets_manager import BaseSecretsManager
from .services import Accounts, Markets, Orders, PostTrade
from .utils import (
    acceptable_price,
    is_valid_private_key,
    require_address,
    require_base_units,
    validate_slippage,
)


logger = logging.getLogger(__name__)


def _load_config(config: Union[SDKConfig, Mapping[str, Any], None], overrides: Dict[str, Any]) -> SDKConfig:
    if isinstance(config, SDKConfig) and not overrides:
        return config
    raw: Dict[str, Any] = {}
    if isinstance(config, SDKConfig):
        raw.update(config.model_dump(exclude_unset=True))
    elif config is not None:
        raw.update(config)
    raw.update(overrides)
    try:
        return SDKConfig(**raw)
    except ModelValidationError as exc:
        fields = sorted({str(err["loc"][0]) for err in exc.errors() if err.get("loc")})
        if "api_key" in fields and not raw.get("api_key"):
            message = "API key is required"
        else:
            message = f"Invalid configuration: {', '.join(fields) or exc}"
        raise ConfigurationError(message, {"fields": fields}) from exc


def _fill_price_units(details: PostTradeDetails, market_id: str) -> int:
    value = details.fill_price
    if value is None or not value.isdigit():
        raise MarketError(
            "Simulation returned no usable fill price",
            {"marketId": market_id, "fillPrice": value},
        )
    return int(value)


class PolynomialSDK:
    """Entry point bundling markets, accounts, post-trade and order services."""

    def __init__(self, config: Union[SDKConfig, Mapping[str, Any], None] = None, **overrides: Any) -> None:
        self.config: ResolvedConfig = resolve_config(_load_config(config, overrides))
        network = self.config.network

        self.auth = ApiKeyProvider(self.config.api_key)
        self.api = HttpClient(
            network.api_endpoint,
            self.auth,
            timeout=self.config.request_timeout,
            read_attempts=self.config.read_attempts,
        )
        self.orderbook = HttpClient(network.orderbook_endpoint, self.auth, timeout=self.config.request_timeout)
        # Lookups inside the order path are never retried
        self.pricing_api = (
            self.api
            if self.config.read_attempts == 1
            else HttpClient(network.api_endpoint, self.auth, timeout=self.config.request_timeout)
        )

        self.markets = Markets(self.api, network.chain_id)
        self.accounts = Accounts(self.api, network.chain_id)
        self.post_trade = PostTrade(self.api, network.chain_id)
        self.orders = Orders(
            self.orderbook,
            Markets(self.pricing_api, network.chain_id),
            network,
            session_key=self.config.session_key,
            wallet_address=self.config.wallet_address,
            account_id_resolver=self.resolve_account_id,
            default_slippage=self.config.default_slippage,
        )
        logger.info(
            "Polynomial client ready chain=%s api=%s orderbook=%s",
            network.chain_id,
            network.api_endpoint,
            network.orderbook_endpoint,
        )

    @classmethod
    def create(cls, config: Union[SDKConfig, Mapping[str, Any], None] = None, **overrides: Any) -> "PolynomialSDK":
        return cls(config, **overrides)

    @classmethod
    def from_env(cls, secrets: Optional[BaseSecretsManager] = None, **overrides: Any) -> "PolynomialSDK":
        """Build a client from ``POLYNOMIAL_*`` environment variables.

        Keyword overrides win over the environment.
        """
        return cls(SDKConfig.from_env(secrets), **overrides)

    def get_config(self) -> Dict[str, Any]:
        """Effective configuration with the API key and session key redacted."""
        return self.config.redacted()

    def get_network_config(self) -> NetworkConfig:
        return self.config.network

    def update_api_key(self, api_key: str) -> None:
        """Replace the API key used by every subsequent request."""
        self.auth.update_api_key(api_key)
        self.config = self.config.model_copy(update={"api_key": api_key})
        logger.info("API key updated")

    @property
    def chain_id(self) -> int:
        return self.config.chain_id

    def _require_wallet(self, wallet_address: Optional[str] = None) -> str:
        wallet = wallet_address or self.config.wallet_address
        if not wallet:
            raise ValidationError("Wallet address is required", {"operation": "resolve_wallet"})
        return require_address(wallet)

    async def resolve_account_id(self) -> str:
        """Account id of the configured wallet.

        A configured ``account_id`` is returned as-is; otherwise it is
        fetched from the API on every call.
        """
        if self.config.account_id:
            return self.config.account_id
        wallet = self._require_wallet()
        account = await self.accounts.get_account(wallet)
        if account is None:
            raise ValidationError(
                "No account found for wallet address", {"walletAddress": wallet, "chainId": self.chain_id}
            )
        return account.account_id

    async def create_order(self, market_id: str, size: int, **options: Any) -> Any:
        """Create a market order using the configured session.

        Options are those of :meth:`Orders.create_market_order`: ``is_long``,
        ``acceptable_price``, ``reduce_only``, ``slippage_percent`` and
        per-call ``account_id``/``wallet_address``/``session_key``.
        """
        return await self.orders.create_market_order(market_id, size, **options)

    async def create_market_order_with_simulation(
        self,
        symbol: str,
        size: int,
        is_long: bool = True,
        max_slippage: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Simulate a trade, then submit it bounded by the simulated fill price.

        Returns ``{"simulation": PostTradeDetails, "order_result": <response>}``.
        Raises :class:`ValidationError` when the market does not exist or
        the venue reports the trade as infeasible; nothing is submitted in
        either case.
        """
        session_key = self.config.session_key
        if not session_key or not is_valid_private_key(session_key):
            raise ValidationError(
                "A valid session key is required for order operations", {"sessionKey": session_key}
            )
        self._require_wallet()
        size = require_base_units(size, "size", allow_zero=False)
        slippage = self.config.default_slippage if max_slippage is None else validate_slippage(max_slippage)

        account_id = await self.resolve_account_id()
        markets = self.orders.markets
        market = await markets.get_market_by_symbol(symbol)
        if market is None:
            raise ValidationError(f"Market not found: {symbol}", {"symbol": symbol})

        size_delta = size if is_long else -size
        simulation = await markets.simulate_trade(account_id, market.market_id, size_delta)
        if not simulation.feasible:
            reason = simulation.error_msg or "Unknown reason"
            raise ValidationError(
                f"Trade not feasible: {reason}",
                {"symbol": symbol, "marketId": market.market_id, "sizeDelta": str(size_delta)},
            )

        price = acceptable_price(_fill_price_units(simulation, market.market_id), slippage, is_long)
        logger.info(
            "Simulation feasible market=%s fill=%s acceptable=%s", market.market_id, simulation.fill_price, price
        )
        response = await self.orders.create_market_order(
            market.market_id,
            size,
            is_long=is_long,
            acceptable_price=price,
            account_id=account_id,
        )
        return {"simulation": simulation, "order_result": response}

    async def get_post_trade_details(self, market_id: str, size_delta: str) -> PostTradeDetails:
        """Post-trade details for the configured account."""
        return await self.post_trade.get_post_trade_details_for_account(
            market_id, size_delta, self.resolve_account_id
        )

    async def get_post_trade_details_limit(
        self, market_id: str, size_delta: str, limit_price: str
    ) -> PostTradeDetails:
        return await self.post_trade.get_post_trade_details_limit_for_account(
            market_id, size_delta, limit_price, self.resolve_account_id
        )

    async def get_account_summary(self, wallet_address: Optional[str] = None) -> AccountSummary:
        return await self.accounts.get_account_summary(self._require_wallet(wallet_address))

    async def get_market_data(self, symbol: Optional[str] = None) -> Union[List[Market], Optional[MarketStats]]:
        """Stats for ``symbol`` (``None`` if unknown), or every market when omitted."""
        if symbol is None:
            return await self.markets.get_markets()
        market = await self.markets.get_market_by_symbol(symbol)
        if market is None:
            return None
        return MarketStats.model_validate(market.model_dump(by_alias=True))

    async def close(self) -> None:
        await self.api.close()
        await self.orderbook.close()
        if self.pricing_api is not self.api:
            await self.pricing_api.close()

    async def __aenter__(self) -> "PolynomialSDK":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
