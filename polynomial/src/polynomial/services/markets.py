"""
Market data queries.

Markets are fetched fresh on every call; nothing is cached.  Lookups by id
or symbol return ``None`` when the market does not exist.  Transport and
API failures, and responses that do not parse, surface as
:class:`~polynomial.errors.MarketError`.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from pydantic import ValidationError as ModelValidationError

from ..clients.http_client import HttpClient
from ..errors import MarketError, PolynomialError
from ..models import Market, MarketStats, PostTradeDetails


logger = logging.getLogger(__name__)


def select_chain_markets(response: Any, chain_id: int) -> List[dict]:
    """Extract the raw market list for ``chain_id`` from a ``/markets`` response.

    The endpoint answers either with one ``{"chainId", "markets"}`` object or
    with a list of them, one per chain.
    """
    entries = response if isinstance(response, list) else [response]
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        entry_chain = entry.get("chainId")
        if entry_chain is not None and str(entry_chain) != str(chain_id):
            continue
        markets = entry.get("markets")
        if isinstance(markets, list):
            return markets
    raise MarketError(f"No market data found for chain ID {chain_id}", {"chainId": chain_id})


class Markets:
    def __init__(self, http: HttpClient, chain_id: int) -> None:
        self.http = http
        self.chain_id = chain_id

    async def get_markets(
        self, symbol: Optional[str] = None, market_id: Optional[str] = None
    ) -> List[Market]:
        """All markets on the configured chain, optionally filtered."""
        try:
            response = await self.http.get("markets", params={"chainId": self.chain_id})
            markets = [Market.model_validate(raw) for raw in select_chain_markets(response, self.chain_id)]
        except MarketError:
            raise
        except (PolynomialError, ModelValidationError) as exc:
            raise MarketError(
                f"Failed to fetch markets: {exc}",
                {"chainId": self.chain_id, "symbol": symbol, "marketId": market_id},
            ) from exc

        if symbol:
            markets = [m for m in markets if m.symbol.lower() == symbol.lower()]
        if market_id is not None:
            markets = [m for m in markets if m.market_id == str(market_id)]
        return markets

    async def get_market_by_id(self, market_id: str) -> Optional[Market]:
        markets = await self.get_markets(market_id=market_id)
        return markets[0] if markets else None

    async def get_market_by_symbol(self, symbol: str) -> Optional[Market]:
        markets = await self.get_markets(symbol=symbol)
        return markets[0] if markets else None

    async def get_market_stats(self, market_id: str) -> MarketStats:
        market = await self.get_market_by_id(market_id)
        if market is None:
            raise MarketError(f"Market not found: {market_id}", {"marketId": market_id})
        return MarketStats.model_validate(market.model_dump(by_alias=True))

    async def get_available_symbols(self) -> List[str]:
        return [market.symbol for market in await self.get_markets()]

    async def simulate_trade(self, account_id: str, market_id: str, size_delta: int) -> PostTradeDetails:
        """Simulate a market order of ``size_delta`` base units (negative for short)."""
        payload = {"accountId": account_id, "marketId": market_id, "sizeDelta": str(size_delta)}
        try:
            response = await self.http.post(
                "post-trade-details", payload, params={"chainId": self.chain_id}
            )
            return PostTradeDetails.model_validate(response)
        except (PolynomialError, ModelValidationError) as exc:
            raise MarketError(
                f"Failed to simulate trade: {exc}", {**payload, "chainId": self.chain_id}
            ) from exc
