"""
Post-trade details: what an order would do to the account before it is sent.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from pydantic import ValidationError as ModelValidationError

from ..clients.http_client import HttpClient
from ..errors import OrderError, PolynomialError
from ..models import PostTradeDetails


logger = logging.getLogger(__name__)


class PostTrade:
    def __init__(self, http: HttpClient, chain_id: int) -> None:
        self.http = http
        self.chain_id = chain_id

    async def _fetch(self, payload: dict, failure: str) -> PostTradeDetails:
        try:
            response = await self.http.post(
                "post-trade-details", payload, params={"chainId": self.chain_id}
            )
            return PostTradeDetails.model_validate(response)
        except (PolynomialError, ModelValidationError) as exc:
            raise OrderError(f"{failure}: {exc}", {"params": payload, "chainId": self.chain_id}) from exc

    async def get_post_trade_details(
        self, account_id: str, market_id: str, size_delta: str
    ) -> PostTradeDetails:
        """Details for a market order of ``size_delta`` base units."""
        payload = {"accountId": account_id, "marketId": market_id, "sizeDelta": str(size_delta)}
        return await self._fetch(payload, "Failed to get post-trade details")

    async def get_post_trade_details_limit(
        self, account_id: str, market_id: str, size_delta: str, limit_price: str
    ) -> PostTradeDetails:
        """Details for a limit order at ``limit_price`` (base units)."""
        payload = {
            "accountId": account_id,
            "marketId": market_id,
            "sizeDelta": str(size_delta),
            "limitPrice": str(limit_price),
        }
        return await self._fetch(payload, "Failed to get post-trade details for limit order")

    async def is_trade_feasible(self, account_id: str, market_id: str, size_delta: str) -> bool:
        """``True`` when the venue reports the trade as feasible.

        Any failure, including transport errors, counts as not feasible.
        """
        try:
            details = await self.get_post_trade_details(account_id, market_id, size_delta)
        except PolynomialError as exc:
            logger.debug("Feasibility check failed for market %s: %s", market_id, exc)
            return False
        return details.feasible

    async def is_limit_trade_feasible(
        self, account_id: str, market_id: str, size_delta: str, limit_price: str
    ) -> bool:
        try:
            details = await self.get_post_trade_details_limit(
                account_id, market_id, size_delta, limit_price
            )
        except PolynomialError as exc:
            logger.debug("Limit feasibility check failed for market %s: %s", market_id, exc)
            return False
        return details.feasible

    async def get_post_trade_details_for_account(
        self, market_id: str, size_delta: str, account_id_resolver: Callable[[], Awaitable[str]]
    ) -> PostTradeDetails:
        """:meth:`get_post_trade_details` for the account ``account_id_resolver`` yields."""
        account_id = await account_id_resolver()
        return await self.get_post_trade_details(account_id, market_id, size_delta)

    async def get_post_trade_details_limit_for_account(
        self,
        market_id: str,
        size_delta: str,
        limit_price: str,
        account_id_resolver: Callable[[], Awaitable[str]],
    ) -> PostTradeDetails:
        account_id = await account_id_resolver()
        return await self.get_post_trade_details_limit(account_id, market_id, size_delta, limit_price)
