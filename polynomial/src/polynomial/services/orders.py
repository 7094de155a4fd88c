"""
Market order construction, signing and submission.

An order goes through one pass with no retries:

1. Resolve the trading context: session key, wallet address and account id
   come from the call or from the session the client was built with.  The
   key and address are validated here, before any request is made.
2. Resolve the acceptable price.  A caller-supplied price is used verbatim;
   otherwise the market's reference price is fetched and widened against
   the trader by the slippage tolerance.
3. Assemble the :class:`~polynomial.models.UnsignedOrder`: signed size
   delta, relayer, one-week expiry and a millisecond nonce.
4. Sign it (EIP-712) and put the signature in the order's ``id`` field.
5. ``POST market_order/{marketId}`` on the orderbook and return the decoded
   response untouched.

Each stage fails with its own error kind: ``ValidationError`` for bad input
or an unknown market, ``MarketError``/``AccountError`` when a lookup fails,
``SigningError`` when signing fails and ``OrderError`` when submission
fails.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional, Tuple

from ..clients.http_client import HttpClient
from ..config import DEFAULT_SLIPPAGE_PERCENTAGE, ZERO_HEX_32, NetworkConfig
from ..errors import (
    AccountError,
    MarketError,
    OrderError,
    PolynomialError,
    SigningError,
    ValidationError,
)
from ..models import MarketOrderRequest, UnsignedOrder
from ..signer import OrderSigner
from ..utils import (
    acceptable_price as compute_acceptable_price,
    generate_nonce,
    is_valid_private_key,
    require_address,
    require_base_units,
    to_base_units,
    validate_slippage,
    week_from_now_timestamp,
)
from .markets import Markets


logger = logging.getLogger(__name__)

SETTLEMENT_STRATEGY_ID = "0"

AccountIdResolver = Callable[[], Awaitable[str]]

# Errors that already name the failing stage and pass through unchanged.
_CLASSIFIED = (ValidationError, SigningError, OrderError, MarketError, AccountError)


class Orders:
    """Builds, signs and submits market orders."""

    def __init__(
        self,
        orderbook: HttpClient,
        markets: Markets,
        network: NetworkConfig,
        *,
        session_key: Optional[str] = None,
        wallet_address: Optional[str] = None,
        account_id_resolver: Optional[AccountIdResolver] = None,
        default_slippage: int = DEFAULT_SLIPPAGE_PERCENTAGE,
    ) -> None:
        self.orderbook = orderbook
        self.markets = markets
        self.network = network
        self.signer = OrderSigner(network.perp_futures)
        self._session_key = session_key
        self.wallet_address = wallet_address
        self._account_id_resolver = account_id_resolver
        self.default_slippage = validate_slippage(default_slippage)

    async def _resolve_context(
        self,
        session_key: Optional[str],
        wallet_address: Optional[str],
        account_id: Optional[str],
    ) -> Tuple[str, str, str]:
        session_key = session_key or self._session_key
        wallet_address = wallet_address or self.wallet_address
        if not session_key:
            raise ValidationError(
                "Session key is required for order operations", {"operation": "create_market_order"}
            )
        if not is_valid_private_key(session_key):
            raise ValidationError("Invalid session key format", {"sessionKey": session_key})
        if not wallet_address:
            raise ValidationError(
                "Wallet address is required for order operations", {"operation": "create_market_order"}
            )
        require_address(wallet_address)

        if account_id is None:
            if self._account_id_resolver is None:
                raise ValidationError(
                    "Account id is required for order operations", {"walletAddress": wallet_address}
                )
            account_id = await self._account_id_resolver()
        return session_key, wallet_address, str(account_id)

    async def get_reference_price(self, market_id: str) -> int:
        """Current market price of ``market_id`` in base units."""
        market = await self.markets.get_market_by_id(market_id)
        if market is None:
            raise ValidationError(f"Market not found: {market_id}", {"marketId": market_id})
        return to_base_units(market.price)

    async def resolve_acceptable_price(
        self,
        market_id: str,
        is_long: bool,
        acceptable_price: Optional[int] = None,
        slippage_percent: Optional[int] = None,
    ) -> int:
        if acceptable_price is not None:
            return require_base_units(acceptable_price, "acceptablePrice", allow_zero=True)
        slippage = self.default_slippage if slippage_percent is None else validate_slippage(slippage_percent)
        reference = await self.get_reference_price(market_id)
        return compute_acceptable_price(reference, slippage, is_long)

    def calculate_acceptable_price_with_slippage(
        self, market_price: int, slippage_percent: int, is_long: bool
    ) -> int:
        return compute_acceptable_price(market_price, slippage_percent, is_long)

    def build_unsigned_order(
        self,
        *,
        market_id: str,
        account_id: str,
        size: int,
        is_long: bool,
        acceptable_price: int,
        wallet_address: str,
        reduce_only: bool = False,
    ) -> UnsignedOrder:
        size = require_base_units(size, "size", allow_zero=False)
        return UnsignedOrder(
            market_id=str(market_id),
            account_id=str(account_id),
            size_delta=str(size) if is_long else f"-{size}",
            settlement_strategy_id=SETTLEMENT_STRATEGY_ID,
            referrer_or_relayer=self.network.relayer_address,
            allow_aggregation=True,
            allow_partial_matching=True,
            reduce_only=reduce_only,
            acceptable_price=str(acceptable_price),
            tracking_code=ZERO_HEX_32,
            expiration=str(week_from_now_timestamp()),
            nonce=generate_nonce(),
            chain_id=self.network.chain_id,
            eoa=wallet_address,
        )

    async def build_market_order(
        self,
        market_id: str,
        size: int,
        *,
        is_long: bool = True,
        acceptable_price: Optional[int] = None,
        reduce_only: bool = False,
        slippage_percent: Optional[int] = None,
        account_id: Optional[str] = None,
        wallet_address: Optional[str] = None,
        session_key: Optional[str] = None,
    ) -> MarketOrderRequest:
        """Build and sign a market order without submitting it."""
        size = require_base_units(size, "size", allow_zero=False)
        if slippage_percent is not None:
            validate_slippage(slippage_percent)
        if acceptable_price is not None:
            require_base_units(acceptable_price, "acceptablePrice", allow_zero=True)
        session_key, wallet_address, account_id = await self._resolve_context(
            session_key, wallet_address, account_id
        )
        price = await self.resolve_acceptable_price(market_id, is_long, acceptable_price, slippage_percent)
        unsigned = self.build_unsigned_order(
            market_id=market_id,
            account_id=account_id,
            size=size,
            is_long=is_long,
            acceptable_price=price,
            wallet_address=wallet_address,
            reduce_only=reduce_only,
        )
        signature = self.signer.sign(unsigned, session_key)
        return MarketOrderRequest.from_unsigned(unsigned, signature)

    async def submit_market_order(self, order: MarketOrderRequest) -> Any:
        """Send a signed order and return the decoded response as-is."""
        try:
            response = await self.orderbook.post(f"market_order/{order.market_id}", order.to_wire())
        except PolynomialError as exc:
            logger.error("Market order submission failed market=%s nonce=%s: %s", order.market_id, order.nonce, exc)
            raise OrderError(
                f"Failed to submit market order: {exc}",
                {"marketId": order.market_id, "orderData": {**order.to_wire(), "id": "REDACTED"}},
            ) from exc
        logger.info("Submitted market order market=%s nonce=%s", order.market_id, order.nonce)
        return response

    async def create_market_order(
        self,
        market_id: str,
        size: int,
        *,
        is_long: bool = True,
        acceptable_price: Optional[int] = None,
        reduce_only: bool = False,
        slippage_percent: Optional[int] = None,
        account_id: Optional[str] = None,
        wallet_address: Optional[str] = None,
        session_key: Optional[str] = None,
    ) -> Any:
        """Build, sign and submit a market order.

        :param size: order magnitude in base units; direction comes from ``is_long``
        :param acceptable_price: worst execution price in base units; fetched
            and derived from ``slippage_percent`` when omitted
        """
        logger.info(
            "Creating market order market=%s side=%s size=%s reduce_only=%s",
            market_id,
            "long" if is_long else "short",
            size,
            reduce_only,
        )
        try:
            order = await self.build_market_order(
                market_id,
                size,
                is_long=is_long,
                acceptable_price=acceptable_price,
                reduce_only=reduce_only,
                slippage_percent=slippage_percent,
                account_id=account_id,
                wallet_address=wallet_address,
                session_key=session_key,
            )
            return await self.submit_market_order(order)
        except _CLASSIFIED:
            raise
        except PolynomialError as exc:
            raise OrderError(
                f"Failed to create market order: {exc}",
                {
                    "marketId": market_id,
                    "accountId": account_id,
                    "size": str(size),
                    "isLong": is_long,
                    "walletAddress": wallet_address or self.wallet_address,
                },
            ) from exc

    async def create_order(self, market_id: str, size: int, **options: Any) -> Any:
        return await self.create_market_order(market_id, size, **options)

    async def create_long_order(
        self,
        market_id: str,
        size: int,
        acceptable_price: Optional[int] = None,
        reduce_only: bool = False,
        **options: Any,
    ) -> Any:
        return await self.create_market_order(
            market_id, size, is_long=True, acceptable_price=acceptable_price, reduce_only=reduce_only, **options
        )

    async def create_short_order(
        self,
        market_id: str,
        size: int,
        acceptable_price: Optional[int] = None,
        reduce_only: bool = False,
        **options: Any,
    ) -> Any:
        return await self.create_market_order(
            market_id, size, is_long=False, acceptable_price=acceptable_price, reduce_only=reduce_only, **options
        )
