"""
Domain models for venue entities and order payloads using Pydantic.

Field names are snake_case in Python and camelCase on the wire; every model
accepts either when parsing and dumps camelCase with ``by_alias=True``.
Fields the venue adds that are not declared here are kept (``extra="allow"``)
so read-only models never drop data.

Order models carry every numeric field as a base-10 string.  Nothing that
reaches the signer is ever a float.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel


class VenueModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


def _float_to_str(value: Any) -> Any:
    # Decimal(float) would keep the binary expansion; go through repr instead
    return str(value) if isinstance(value, float) else value


def _number_to_str(value: Any) -> Any:
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return str(value)
    return value


WireDecimal = Annotated[Decimal, BeforeValidator(_float_to_str)]
WireStr = Annotated[str, BeforeValidator(_number_to_str)]


class Market(VenueModel):
    market_id: WireStr
    symbol: str
    price: WireDecimal
    mark_price: Optional[WireStr] = None
    skew: Optional[WireStr] = None
    current_oi: Optional[WireStr] = Field(None, alias="currentOI")
    long_oi: Optional[WireStr] = Field(None, alias="longOI")
    short_oi: Optional[WireStr] = Field(None, alias="shortOI")
    current_funding_rate: Optional[WireStr] = None
    current_funding_velocity: Optional[WireStr] = None
    maker_fee_ratio: Optional[WireStr] = None
    taker_fee_ratio: Optional[WireStr] = None
    max_market_size: Optional[WireStr] = None
    trades_count_24h: Optional[int] = Field(None, alias="tradesCount24h")
    trades_volume_24h: Optional[WireDecimal] = Field(None, alias="tradesVolume24h")
    price_24hr_ago: Optional[WireDecimal] = Field(None, alias="price24HrAgo")
    available_liquidity_long: Optional[WireStr] = None
    available_liquidity_short: Optional[WireStr] = None


class MarketStats(VenueModel):
    """Headline statistics of one market."""

    model_config = ConfigDict(extra="ignore")

    market_id: WireStr
    symbol: str
    price: WireDecimal
    mark_price: Optional[WireStr] = None
    current_oi: Optional[WireStr] = Field(None, alias="currentOI")
    current_funding_rate: Optional[WireStr] = None
    trades_count_24h: Optional[int] = Field(None, alias="tradesCount24h")
    trades_volume_24h: Optional[WireDecimal] = Field(None, alias="tradesVolume24h")
    price_24hr_ago: Optional[WireDecimal] = Field(None, alias="price24HrAgo")
    available_liquidity_long: Optional[WireStr] = None
    available_liquidity_short: Optional[WireStr] = None


class Account(VenueModel):
    owner: str
    super_owner: str
    account_id: WireStr
    chain_id: int


class Position(VenueModel):
    account_id: WireStr
    market_id: WireStr
    chain_id: Optional[int] = None
    size: WireStr
    order_type: Optional[WireStr] = None
    avg_entry_price: Optional[WireStr] = None
    latest_interaction_price: Optional[WireStr] = None
    liquidation_price: Optional[WireStr] = None
    total_realised_pnl_usd: Optional[WireStr] = None
    unrealised_pnl_usd: Optional[WireStr] = None
    total_realised_funding_usd: Optional[WireStr] = None
    unrealised_funding_usd: Optional[WireStr] = None
    total_volume_usd: Optional[WireStr] = None
    entry_timestamp: Optional[int] = None
    tpsl: Any = None

    @property
    def is_long(self) -> bool:
        return not self.size.lstrip().startswith("-")


class AccountSummary(VenueModel):
    account: Account
    positions: List[Position]
    total_positions: int
    total_unrealized_pnl: str
    total_realized_pnl: str


class MarginInfo(VenueModel):
    available_margin: WireStr
    required_maintenance_margin: WireStr


class MaxTradeSize(VenueModel):
    market_id: WireStr
    max_possible_trade_size_for_long: WireStr
    max_possible_trade_size_for_short: WireStr


class PostTradeDetails(VenueModel):
    """Result of simulating a trade against the current account state."""

    feasible: bool
    fill_price: Optional[WireStr] = None
    total_fees: Optional[WireStr] = None
    new_health_factor: Optional[float] = None
    settlement_reward: Optional[WireStr] = None
    amm_fees: Optional[WireStr] = None
    price_impact: Optional[WireStr] = None
    new_margin_usage: Optional[float] = None
    is_price_impact_profitable: Optional[bool] = None
    liquidation_price: Optional[WireStr] = None
    error_msg: Optional[WireStr] = None


class UnsignedOrder(VenueModel):
    """A market order before signing.

    ``eoa`` travels with the order for context but is neither signed nor
    submitted.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    market_id: str
    account_id: str
    size_delta: str
    settlement_strategy_id: str = "0"
    referrer_or_relayer: str
    allow_aggregation: bool = True
    allow_partial_matching: bool = True
    reduce_only: bool = False
    acceptable_price: str
    tracking_code: str = "0x" + "00" * 32
    expiration: str
    nonce: str
    chain_id: int
    eoa: str


class MarketOrderRequest(VenueModel):
    """Signed market order body for ``POST market_order/{marketId}``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., repr=False, description="EIP-712 signature of the order")
    market_id: str
    account_id: str
    size_delta: str
    settlement_strategy_id: str
    referrer_or_relayer: str
    allow_aggregation: bool
    allow_partial_matching: bool
    reduce_only: bool
    acceptable_price: str
    tracking_code: str
    expiration: str
    nonce: str
    chain_id: int

    @classmethod
    def from_unsigned(cls, order: UnsignedOrder, signature: str) -> "MarketOrderRequest":
        return cls(id=signature, **order.model_dump(exclude={"eoa"}))
