"""
Client configuration and the network registry.

Two configuration types exist.  :class:`SDKConfig` is the raw input a caller
builds (every field optional except the API key).  :class:`ResolvedConfig`
is the validated, defaulted form the client actually runs on; obtain one
only through :func:`resolve_config`, which is where missing or malformed
values are rejected.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from .errors import ConfigurationError, ValidationError, redact
from .secrets_manager import BaseSecretsManager, get_default_secrets_manager
from .utils import DECIMALS, is_valid_address, validate_slippage


logger = logging.getLogger(__name__)


API_ENDPOINT = "https://perps-api-mainnet.polynomial.finance"
API_ORDERBOOK_ENDPOINT = "https://orderbook-mainnet.polynomial.finance/api"
CHAIN_ID = 8008
RELAYER_ADDRESS = "0x4D387f5c0Ec87e47b9Df9b8C97B89D2977431b27"
ZERO_HEX_32 = "0x" + "00" * 32
DEFAULT_SLIPPAGE_PERCENTAGE = 10

__all__ = [
    "API_ENDPOINT",
    "API_ORDERBOOK_ENDPOINT",
    "CHAIN_ID",
    "DECIMALS",
    "DEFAULT_SLIPPAGE_PERCENTAGE",
    "NETWORKS",
    "NetworkConfig",
    "PerpFuturesDomain",
    "RELAYER_ADDRESS",
    "ResolvedConfig",
    "SDKConfig",
    "ZERO_HEX_32",
    "resolve_config",
]


class PerpFuturesDomain(BaseModel):
    """EIP-712 domain descriptor of the perpetual-futures contract."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    address: str


PERP_FUTURES = PerpFuturesDomain(
    name="PolynomialPerpetualFutures",
    version="1",
    address="0xD052Fa8b2af8Ed81C764D5d81cCf2725B2148688",
)


class NetworkConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    chain_id: int
    api_endpoint: str
    orderbook_endpoint: str
    relayer_address: str
    perp_futures: PerpFuturesDomain


NETWORKS: Dict[str, NetworkConfig] = {
    "mainnet": NetworkConfig(
        chain_id=CHAIN_ID,
        api_endpoint=API_ENDPOINT,
        orderbook_endpoint=API_ORDERBOOK_ENDPOINT,
        relayer_address=RELAYER_ADDRESS,
        perp_futures=PERP_FUTURES,
    ),
}


def find_network(chain_id: int) -> Optional[NetworkConfig]:
    for network in NETWORKS.values():
        if network.chain_id == chain_id:
            return network
    return None


class SDKConfig(BaseModel):
    """Raw client configuration as supplied by the caller."""

    api_key: str = Field(..., description="Venue API key sent as x-api-key")
    chain_id: Optional[int] = None
    api_endpoint: Optional[str] = None
    orderbook_endpoint: Optional[str] = None
    relayer_address: Optional[str] = None
    default_slippage: Optional[int] = Field(None, description="Percent, 0-100")
    wallet_address: Optional[str] = None
    session_key: Optional[str] = Field(None, repr=False)
    account_id: Optional[str] = Field(None, description="Venue account id; fetched by wallet when omitted")
    request_timeout: Optional[float] = Field(None, gt=0, description="Seconds per request")
    read_attempts: int = Field(1, ge=1, description="Attempts for GET requests")

    @classmethod
    def from_env(cls, secrets: Optional[BaseSecretsManager] = None) -> "SDKConfig":
        """Build a config from ``POLYNOMIAL_*`` environment variables.

        Each variable may instead be supplied as a file via ``<NAME>_FILE``.
        """
        secrets = secrets or get_default_secrets_manager()
        get = secrets.get_secret
        chain_id = get("POLYNOMIAL_CHAIN_ID")
        slippage = get("POLYNOMIAL_DEFAULT_SLIPPAGE")
        try:
            return cls(
                api_key=get("POLYNOMIAL_API_KEY") or "",
                chain_id=int(chain_id) if chain_id else None,
                api_endpoint=get("POLYNOMIAL_API_ENDPOINT"),
                orderbook_endpoint=get("POLYNOMIAL_ORDERBOOK_ENDPOINT"),
                relayer_address=get("POLYNOMIAL_RELAYER_ADDRESS"),
                default_slippage=int(slippage) if slippage else None,
                wallet_address=get("POLYNOMIAL_WALLET_ADDRESS"),
                session_key=get("POLYNOMIAL_SESSION_KEY"),
                account_id=get("POLYNOMIAL_ACCOUNT_ID"),
            )
        except ValueError as exc:
            raise ConfigurationError(
                f"Invalid numeric setting in environment: {exc}",
                {"chainId": chain_id, "defaultSlippage": slippage},
            ) from exc


class ResolvedConfig(BaseModel):
    """Validated configuration.  Produced by :func:`resolve_config` only."""

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(..., repr=False)
    chain_id: int
    api_endpoint: str
    orderbook_endpoint: str
    relayer_address: str
    default_slippage: int
    wallet_address: Optional[str] = None
    session_key: Optional[str] = Field(None, repr=False)
    account_id: Optional[str] = None
    request_timeout: Optional[float] = None
    read_attempts: int = 1
    network: NetworkConfig

    def redacted(self) -> Dict[str, Any]:
        """Configuration as a plain dict with secrets replaced."""
        data = self.model_dump(by_alias=False)
        data["apiKey"] = data.pop("api_key")
        data["sessionKey"] = data.pop("session_key")
        return redact(data)


def resolve_config(config: SDKConfig) -> ResolvedConfig:
    """Validate ``config`` and fill in defaults.

    Raises :class:`ConfigurationError` when the API key is missing and
    :class:`ValidationError` for a malformed wallet address or slippage.
    """
    if not config.api_key:
        raise ConfigurationError(
            "API key is required",
            {"providedConfig": config.model_dump()},
        )

    if config.wallet_address and not is_valid_address(config.wallet_address):
        raise ValidationError(
            "Invalid wallet address format", {"walletAddress": config.wallet_address}
        )
    if config.relayer_address and not is_valid_address(config.relayer_address):
        raise ValidationError(
            "Invalid relayer address format", {"relayerAddress": config.relayer_address}
        )

    default_slippage = (
        DEFAULT_SLIPPAGE_PERCENTAGE
        if config.default_slippage is None
        else validate_slippage(config.default_slippage)
    )
    chain_id = CHAIN_ID if config.chain_id is None else config.chain_id
    mainnet = NETWORKS["mainnet"]

    network = find_network(chain_id)
    if network is None:
        logger.warning(
            "Chain %s is not a known network; signing with the mainnet domain %s",
            chain_id,
            mainnet.perp_futures.address,
        )
        network = NetworkConfig(
            chain_id=chain_id,
            api_endpoint=mainnet.api_endpoint,
            orderbook_endpoint=mainnet.orderbook_endpoint,
            relayer_address=mainnet.relayer_address,
            perp_futures=mainnet.perp_futures,
        )
    network = network.model_copy(
        update={
            "api_endpoint": config.api_endpoint or network.api_endpoint,
            "orderbook_endpoint": config.orderbook_endpoint or network.orderbook_endpoint,
            "relayer_address": config.relayer_address or network.relayer_address,
        }
    )

    return ResolvedConfig(
        api_key=config.api_key,
        chain_id=chain_id,
        api_endpoint=network.api_endpoint,
        orderbook_endpoint=network.orderbook_endpoint,
        relayer_address=network.relayer_address,
        default_slippage=default_slippage,
        wallet_address=config.wallet_address or None,
        session_key=config.session_key or None,
        account_id=config.account_id or None,
        request_timeout=config.request_timeout,
        read_attempts=config.read_attempts,
        network=network,
    )
