"""
Python client for Polynomial perpetual futures.

The package wraps the Polynomial REST API and orderbook: market data,
account and position queries, post-trade simulation, and EIP-712 signed
market orders.  :class:`PolynomialSDK` is the usual entry point; the
services, signer and unit helpers are exported for callers that need them
individually.
"""

from .config import (  # noqa: F401
    API_ENDPOINT,
    API_ORDERBOOK_ENDPOINT,
    CHAIN_ID,
    DEFAULT_SLIPPAGE_PERCENTAGE,
    NETWORKS,
    RELAYER_ADDRESS,
    NetworkConfig,
    ResolvedConfig,
    SDKConfig,
    resolve_config,
)
from .errors import (  # noqa: F401
    AccountError,
    APIError,
    ConfigurationError,
    ErrorKind,
    MarketError,
    NetworkError,
    OrderError,
    PolynomialError,
    SigningError,
    ValidationError,
    is_polynomial_error,
)
from .models import (  # noqa: F401
    Account,
    AccountSummary,
    MarginInfo,
    Market,
    MarketOrderRequest,
    MarketStats,
    MaxTradeSize,
    Position,
    PostTradeDetails,
    UnsignedOrder,
)
from .sdk import PolynomialSDK  # noqa: F401
from .signer import OrderSigner  # noqa: F401
from .utils import (  # noqa: F401
    acceptable_price,
    basis_points_to_percentage,
    from_base_units,
    percentage_to_basis_points,
    to_base_units,
    to_display_price,
)

__version__ = "0.1.0"
