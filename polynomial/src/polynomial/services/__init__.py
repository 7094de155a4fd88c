"""
Domain services of the Polynomial client.

Each service wraps one area of the venue API: market data, accounts and
positions, post-trade simulation, and market order submission.
"""

from .accounts import Accounts  # noqa: F401
from .markets import Markets  # noqa: F401
from .orders import Orders  # noqa: F401
from .post_trade import PostTrade  # noqa: F401
