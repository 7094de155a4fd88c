#!/usr/bin/env python
"""Simple health check utility.

Reports which ``POLYNOMIAL_*`` settings are present (directly or through a
``<NAME>_FILE`` secret) and whether they resolve into a usable client
configuration.  Secret values are never printed.
"""

from __future__ import annotations

import sys

from polynomial.config import SDKConfig, resolve_config
from polynomial.errors import PolynomialError
from polynomial.secrets_manager import get_default_secrets_manager


KEYS = [
    "POLYNOMIAL_API_KEY",
    "POLYNOMIAL_SESSION_KEY",
    "POLYNOMIAL_WALLET_ADDRESS",
    "POLYNOMIAL_ACCOUNT_ID",
    "POLYNOMIAL_CHAIN_ID",
    "POLYNOMIAL_API_ENDPOINT",
    "POLYNOMIAL_ORDERBOOK_ENDPOINT",
    "POLYNOMIAL_RELAYER_ADDRESS",
    "POLYNOMIAL_DEFAULT_SLIPPAGE",
]


def main() -> int:
    secrets = get_default_secrets_manager()
    print("Health Check:")
    for key in KEYS:
        status = "set" if secrets.get_secret(key) else "missing"
        print(f"{key}: {status}")
    try:
        config = resolve_config(SDKConfig.from_env(secrets))
    except PolynomialError as exc:
        print(f"configuration: invalid ({exc.code}: {exc.message})")
        return 1
    print(f"configuration: ok (chain {config.chain_id}, api {config.api_endpoint})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
