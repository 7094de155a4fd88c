"""Pytest configuration for path setup and shared fixtures.

The test suite imports the client from ``polynomial/src``.  When pytest is
executed without the package installed, neither the repository root nor
the source directory is on ``sys.path``; this file adds both so that
``polynomial`` and ``tests.helpers`` resolve during collection.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "polynomial" / "src"

for path in (str(SRC), str(ROOT)):
    if path not in sys.path:
        sys.path.insert(0, path)


from eth_account import Account  # noqa: E402

from polynomial.config import NETWORKS  # noqa: E402


# Well-known throwaway key; never funded.
SESSION_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"


@pytest.fixture
def session_key() -> str:
    return SESSION_KEY


@pytest.fixture
def wallet_address() -> str:
    return Account.from_key(SESSION_KEY).address


@pytest.fixture
def network():
    return NETWORKS["mainnet"]
