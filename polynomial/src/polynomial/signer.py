"""
EIP-712 signing of off-chain market orders.

The venue verifies orders against the ``OffchainOrder`` struct below under
the ``PolynomialPerpetualFutures`` domain.  The field list, order and types
must match the deployed contract bit for bit; any change breaks signature
verification on the receiving end.

Signatures come from :mod:`eth_account`, which uses deterministic (RFC 6979)
nonces, so signing the same order with the same key twice yields the same
signature.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from eth_account import Account
from eth_account.messages import encode_typed_data
from eth_utils import to_checksum_address

from .config import PerpFuturesDomain
from .errors import SigningError, ValidationError
from .models import UnsignedOrder
from .utils import is_valid_private_key


logger = logging.getLogger(__name__)

PRIMARY_TYPE = "OffchainOrder"

EIP712_DOMAIN: List[Dict[str, str]] = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
    {"name": "chainId", "type": "uint256"},
    {"name": "verifyingContract", "type": "address"},
]

OFFCHAIN_ORDER: List[Dict[str, str]] = [
    {"name": "marketId", "type": "uint128"},
    {"name": "accountId", "type": "uint128"},
    {"name": "sizeDelta", "type": "int128"},
    {"name": "settlementStrategyId", "type": "uint128"},
    {"name": "referrerOrRelayer", "type": "address"},
    {"name": "allowAggregation", "type": "bool"},
    {"name": "allowPartialMatching", "type": "bool"},
    {"name": "reduceOnly", "type": "bool"},
    {"name": "acceptablePrice", "type": "uint256"},
    {"name": "trackingCode", "type": "bytes32"},
    {"name": "expiration", "type": "uint256"},
    {"name": "nonce", "type": "uint256"},
]


class OrderSigner:
    """Signs :class:`UnsignedOrder` instances for one contract domain."""

    def __init__(self, domain: PerpFuturesDomain) -> None:
        self.domain = domain

    def build_typed_data(self, order: UnsignedOrder) -> Dict[str, Any]:
        """Return the full EIP-712 structure for ``order``.

        ``eoa`` is not part of the struct.  ``chainId`` is bound through the
        domain rather than the message.
        """
        message = {
            "marketId": int(order.market_id),
            "accountId": int(order.account_id),
            "sizeDelta": int(order.size_delta),
            "settlementStrategyId": int(order.settlement_strategy_id),
            "referrerOrRelayer": to_checksum_address(order.referrer_or_relayer),
            "allowAggregation": order.allow_aggregation,
            "allowPartialMatching": order.allow_partial_matching,
            "reduceOnly": order.reduce_only,
            "acceptablePrice": int(order.acceptable_price),
            "trackingCode": bytes.fromhex(order.tracking_code[2:]),
            "expiration": int(order.expiration),
            "nonce": int(order.nonce),
        }
        return {
            "types": {"EIP712Domain": EIP712_DOMAIN, PRIMARY_TYPE: OFFCHAIN_ORDER},
            "primaryType": PRIMARY_TYPE,
            "domain": {
                "name": self.domain.name,
                "version": self.domain.version,
                "chainId": order.chain_id,
                "verifyingContract": to_checksum_address(self.domain.address),
            },
            "message": message,
        }

    def sign(self, order: UnsignedOrder, session_key: str) -> str:
        """Sign ``order`` with ``session_key`` and return a 0x-prefixed signature.

        :raises ValidationError: the key is not 32 bytes of 0x-prefixed hex.
        :raises SigningError: building or signing the message failed.
        """
        if not is_valid_private_key(session_key):
            raise ValidationError("Invalid session key format", {"sessionKey": session_key})

        try:
            signable = encode_typed_data(full_message=self.build_typed_data(order))
            signed = Account.sign_message(signable, private_key=session_key)
        except Exception as exc:
            detail = str(exc).replace(session_key[2:], "REDACTED")
            raise SigningError(
                f"Failed to sign market order: {detail}",
                {"marketId": order.market_id, "accountId": order.account_id},
            ) from exc
        logger.debug("Signed order market=%s account=%s nonce=%s", order.market_id, order.account_id, order.nonce)
        return "0x" + bytes(signed.signature).hex()

    def recover_signer(self, order: UnsignedOrder, signature: str) -> str:
        """Address that produced ``signature`` over ``order``."""
        signable = encode_typed_data(full_message=self.build_typed_data(order))
        return Account.recover_message(signable, signature=signature)
