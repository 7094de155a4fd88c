"""
Account, position and margin queries.

All lookups are keyed by wallet address and filtered to the configured
chain.  Malformed addresses raise :class:`~polynomial.errors.ValidationError`
before any request is made.  "Not found" is reported as ``None`` or an
empty list; transport and API failures become
:class:`~polynomial.errors.AccountError`.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError as ModelValidationError

from ..clients.http_client import HttpClient
from ..errors import AccountError, PolynomialError
from ..models import Account, AccountSummary, MarginInfo, MaxTradeSize, Position
from ..utils import require_address


logger = logging.getLogger(__name__)

OWNERSHIP_TYPE = "SuperOwner"


def _sum_usd(values: Iterable[Optional[str]]) -> str:
    total = Decimal(0)
    for value in values:
        if not value:
            continue
        try:
            total += Decimal(value)
        except InvalidOperation:
            logger.warning("Ignoring non-numeric PnL value %r", value)
    return format(total.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP), "f")


def _for_chain(items: Any, chain_id: int) -> List[Dict[str, Any]]:
    if not isinstance(items, list):
        return []
    return [
        item for item in items if isinstance(item, dict) and str(item.get("chainId")) == str(chain_id)
    ]


class Accounts:
    def __init__(self, http: HttpClient, chain_id: int) -> None:
        self.http = http
        self.chain_id = chain_id

    async def _get(self, path: str, params: Dict[str, Any], failure: str, context: Dict[str, Any]) -> Any:
        try:
            return await self.http.get(path, params=params)
        except PolynomialError as exc:
            raise AccountError(f"{failure}: {exc}", {**context, "chainId": self.chain_id}) from exc

    async def get_account(self, wallet_address: str) -> Optional[Account]:
        """The wallet's account on the configured chain, or ``None``."""
        require_address(wallet_address)
        response = await self._get(
            "accounts",
            {"owner": wallet_address, "ownershipType": OWNERSHIP_TYPE, "chainIds": self.chain_id},
            f"Failed to fetch account for wallet {wallet_address}",
            {"walletAddress": wallet_address},
        )
        matches = _for_chain(response, self.chain_id)
        if not matches:
            return None
        try:
            return Account.model_validate(matches[0])
        except ModelValidationError as exc:
            raise AccountError(
                f"Malformed account response for wallet {wallet_address}",
                {"walletAddress": wallet_address, "chainId": self.chain_id},
            ) from exc

    async def get_all_accounts_for_wallet(self, wallet_address: str) -> List[Account]:
        require_address(wallet_address)
        response = await self._get(
            "accounts",
            {"owner": wallet_address, "chainIds": self.chain_id},
            f"Failed to fetch accounts for wallet {wallet_address}",
            {"walletAddress": wallet_address},
        )
        try:
            return [Account.model_validate(item) for item in _for_chain(response, self.chain_id)]
        except ModelValidationError as exc:
            raise AccountError(
                f"Malformed accounts response for wallet {wallet_address}",
                {"walletAddress": wallet_address, "chainId": self.chain_id},
            ) from exc

    async def account_exists(self, wallet_address: str) -> bool:
        return await self.get_account(wallet_address) is not None

    async def get_positions(self, account_id: str) -> List[Position]:
        response = await self._get(
            "positions/v2",
            {"accountId": account_id, "chainId": self.chain_id},
            f"Failed to fetch positions for account {account_id}",
            {"accountId": account_id},
        )
        raw = response.get("positions") if isinstance(response, dict) else None
        try:
            return [Position.model_validate(item) for item in raw or []]
        except ModelValidationError as exc:
            raise AccountError(
                f"Malformed positions response for account {account_id}",
                {"accountId": account_id, "chainId": self.chain_id},
            ) from exc

    async def get_position_by_market(self, account_id: str, market_id: str) -> Optional[Position]:
        for position in await self.get_positions(account_id):
            if position.market_id == str(market_id):
                return position
        return None

    async def get_account_summary(self, wallet_address: str) -> AccountSummary:
        account = await self.get_account(wallet_address)
        if account is None:
            raise AccountError(
                f"Account not found for wallet: {wallet_address}",
                {"walletAddress": wallet_address, "chainId": self.chain_id},
            )
        positions = await self.get_positions(account.account_id)
        return AccountSummary(
            account=account,
            positions=positions,
            total_positions=len(positions),
            total_unrealized_pnl=_sum_usd(p.unrealised_pnl_usd for p in positions),
            total_realized_pnl=_sum_usd(p.total_realised_pnl_usd for p in positions),
        )

    async def get_margin_info(self, wallet_address: str) -> Optional[MarginInfo]:
        require_address(wallet_address)
        response = await self._get(
            "margins/all-margins",
            {"owner": wallet_address, "ownershipType": OWNERSHIP_TYPE, "chainIds": self.chain_id},
            f"Failed to fetch margin information for wallet {wallet_address}",
            {"walletAddress": wallet_address},
        )
        matches = _for_chain(response, self.chain_id)
        if not matches:
            return None
        try:
            return MarginInfo.model_validate(matches[0])
        except ModelValidationError as exc:
            raise AccountError(
                f"Malformed margin response for wallet {wallet_address}",
                {"walletAddress": wallet_address, "chainId": self.chain_id},
            ) from exc

    async def get_max_trade_size(self, wallet_address: str, market_id: str) -> Optional[MaxTradeSize]:
        """Largest long and short sizes the wallet's account can open on ``market_id``."""
        account = await self.get_account(wallet_address)
        if account is None:
            return None
        payload = {
            "accountId": account.account_id,
            "chainId": self.chain_id,
            "marketId": str(market_id),
            "addedCollaterals": [],
        }
        try:
            response = await self.http.post("margins/max-possible-trade-sizes", payload)
            return MaxTradeSize.model_validate(response)
        except (PolynomialError, ModelValidationError) as exc:
            raise AccountError(
                f"Failed to fetch max possible trade sizes for market {market_id}: {exc}",
                {"walletAddress": wallet_address, "marketId": market_id, "chainId": self.chain_id},
            ) from exc
