#!/usr/bin/env python
"""
Basic usage of the Polynomial client.

Lists markets and, when a wallet is configured, the account summary.  With
``--symbol`` and ``--size`` it also places a market order; ``--simulate``
runs a post-trade simulation first and bounds the order by the simulated
fill price.

Configuration is read from ``POLYNOMIAL_*`` environment variables (see
``scripts/health_check.py``).
"""

from __future__ import annotations

import argparse
import asyncio
import logging

from polynomial import PolynomialError, PolynomialSDK, from_base_units, to_base_units


async def run(args: argparse.Namespace) -> None:
    async with PolynomialSDK.from_env() as sdk:
        markets = await sdk.markets.get_markets()
        print(f"{len(markets)} markets on chain {sdk.chain_id}")
        for market in markets[: args.limit]:
            print(f"  {market.symbol:<10} id={market.market_id} price={market.price}")

        if sdk.config.wallet_address:
            summary = await sdk.get_account_summary()
            print(
                f"Account {summary.account.account_id}: {summary.total_positions} positions, "
                f"unrealized {summary.total_unrealized_pnl} USD, realized {summary.total_realized_pnl} USD"
            )
            for position in summary.positions:
                side = "long" if position.is_long else "short"
                print(f"  market {position.market_id} {side} {from_base_units(position.size.lstrip('-'))}")

        if not (args.symbol and args.size):
            return
        size = to_base_units(args.size)
        is_long = args.side == "long"
        if args.simulate:
            result = await sdk.create_market_order_with_simulation(args.symbol, size, is_long, args.slippage)
            print(f"Simulated fill price {result['simulation'].fill_price}")
            print(f"Order response: {result['order_result']}")
            return
        market = await sdk.markets.get_market_by_symbol(args.symbol)
        if market is None:
            raise SystemExit(f"Unknown market symbol {args.symbol}")
        response = await sdk.create_order(
            market.market_id, size, is_long=is_long, slippage_percent=args.slippage
        )
        print(f"Order response: {response}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Polynomial client walkthrough.")
    parser.add_argument("--limit", type=int, default=10, help="Number of markets to list.")
    parser.add_argument("--symbol", help="Market symbol to trade, e.g. ETH.")
    parser.add_argument("--size", help="Order size in whole units, e.g. 0.5.")
    parser.add_argument("--side", choices=["long", "short"], default="long")
    parser.add_argument("--slippage", type=int, default=None, help="Slippage tolerance in percent.")
    parser.add_argument("--simulate", action="store_true", help="Simulate before submitting.")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    try:
        asyncio.run(run(args))
    except PolynomialError as exc:
        raise SystemExit(f"{exc.code}: {exc.message} {exc.context}")


if __name__ == "__main__":
    main()
