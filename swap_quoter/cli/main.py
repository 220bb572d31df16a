"""
Top-level CLI dispatcher: swap-quoter <command> [args...].

  configs   Print the provider configs and POST body for a request (no network).
  quote     Acquire a quote through the configured routing API and print it as JSON.
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import enum
import json
import logging
import sys
from typing import Any, List, Optional

from swap_quoter import config
from swap_quoter.errors import ConfigurationError
from swap_quoter.routing.configs import build_quote_request_body, build_routing_configs
from swap_quoter.routing.types import QuoteOutcome, QuoteRequest, RouterPreference, TradeType

_TRADE_TYPES = {"exact-in": TradeType.EXACT_INPUT, "exact-out": TradeType.EXACT_OUTPUT}


def _jsonable(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def outcome_to_dict(outcome: QuoteOutcome) -> dict:
    """Plain-JSON form of an outcome; amounts stay strings."""
    return _jsonable(dataclasses.asdict(outcome))


def _add_request_args(ap: argparse.ArgumentParser) -> None:
    ap.add_argument("--token-in", required=True, help="Input token address")
    ap.add_argument("--token-out", required=True, help="Output token address")
    ap.add_argument("--chain-id", type=int, required=True, help="Chain id of both tokens")
    ap.add_argument("--token-out-chain-id", type=int, default=None, help="Output chain id (default: --chain-id)")
    ap.add_argument("--amount", required=True, help="Raw integer amount (e.g. 1000000000000000000)")
    ap.add_argument("--type", choices=sorted(_TRADE_TYPES), default="exact-in", dest="trade_type")
    ap.add_argument(
        "--preference",
        choices=[p.value for p in RouterPreference],
        default=RouterPreference.AUTO.value,
        help="Routing preference",
    )
    ap.add_argument("--account", default=None, help="Swapper / recipient address")


def _request_from_args(args: argparse.Namespace) -> QuoteRequest:
    return QuoteRequest(
        token_in_address=args.token_in,
        token_in_chain_id=args.chain_id,
        token_out_address=args.token_out,
        token_out_chain_id=args.token_out_chain_id or args.chain_id,
        amount=args.amount,
        trade_type=_TRADE_TYPES[args.trade_type],
        router_preference=RouterPreference(args.preference),
        account=args.account,
    )


def _main_configs(args: argparse.Namespace) -> int:
    request = _request_from_args(args)
    configs = build_routing_configs(request, config.synthetic_chain_ids())
    print(json.dumps(build_quote_request_body(request, configs), indent=2))
    return 0


async def _acquire(request: QuoteRequest) -> QuoteOutcome:
    from swap_quoter.routing.defaults import create_orchestrator, create_routing_client

    async with create_routing_client() as client:
        orchestrator = create_orchestrator(remote_client=client)
        return await orchestrator.acquire_quote(request)


def _main_quote(args: argparse.Namespace) -> int:
    request = _request_from_args(args)
    try:
        outcome = asyncio.run(_acquire(request))
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    print(json.dumps(outcome_to_dict(outcome), indent=2))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = argparse.ArgumentParser(
        prog="swap-quoter",
        description="Swap quotes from the routing API with client-side fallback",
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    subparsers = parser.add_subparsers(dest="command", help="command")
    _add_request_args(subparsers.add_parser("configs", help="Print provider configs and request body"))
    _add_request_args(subparsers.add_parser("quote", help="Acquire a quote"))

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        if args.command == "configs":
            return _main_configs(args)
        if args.command == "quote":
            return _main_quote(args)
    except ValueError as e:
        print(f"Invalid request: {e}", file=sys.stderr)
        return 1

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
