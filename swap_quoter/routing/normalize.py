"""
Map routing API and local engine payloads onto the canonical Trade.

Accepted shapes:
- routing API response, routing == "CLASSIC": {"routing", "quote": {...classic quote}, "requestId"}
- routing API response, routing == "DUTCH_LIMIT": {"routing", "quote": {"orderInfo": {...}, ...}}
- bare classic quote (what local routers return): {"amount", "quote", "route", ...}

Amounts stay strings end to end. Integers may arrive as JSON ints (exact in
Python); floats are rejected rather than rounded.
"""
from __future__ import annotations

import re
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..errors import QuoteNormalizationError
from .types import (
    QuoteMethod,
    QuoteRequest,
    QuoteSuccess,
    RoutePool,
    RouteToken,
    RoutingType,
    Trade,
)

_INT_RE = re.compile(r"^[0-9]+$")
_DECIMAL_RE = re.compile(r"^-?[0-9]+(\.[0-9]+)?$")


def _int_str(value: Any, field_name: str) -> str:
    """Integer amount as a digit string, without going through float."""
    if isinstance(value, bool):
        raise QuoteNormalizationError(f"{field_name}: expected integer amount, got bool")
    if isinstance(value, int):
        if value < 0:
            raise QuoteNormalizationError(f"{field_name}: negative amount {value}")
        return str(value)
    if isinstance(value, Decimal) and value == value.to_integral_value() and value >= 0:
        return str(int(value))
    if isinstance(value, str) and _INT_RE.match(value.strip()):
        return value.strip()
    raise QuoteNormalizationError(f"{field_name}: expected integer amount, got {value!r}")


def _opt_int_str(value: Any, field_name: str) -> Optional[str]:
    return None if value is None else _int_str(value, field_name)


def _opt_decimal_str(value: Any, field_name: str) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (int, Decimal)) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, str) and _DECIMAL_RE.match(value.strip()):
        return value.strip()
    raise QuoteNormalizationError(f"{field_name}: expected decimal string, got {value!r}")


def _opt_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _opt_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _token(raw: Any) -> RouteToken:
    if not isinstance(raw, Mapping) or not raw.get("address"):
        raise QuoteNormalizationError(f"route token missing address: {raw!r}")
    return RouteToken(
        address=str(raw["address"]),
        chain_id=_opt_int(raw.get("chainId")),
        symbol=_opt_str(raw.get("symbol")),
        decimals=_opt_int(raw.get("decimals")),
    )


def _route(raw: Any) -> Tuple[Tuple[RoutePool, ...], ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise QuoteNormalizationError(f"route must be a list of paths, got {type(raw).__name__}")
    paths = []
    for path in raw:
        if not isinstance(path, list):
            raise QuoteNormalizationError("route path must be a list of pools")
        pools = []
        for pool in path:
            if not isinstance(pool, Mapping):
                raise QuoteNormalizationError("route pool must be an object")
            pools.append(
                RoutePool(
                    type=str(pool.get("type", "unknown")),
                    address=_opt_str(pool.get("address")),
                    token_in=_token(pool.get("tokenIn")),
                    token_out=_token(pool.get("tokenOut")),
                    fee=_opt_str(pool.get("fee")),
                    amount_in=_opt_int_str(pool.get("amountIn"), "route.amountIn"),
                    amount_out=_opt_int_str(pool.get("amountOut"), "route.amountOut"),
                )
            )
        paths.append(tuple(pools))
    return tuple(paths)


def _method_parameters(raw: Any) -> Optional[Dict[str, str]]:
    if not isinstance(raw, Mapping):
        return None
    return {k: str(v) for k, v in raw.items() if k in ("calldata", "value", "to")}


def _classic_trade(
    quote: Mapping[str, Any], request: QuoteRequest, request_id: Optional[str]
) -> Trade:
    amount = _int_str(quote.get("amount"), "amount")
    quoted = _int_str(quote.get("quote"), "quote")
    if request.is_exact_input:
        input_amount, output_amount = amount, quoted
    else:
        input_amount, output_amount = quoted, amount
    return Trade(
        routing=RoutingType.CLASSIC,
        trade_type=request.trade_type,
        token_in_address=request.token_in_address,
        token_in_chain_id=request.token_in_chain_id,
        token_out_address=request.token_out_address,
        token_out_chain_id=request.token_out_chain_id,
        input_amount=input_amount,
        output_amount=output_amount,
        quote=quoted,
        quote_gas_adjusted=_opt_int_str(quote.get("quoteGasAdjusted"), "quoteGasAdjusted"),
        quote_gas_and_portion_adjusted=_opt_int_str(
            quote.get("quoteGasAndPortionAdjusted"), "quoteGasAndPortionAdjusted"
        ),
        gas_use_estimate=_opt_int_str(quote.get("gasUseEstimate"), "gasUseEstimate"),
        gas_use_estimate_quote=_opt_int_str(quote.get("gasUseEstimateQuote"), "gasUseEstimateQuote"),
        gas_use_estimate_usd=_opt_decimal_str(quote.get("gasUseEstimateUSD"), "gasUseEstimateUSD"),
        gas_price_wei=_opt_int_str(quote.get("gasPriceWei"), "gasPriceWei"),
        portion_bips=_opt_int(quote.get("portionBips")),
        portion_amount=_opt_int_str(quote.get("portionAmount"), "portionAmount"),
        route=_route(quote.get("route")),
        route_string=_opt_str(quote.get("routeString")),
        block_number=_opt_str(quote.get("blockNumber")),
        quote_id=_opt_str(quote.get("quoteId")),
        request_id=_opt_str(quote.get("requestId") or request_id),
        method_parameters=_method_parameters(quote.get("methodParameters")),
    )


def _dutch_trade(
    quote: Mapping[str, Any], request: QuoteRequest, request_id: Optional[str]
) -> Trade:
    order = quote.get("orderInfo")
    if not isinstance(order, Mapping):
        raise QuoteNormalizationError("DUTCH_LIMIT quote missing orderInfo")
    order_input = order.get("input")
    outputs = order.get("outputs")
    if not isinstance(order_input, Mapping) or not isinstance(outputs, list) or not outputs:
        raise QuoteNormalizationError("DUTCH_LIMIT orderInfo missing input or outputs")

    input_amount = _int_str(order_input.get("startAmount"), "orderInfo.input.startAmount")
    swapper = (order.get("swapper") or request.account or "").lower()
    # Fee outputs go to other recipients; only the swapper's outputs count.
    paid: List[str] = [
        _int_str(o.get("startAmount"), "orderInfo.outputs.startAmount")
        for o in outputs
        if isinstance(o, Mapping) and (not swapper or str(o.get("recipient", "")).lower() == swapper)
    ]
    if not paid:
        raise QuoteNormalizationError("DUTCH_LIMIT order has no output for the swapper")
    output_amount = str(sum(int(a) for a in paid))

    return Trade(
        routing=RoutingType.DUTCH_LIMIT,
        trade_type=request.trade_type,
        token_in_address=request.token_in_address,
        token_in_chain_id=request.token_in_chain_id,
        token_out_address=request.token_out_address,
        token_out_chain_id=request.token_out_chain_id,
        input_amount=input_amount,
        output_amount=output_amount,
        quote=output_amount if request.is_exact_input else input_amount,
        quote_id=_opt_str(quote.get("quoteId")),
        request_id=_opt_str(quote.get("requestId") or request_id),
    )


def normalize_quote(
    payload: Mapping[str, Any], request: QuoteRequest, method: QuoteMethod
) -> QuoteSuccess:
    """Normalize a provider payload into a Success outcome tagged with the producing method."""
    if not isinstance(payload, Mapping):
        raise QuoteNormalizationError(f"quote payload must be an object, got {type(payload).__name__}")

    routing = payload.get("routing")
    if routing is None:
        trade = _classic_trade(payload, request, None)
        return QuoteSuccess(trade=trade, method=method)

    quote = payload.get("quote")
    if not isinstance(quote, Mapping):
        raise QuoteNormalizationError(f"{routing} response missing quote object")
    request_id = _opt_str(payload.get("requestId"))
    if routing == RoutingType.CLASSIC.value:
        trade = _classic_trade(quote, request, request_id)
    elif routing == RoutingType.DUTCH_LIMIT.value:
        trade = _dutch_trade(quote, request, request_id)
    else:
        raise QuoteNormalizationError(f"unsupported routing type {routing!r}")
    return QuoteSuccess(trade=trade, method=method)
