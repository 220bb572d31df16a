"""
Quote data contracts.

Requests, provider configs, remote results and quote outcomes are frozen
dataclasses. ProviderConfig, RemoteResult and QuoteOutcome are closed unions:
callers switch on the concrete type (or the ``state`` tag) instead of catching
exceptions.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Union

# ASCII only; str.isdigit() also accepts superscripts and other scripts' digits.
_AMOUNT_RE = re.compile(r"[0-9]+")

class TradeType(enum.Enum):
    EXACT_INPUT = "EXACT_INPUT"
    EXACT_OUTPUT = "EXACT_OUTPUT"


class RouterPreference(enum.Enum):
    """How the caller wants the quote routed."""

    API = "api"  # prefer the routing API, classic quotes only
    PRICE = "price"  # price-only probe, classic quotes only
    AUTO = "auto"
    X = "uniswapx"  # force synthetic quotes where supported


class PoolProtocol(enum.Enum):
    V2 = "V2"
    V3 = "V3"
    MIXED = "MIXED"


ALL_PROTOCOLS: Tuple[PoolProtocol, ...] = (PoolProtocol.V2, PoolProtocol.V3, PoolProtocol.MIXED)


class RoutingType(enum.Enum):
    CLASSIC = "CLASSIC"
    DUTCH_LIMIT = "DUTCH_LIMIT"


class QuoteState(enum.Enum):
    SUCCESS = "Success"
    NOT_FOUND = "Not found"
    ERROR = "Error"


class QuoteMethod(enum.Enum):
    """Which path produced a quote."""

    ROUTING_API = "ROUTING_API"
    CLIENT_SIDE_FALLBACK = "CLIENT_SIDE_FALLBACK"


class ErrorKind(enum.Enum):
    CLIENT_SIDE_FAILURE = "CLIENT_SIDE_FAILURE"


@dataclass(frozen=True)
class QuoteRequest:
    """Immutable quote request, built by the caller once per acquisition."""

    token_in_address: str
    token_in_chain_id: int
    token_out_address: str
    token_out_chain_id: int
    amount: str
    trade_type: TradeType
    router_preference: RouterPreference = RouterPreference.AUTO
    account: Optional[str] = None
    send_portion_enabled: Optional[bool] = None

    def __post_init__(self) -> None:
        if not isinstance(self.amount, str) or not _AMOUNT_RE.fullmatch(self.amount):
            raise ValueError(f"amount must be a non-negative integer string, got {self.amount!r}")
        same_chain = self.token_in_chain_id == self.token_out_chain_id
        if same_chain and self.token_in_address.lower() == self.token_out_address.lower():
            raise ValueError("input and output token must differ")

    @property
    def is_exact_input(self) -> bool:
        return self.trade_type is TradeType.EXACT_INPUT

    @property
    def is_price_probe(self) -> bool:
        return self.router_preference is RouterPreference.PRICE

    @property
    def is_auto_router(self) -> bool:
        # True for the default AUTO preference, not for API.
        return self.router_preference is RouterPreference.AUTO

    def cache_key(self) -> Tuple[Any, ...]:
        return (
            self.token_in_address.lower(),
            self.token_in_chain_id,
            self.token_out_address.lower(),
            self.token_out_chain_id,
            self.amount,
            self.trade_type,
            self.router_preference,
            self.account.lower() if self.account else None,
            self.send_portion_enabled,
        )


# ---------------------------------------------------------------------------
# Provider configs
# ---------------------------------------------------------------------------


def _drop_none(d: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in d.items() if v is not None}


@dataclass(frozen=True)
class ClassicConfig:
    """On-chain routing through V2/V3 pools."""

    recipient: Optional[str] = None
    protocols: Tuple[PoolProtocol, ...] = ALL_PROTOCOLS
    # The routing API only applies fees when the universal router is enabled.
    enable_universal_router: bool = True
    enable_fee_on_transfer_fee_fetching: bool = True

    @property
    def routing_type(self) -> RoutingType:
        return RoutingType.CLASSIC

    def to_json(self) -> Dict[str, Any]:
        return _drop_none(
            {
                "routingType": self.routing_type.value,
                "protocols": [p.value for p in self.protocols],
                "enableUniversalRouter": self.enable_universal_router,
                "recipient": self.recipient,
                "enableFeeOnTransferFeeFetching": self.enable_fee_on_transfer_fee_fetching,
            }
        )


@dataclass(frozen=True)
class SyntheticConfig:
    """Off-chain coordinated (dutch order) routing."""

    swapper: Optional[str] = None
    recipient: Optional[str] = None
    use_synthetic_quotes: bool = False

    @property
    def routing_type(self) -> RoutingType:
        return RoutingType.DUTCH_LIMIT

    def to_json(self) -> Dict[str, Any]:
        return _drop_none(
            {
                "routingType": self.routing_type.value,
                "useSyntheticQuotes": self.use_synthetic_quotes,
                "recipient": self.recipient,
                "swapper": self.swapper,
            }
        )


ProviderConfig = Union[SyntheticConfig, ClassicConfig]


# ---------------------------------------------------------------------------
# Remote results
# ---------------------------------------------------------------------------

NO_ROUTE_ERROR_CODE = "NO_ROUTE"
NO_QUOTES_DETAIL = "No quotes available"


@dataclass(frozen=True)
class ProviderPayload:
    """Successful routing API response body."""

    body: Mapping[str, Any]


@dataclass(frozen=True)
class ClassifiedError:
    """Routing API failure: HTTP error body, transport failure, or undecodable response."""

    http_status: Optional[int] = None
    error_code: Optional[str] = None
    detail: Optional[str] = None
    message: Optional[str] = None

    @property
    def is_no_route(self) -> bool:
        return self.error_code == NO_ROUTE_ERROR_CODE or self.detail == NO_QUOTES_DETAIL

    def describe(self) -> str:
        parts = []
        if self.http_status is not None:
            parts.append(f"HTTP {self.http_status}")
        for value in (self.error_code, self.detail, self.message):
            if value:
                parts.append(str(value))
        return ": ".join(parts) or "unknown routing API error"

    def to_json(self) -> Dict[str, Any]:
        return _drop_none(
            {
                "status": self.http_status,
                "errorCode": self.error_code,
                "detail": self.detail,
                "message": self.message,
            }
        )


RemoteResult = Union[ProviderPayload, ClassifiedError]


# ---------------------------------------------------------------------------
# Local engine
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LocalQuoteParams:
    protocols: Tuple[PoolProtocol, ...] = ALL_PROTOCOLS


@dataclass(frozen=True)
class LocalQuoteResult:
    """What a local router returns: a classic quote mapping, a confirmed miss, or an error."""

    state: QuoteState
    data: Optional[Mapping[str, Any]] = None
    error: Optional[str] = None


# ---------------------------------------------------------------------------
# Normalized trade + outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RouteToken:
    address: str
    chain_id: Optional[int] = None
    symbol: Optional[str] = None
    decimals: Optional[int] = None


@dataclass(frozen=True)
class RoutePool:
    """One hop of a route. Amounts are integer strings."""

    type: str
    address: Optional[str]
    token_in: RouteToken
    token_out: RouteToken
    fee: Optional[str] = None
    amount_in: Optional[str] = None
    amount_out: Optional[str] = None


@dataclass(frozen=True)
class Trade:
    """Canonical trade, independent of which path produced the quote."""

    routing: RoutingType
    trade_type: TradeType
    token_in_address: str
    token_in_chain_id: int
    token_out_address: str
    token_out_chain_id: int
    input_amount: str
    output_amount: str
    quote: str
    quote_gas_adjusted: Optional[str] = None
    quote_gas_and_portion_adjusted: Optional[str] = None
    gas_use_estimate: Optional[str] = None
    gas_use_estimate_quote: Optional[str] = None
    gas_use_estimate_usd: Optional[str] = None
    gas_price_wei: Optional[str] = None
    portion_bips: Optional[int] = None
    portion_amount: Optional[str] = None
    route: Tuple[Tuple[RoutePool, ...], ...] = ()
    route_string: Optional[str] = None
    block_number: Optional[str] = None
    quote_id: Optional[str] = None
    request_id: Optional[str] = None
    method_parameters: Optional[Mapping[str, str]] = None


@dataclass(frozen=True)
class QuoteSuccess:
    trade: Trade
    method: QuoteMethod
    latency_ms: Optional[float] = None
    state: QuoteState = field(default=QuoteState.SUCCESS, init=False)


@dataclass(frozen=True)
class QuoteNotFound:
    latency_ms: Optional[float] = None
    state: QuoteState = field(default=QuoteState.NOT_FOUND, init=False)


@dataclass(frozen=True)
class QuoteError:
    kind: ErrorKind
    message: str
    status: Optional[int] = None
    latency_ms: Optional[float] = None
    state: QuoteState = field(default=QuoteState.ERROR, init=False)


QuoteOutcome = Union[QuoteSuccess, QuoteNotFound, QuoteError]
