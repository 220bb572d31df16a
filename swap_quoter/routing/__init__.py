"""
Quote acquisition for token swaps.

The routing API is asked first; when it fails for any reason other than a
confirmed "no route", a local router computes the quote instead. Every
acquisition resolves to QuoteSuccess, QuoteNotFound or QuoteError with
latency attached.
"""

from __future__ import annotations

from .cache import QuoteQuery, QuoteResultCache
from .client import RemoteQuoteClient, RoutingApiClient
from .configs import build_quote_request_body, build_routing_configs
from .local import LocalQuoteEngine, LocalRouter, RegistryLocalEngine, RouterRegistry
from .normalize import normalize_quote
from .orchestrator import QuoteOrchestrator
from .types import (
    ClassicConfig,
    ClassifiedError,
    ErrorKind,
    LocalQuoteParams,
    LocalQuoteResult,
    PoolProtocol,
    ProviderConfig,
    ProviderPayload,
    QuoteError,
    QuoteMethod,
    QuoteNotFound,
    QuoteOutcome,
    QuoteRequest,
    QuoteState,
    QuoteSuccess,
    RouterPreference,
    SyntheticConfig,
    Trade,
    TradeType,
)

__all__ = [
    "QuoteOrchestrator",
    "QuoteQuery",
    "QuoteResultCache",
    "RemoteQuoteClient",
    "RoutingApiClient",
    "LocalQuoteEngine",
    "LocalRouter",
    "RegistryLocalEngine",
    "RouterRegistry",
    "build_routing_configs",
    "build_quote_request_body",
    "normalize_quote",
    "ClassicConfig",
    "SyntheticConfig",
    "ProviderConfig",
    "ProviderPayload",
    "ClassifiedError",
    "LocalQuoteParams",
    "LocalQuoteResult",
    "PoolProtocol",
    "QuoteRequest",
    "QuoteOutcome",
    "QuoteSuccess",
    "QuoteNotFound",
    "QuoteError",
    "QuoteState",
    "QuoteMethod",
    "ErrorKind",
    "RouterPreference",
    "Trade",
    "TradeType",
]
