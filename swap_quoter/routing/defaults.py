"""
Default wiring: build an orchestrator from config.yaml / environment settings.

The routing API URL is required; a missing URL raises ConfigurationError here,
before any quote is requested. Local routers are supplied by the embedder
through a RouterRegistry.
"""
from __future__ import annotations

import logging
from typing import Optional

from .. import config
from .analytics import AnalyticsSink
from .cache import QuoteQuery, QuoteResultCache
from .client import RoutingApiClient
from .local import RegistryLocalEngine, RouterRegistry
from .orchestrator import QuoteOrchestrator
from .tracing import Tracer

logger = logging.getLogger(__name__)


def create_routing_client() -> RoutingApiClient:
    """Routing API client from configuration."""
    return RoutingApiClient(
        config.routing_api_url(),
        timeout_s=config.http_timeout_s(),
        request_source=config.request_source(),
    )


def create_orchestrator(
    registry: Optional[RouterRegistry] = None,
    *,
    remote_client: Optional[RoutingApiClient] = None,
    analytics: Optional[AnalyticsSink] = None,
    tracer: Optional[Tracer] = None,
) -> QuoteOrchestrator:
    """
    Orchestrator wired from configuration, falling back to routers in `registry`.

    Pass a client opened with `async with create_routing_client()` so its
    connection pool is closed. A client built here is owned by the caller too:
    close it through `orchestrator.remote_client.aclose()`.
    """
    client = remote_client or create_routing_client()
    reg = registry if registry is not None else RouterRegistry()
    if not reg.chain_ids:
        logger.info("No local routers registered; fallback quotes will fail with an error")
    return QuoteOrchestrator(
        client,
        RegistryLocalEngine(reg),
        analytics=analytics,
        tracer=tracer,
        synthetic_chain_ids=config.synthetic_chain_ids(),
    )


def create_quote_query(orchestrator: QuoteOrchestrator) -> QuoteQuery:
    """QuoteQuery with the configured result TTL."""
    return QuoteQuery(orchestrator, QuoteResultCache(ttl_seconds=config.cache_ttl_seconds()))
