"""
Local (client-side) quote computation, used when the routing API cannot answer.

The route-finding itself lives outside this package. Embedders register one
router per chain; the orchestrator only sees the narrow LocalQuoteEngine
interface: resolve a router for a chain, then compute a quote with it.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Protocol, Sequence, Type, Union, runtime_checkable

from .types import LocalQuoteParams, LocalQuoteResult, PoolProtocol, QuoteRequest

logger = logging.getLogger(__name__)


@runtime_checkable
class LocalRouter(Protocol):
    """A per-chain router able to compute a classic quote."""

    async def route(
        self, request: QuoteRequest, protocols: Sequence[PoolProtocol]
    ) -> LocalQuoteResult: ...


@runtime_checkable
class LocalQuoteEngine(Protocol):
    """Interface the orchestrator falls back to."""

    def resolve_router(self, chain_id: int) -> Any: ...

    async def compute_quote(
        self, request: QuoteRequest, router: Any, params: LocalQuoteParams
    ) -> LocalQuoteResult: ...


RouterFactory = Union[Type[LocalRouter], LocalRouter]


class RouterRegistry:
    """
    Registry mapping chain ids to router factories or instances.

    Usage:
        registry = RouterRegistry()
        registry.register(1, MainnetRouter)
        registry.register(137, polygon_router)

        router = registry.get(1)
    """

    def __init__(self) -> None:
        self._factories: Dict[int, RouterFactory] = {}
        self._instances: Dict[int, LocalRouter] = {}

    def register(self, chain_id: int, factory: RouterFactory) -> None:
        """Register a router class or instance for a chain."""
        self._factories[chain_id] = factory
        self._instances.pop(chain_id, None)
        logger.debug("Registered local router for chain %s", chain_id)

    def get(self, chain_id: int) -> LocalRouter:
        """Get or instantiate the router for a chain. One instance per chain."""
        if chain_id not in self._instances:
            factory = self._factories.get(chain_id)
            if factory is None:
                raise KeyError(
                    f"No local router for chain {chain_id}. "
                    f"Available: {sorted(self._factories)}"
                )
            if isinstance(factory, type):
                self._instances[chain_id] = factory()
            else:
                self._instances[chain_id] = factory
        return self._instances[chain_id]

    @property
    def chain_ids(self) -> List[int]:
        return sorted(self._factories)


class RegistryLocalEngine:
    """LocalQuoteEngine backed by a RouterRegistry."""

    def __init__(self, registry: RouterRegistry) -> None:
        self._registry = registry

    def resolve_router(self, chain_id: int) -> LocalRouter:
        return self._registry.get(chain_id)

    async def compute_quote(
        self, request: QuoteRequest, router: LocalRouter, params: LocalQuoteParams
    ) -> LocalQuoteResult:
        return await router.route(request, params.protocols)
