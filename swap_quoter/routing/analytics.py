"""
Analytics events emitted during quote acquisition.

Events are for offline monitoring only; nothing in the control flow reads them.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Protocol, Tuple, runtime_checkable

from .types import QuoteRequest

logger = logging.getLogger(__name__)

NO_QUOTE_EVENT = "No quote received from routing API"


@runtime_checkable
class AnalyticsSink(Protocol):
    def send_event(self, name: str, properties: Mapping[str, Any]) -> None: ...


class LoggingAnalyticsSink:
    """Default sink: one INFO line per event."""

    def send_event(self, name: str, properties: Mapping[str, Any]) -> None:
        logger.info("analytics event %r: %s", name, dict(properties))


class RecordingAnalyticsSink:
    """Keeps (name, properties) pairs in memory."""

    def __init__(self) -> None:
        self.events: List[Tuple[str, Dict[str, Any]]] = []

    def send_event(self, name: str, properties: Mapping[str, Any]) -> None:
        self.events.append((name, dict(properties)))


def log_quote_request(request: QuoteRequest) -> None:
    logger.debug(
        "quote requested: chain=%s preference=%s type=%s",
        request.token_in_chain_id,
        request.router_preference.value,
        request.trade_type.value,
    )
