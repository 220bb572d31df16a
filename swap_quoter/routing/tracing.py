"""
Latency measurement and trace spans for quote acquisition.

A span covers one acquisition end to end. Spans are handed to an exporter
when finished; the default exporter writes them to the module logger.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


class QuoteLatency:
    """Monotonic stopwatch started when the acquisition is dispatched."""

    def __init__(self) -> None:
        self._start = time.monotonic()

    @classmethod
    def start(cls) -> QuoteLatency:
        return cls()

    def stop(self) -> float:
        """Elapsed milliseconds since start. Never negative."""
        return max(0.0, (time.monotonic() - self._start) * 1000.0)


@dataclass
class TraceSpan:
    """Observability record for a single acquisition attempt."""

    name: str
    data: Dict[str, Any] = field(default_factory=dict)
    outcome: Optional[str] = None
    status: Optional[int] = None
    error: Optional[str] = None
    duration_ms: Optional[float] = None
    _latency: QuoteLatency = field(default_factory=QuoteLatency, repr=False)

    @property
    def finished(self) -> bool:
        return self.duration_ms is not None

    def set_status(self, status: int) -> None:
        self.status = status

    def set_error(self, message: str) -> None:
        self.error = message[:500]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "data": self.data,
            "outcome": self.outcome,
            "status": self.status,
            "error": self.error,
            "duration_ms": self.duration_ms,
        }


@runtime_checkable
class SpanExporter(Protocol):
    def export(self, span: TraceSpan) -> None: ...


class LoggingSpanExporter:
    """Write finished spans to the log: errors at WARNING, everything else at DEBUG."""

    def export(self, span: TraceSpan) -> None:
        level = logging.WARNING if span.error else logging.DEBUG
        logger.log(
            level,
            "span %s outcome=%s status=%s duration_ms=%.1f error=%s",
            span.name,
            span.outcome,
            span.status,
            span.duration_ms or 0.0,
            span.error,
        )


class InMemorySpanExporter:
    """Keeps finished spans in a list; for tests and local debugging."""

    def __init__(self) -> None:
        self.spans: List[TraceSpan] = []

    def export(self, span: TraceSpan) -> None:
        self.spans.append(span)


class Tracer:
    def __init__(self, exporter: Optional[SpanExporter] = None) -> None:
        self._exporter = exporter or LoggingSpanExporter()

    def start_span(self, name: str, data: Optional[Dict[str, Any]] = None) -> TraceSpan:
        return TraceSpan(name=name, data=dict(data or {}))

    def finish(self, span: TraceSpan, outcome: str) -> None:
        """Close a span once. Exporter failures are logged, not raised."""
        if span.finished:
            return
        span.outcome = outcome
        span.duration_ms = span._latency.stop()
        try:
            self._exporter.export(span)
        except Exception:
            logger.exception("span exporter failed for %s", span.name)
