"""
Quote orchestrator: routing API first, local computation as fallback.

Every acquisition ends in exactly one of QuoteSuccess, QuoteNotFound or
QuoteError, with latency_ms attached. Transport, parsing and engine failures
never escape as exceptions; only cancellation does.

    Init -> RemoteAttempt -> success            -> Done
                          -> no route           -> Done (NotFound, no fallback)
                          -> any other failure  -> LocalAttempt -> Done
"""
from __future__ import annotations

import asyncio
import dataclasses
import logging
from typing import AbstractSet, Any, Dict, Optional, Set

from .analytics import NO_QUOTE_EVENT, AnalyticsSink, LoggingAnalyticsSink, log_quote_request
from .client import RemoteQuoteClient
from .configs import build_quote_request_body, build_routing_configs
from .local import LocalQuoteEngine
from .normalize import normalize_quote
from .tracing import QuoteLatency, TraceSpan, Tracer
from .types import (
    ClassifiedError,
    ErrorKind,
    LocalQuoteParams,
    LocalQuoteResult,
    QuoteError,
    QuoteMethod,
    QuoteNotFound,
    QuoteOutcome,
    QuoteRequest,
    QuoteState,
)

logger = logging.getLogger(__name__)

CLIENT_PARAMS = LocalQuoteParams()


def _error_message(exc: BaseException) -> str:
    detail = getattr(exc, "detail", None)
    if isinstance(detail, str) and detail:
        return detail
    return str(exc) or type(exc).__name__


def _error_status(exc: BaseException) -> Optional[int]:
    response = getattr(exc, "response", None)
    status = getattr(response, "status_code", None) or getattr(exc, "status", None)
    return status if isinstance(status, int) and not isinstance(status, bool) else None


def _log_detached_local_result(task: "asyncio.Future[LocalQuoteResult]") -> None:
    """Retrieve the outcome of a local computation whose caller was cancelled."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.warning("Local quote finished after its caller was cancelled: %s", _error_message(exc))


class QuoteOrchestrator:
    """
    Acquire quotes from the routing API with client-side fallback.

    Holds only injected collaborators; no per-request state survives a call,
    so one instance can serve concurrent acquisitions. The one exception is a
    local computation whose caller was cancelled: it is kept referenced until
    it finishes so its result is still collected.
    """

    def __init__(
        self,
        remote_client: RemoteQuoteClient,
        local_engine: LocalQuoteEngine,
        *,
        analytics: Optional[AnalyticsSink] = None,
        tracer: Optional[Tracer] = None,
        synthetic_chain_ids: Optional[AbstractSet[int]] = None,
    ) -> None:
        self._remote = remote_client
        self._local = local_engine
        self._analytics = analytics or LoggingAnalyticsSink()
        self._tracer = tracer or Tracer()
        self._synthetic_chain_ids = synthetic_chain_ids
        self._detached: Set["asyncio.Future[LocalQuoteResult]"] = set()

    @property
    def remote_client(self) -> RemoteQuoteClient:
        return self._remote

    async def acquire_quote(self, request: QuoteRequest) -> QuoteOutcome:
        log_quote_request(request)
        latency = QuoteLatency.start()
        span = self._tracer.start_span(
            "quote",
            data={
                "tokenInChainId": request.token_in_chain_id,
                "tokenOutChainId": request.token_out_chain_id,
                "tradeType": request.trade_type.value,
                "routerPreference": request.router_preference.value,
                "isPrice": request.is_price_probe,
                "isAutoRouter": request.is_auto_router,
            },
        )
        try:
            outcome = await self._remote_attempt(request)
            if outcome is None:
                outcome = await self._local_attempt(request)
        except asyncio.CancelledError:
            span.set_error("cancelled")
            self._tracer.finish(span, "cancelled")
            raise

        outcome = dataclasses.replace(outcome, latency_ms=latency.stop())
        self._finish_span(span, outcome)
        return outcome

    async def _remote_attempt(self, request: QuoteRequest) -> Optional[QuoteOutcome]:
        """Outcome from the routing API, or None when the local fallback should run."""
        configs = build_routing_configs(request, self._synthetic_chain_ids)
        try:
            result = await self._remote.submit(request, configs)
            if isinstance(result, ClassifiedError):
                if result.is_no_route:
                    # A confirmed absence of a route is a valid answer.
                    self._send_no_quote_event(request, build_quote_request_body(request, configs), result)
                    return QuoteNotFound()
                logger.warning(
                    "GetQuote failed on routing API, falling back to client: %s", result.describe()
                )
                return None
            return normalize_quote(result.body, request, QuoteMethod.ROUTING_API)
        except Exception as exc:
            logger.warning(
                "GetQuote failed on routing API, falling back to client: %s", _error_message(exc)
            )
            return None

    async def _local_attempt(self, request: QuoteRequest) -> QuoteOutcome:
        try:
            router = self._local.resolve_router(request.token_in_chain_id)
            # Once started, local computation runs to completion even if the caller goes away.
            task = asyncio.ensure_future(self._local.compute_quote(request, router, CLIENT_PARAMS))
            try:
                result = await asyncio.shield(task)
            except asyncio.CancelledError:
                self._detached.add(task)
                task.add_done_callback(self._detached.discard)
                task.add_done_callback(_log_detached_local_result)
                raise
            if result.state is QuoteState.SUCCESS:
                if result.data is None:
                    raise ValueError("local engine reported success without quote data")
                return normalize_quote(result.data, request, QuoteMethod.CLIENT_SIDE_FALLBACK)
            if result.state is QuoteState.NOT_FOUND:
                return QuoteNotFound()
            raise RuntimeError(result.error or f"local engine returned state {result.state.value}")
        except Exception as exc:
            logger.warning("GetQuote failed on client: %s", _error_message(exc))
            return QuoteError(
                kind=ErrorKind.CLIENT_SIDE_FAILURE,
                message=_error_message(exc),
                status=_error_status(exc),
            )

    def _send_no_quote_event(
        self, request: QuoteRequest, request_body: Dict[str, Any], response: ClassifiedError
    ) -> None:
        try:
            self._analytics.send_event(
                NO_QUOTE_EVENT,
                {
                    "requestBody": request_body,
                    "response": response.to_json(),
                    "routerPreference": request.router_preference.value,
                },
            )
        except Exception:
            logger.exception("analytics sink failed for %r", NO_QUOTE_EVENT)

    def _finish_span(self, span: TraceSpan, outcome: QuoteOutcome) -> None:
        if isinstance(outcome, QuoteError):
            if outcome.status is not None:
                span.set_status(outcome.status)
            span.set_error(outcome.message)
        self._tracer.finish(span, outcome.state.value)
