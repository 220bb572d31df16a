"""
Routing API client.

Uses the routing API quote endpoint:
  POST {base_url}/quote

One attempt per call, no retries. Every failure (HTTP error status, timeout,
connection error, undecodable body) comes back as a ClassifiedError so the
orchestrator can decide between "no route" and fallback.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Optional, Protocol, Sequence, runtime_checkable

import httpx

from ..errors import ConfigurationError
from .configs import build_quote_request_body
from .types import ClassifiedError, ProviderConfig, ProviderPayload, QuoteRequest, RemoteResult

logger = logging.getLogger(__name__)

HTTP_TIMEOUT_S = 15.0
DEFAULT_REQUEST_SOURCE = "swap-quoter"


@runtime_checkable
class RemoteQuoteClient(Protocol):
    """Anything that can submit a quote request to a remote routing service."""

    async def submit(
        self, request: QuoteRequest, configs: Sequence[ProviderConfig]
    ) -> RemoteResult: ...


def _classify_error_body(status: int, response: httpx.Response) -> ClassifiedError:
    try:
        data = response.json()
    except ValueError:
        return ClassifiedError(http_status=status, message=response.text[:500] or None)
    if not isinstance(data, dict):
        return ClassifiedError(http_status=status, message=str(data)[:500])
    error_code = data.get("errorCode")
    detail = data.get("detail")
    return ClassifiedError(
        http_status=status,
        error_code=error_code if isinstance(error_code, str) else None,
        detail=detail if isinstance(detail, str) else None,
        message=data.get("message") if isinstance(data.get("message"), str) else None,
    )


class RoutingApiClient:
    """Submit quote requests to the routing API over httpx."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout_s: float = HTTP_TIMEOUT_S,
        request_source: str = DEFAULT_REQUEST_SOURCE,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        base_url = (base_url or "").strip().rstrip("/")
        if not base_url:
            raise ConfigurationError("RoutingApiClient requires a routing API base URL")
        self._quote_url = f"{base_url}/quote"
        self._headers = {"x-request-source": request_source}
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout_s, connect=6.0))

    @property
    def quote_url(self) -> str:
        return self._quote_url

    async def submit(
        self, request: QuoteRequest, configs: Sequence[ProviderConfig]
    ) -> RemoteResult:
        body = build_quote_request_body(request, configs)
        logger.debug(
            "POST %s chain=%s type=%s configs=%s",
            self._quote_url,
            request.token_in_chain_id,
            body["type"],
            [c["routingType"] for c in body["configs"]],
        )
        try:
            response = await self._client.post(self._quote_url, json=body, headers=self._headers)
        except httpx.HTTPError as exc:
            logger.warning("Routing API request error: url=%s error=%s", self._quote_url, exc)
            return ClassifiedError(message=f"{type(exc).__name__}: {exc}")

        if response.is_error:
            classified = _classify_error_body(response.status_code, response)
            logger.debug("Routing API error: %s", classified.describe())
            return classified

        try:
            # Decimal keeps non-string numeric fields exact.
            data: Any = response.json(parse_float=Decimal)
        except ValueError as exc:
            return ClassifiedError(
                http_status=response.status_code, message=f"undecodable response body: {exc}"
            )
        if not isinstance(data, dict):
            return ClassifiedError(
                http_status=response.status_code,
                message=f"unexpected response type: {type(data).__name__}",
            )
        return ProviderPayload(body=data)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> RoutingApiClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

