"""Fake routing clients, local engines and payloads for quote tests (no live network)."""

from .quoting import (
    CLASSIC_RESPONSE,
    DUTCH_RESPONSE,
    FakeLocalEngine,
    FakeRemoteClient,
    FakeRouter,
    make_request,
)

__all__ = [
    "CLASSIC_RESPONSE",
    "DUTCH_RESPONSE",
    "FakeLocalEngine",
    "FakeRemoteClient",
    "FakeRouter",
    "make_request",
]
