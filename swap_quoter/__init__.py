"""
Top-level public API surface.
Canonical entrypoint: from swap_quoter import QuoteOrchestrator, QuoteRequest. Does not import cli.
"""

from __future__ import annotations

from . import config, routing
from ._version import __version__
from .errors import ConfigurationError, QuoteNormalizationError, SwapQuoterError
from .routing import QuoteOrchestrator, QuoteOutcome, QuoteRequest

# Do not add exports without updating __all__.
__all__ = [
    "__version__",
    "config",
    "routing",
    "ConfigurationError",
    "QuoteNormalizationError",
    "SwapQuoterError",
    "QuoteOrchestrator",
    "QuoteOutcome",
    "QuoteRequest",
]
