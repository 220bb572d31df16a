"""Exception types raised by swap_quoter."""

from __future__ import annotations


class SwapQuoterError(Exception):
    """Base class for swap_quoter errors."""


class ConfigurationError(SwapQuoterError):
    """Required configuration is missing or invalid. Fatal at startup."""


class QuoteNormalizationError(SwapQuoterError, ValueError):
    """A quote payload could not be mapped onto the canonical trade shape."""
