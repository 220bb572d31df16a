"""
Load config from config.yaml with optional env overrides.
Single source of truth for the routing API endpoint, HTTP timeout, synthetic-routing chains and cache TTL.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import FrozenSet

import yaml

from .errors import ConfigurationError

# Defaults if no YAML or env
_DEFAULTS = {
    "routing_api": {
        "url": "",
        "timeout_s": 15.0,
        "request_source": "swap-quoter",
    },
    # Chains where synthetic (off-chain filled) quotes may be requested.
    "synthetic_chain_ids": [1],
    "cache": {"ttl_seconds": 10.0},
}


def _config_yaml_path() -> Path:
    """Config.yaml lives at repo root (parent of package dir)."""
    return Path(__file__).resolve().parent.parent / "config.yaml"


def _load_yaml() -> dict:
    config_path = _config_yaml_path()
    if not config_path.exists():
        return {}
    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    out = dict(base)
    for k, v in override.items():
        if k in out and isinstance(out[k], dict) and isinstance(v, dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _env_overrides() -> dict:
    overrides: dict = {}
    url = os.environ.get("SWAP_QUOTER_API_URL")
    if url:
        overrides.setdefault("routing_api", {})["url"] = url
    timeout = os.environ.get("SWAP_QUOTER_TIMEOUT_S")
    if timeout:
        overrides.setdefault("routing_api", {})["timeout_s"] = float(timeout)
    source = os.environ.get("SWAP_QUOTER_REQUEST_SOURCE")
    if source:
        overrides.setdefault("routing_api", {})["request_source"] = source
    ttl = os.environ.get("SWAP_QUOTER_CACHE_TTL_S")
    if ttl:
        overrides.setdefault("cache", {})["ttl_seconds"] = float(ttl)
    return overrides


def get_config() -> dict:
    """Return merged config: defaults <- config.yaml <- env."""
    merged = _deep_merge(_DEFAULTS, _load_yaml())
    merged = _deep_merge(merged, _env_overrides())
    return merged


# Convenience accessors
def routing_api_url() -> str:
    """Base URL of the routing API. Raises ConfigurationError when unset."""
    url = str(get_config()["routing_api"].get("url") or "").strip()
    if not url:
        raise ConfigurationError(
            "routing API URL must be configured (routing_api.url in config.yaml or SWAP_QUOTER_API_URL)"
        )
    return url.rstrip("/")


def http_timeout_s() -> float:
    return float(get_config()["routing_api"]["timeout_s"])


def request_source() -> str:
    return str(get_config()["routing_api"]["request_source"])


def synthetic_chain_ids() -> FrozenSet[int]:
    return frozenset(int(c) for c in get_config().get("synthetic_chain_ids") or ())


def cache_ttl_seconds() -> float:
    return float(get_config()["cache"]["ttl_seconds"])
