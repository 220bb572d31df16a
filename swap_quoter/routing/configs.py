"""
Routing API request building: which provider configs to ask for, and the POST body.
"""
from __future__ import annotations

from typing import AbstractSet, Any, Dict, Optional, Sequence, Tuple

from .types import (
    ClassicConfig,
    ProviderConfig,
    QuoteRequest,
    RouterPreference,
    SyntheticConfig,
)

# Synthetic quotes are only served for these origin chains unless configured otherwise.
DEFAULT_SYNTHETIC_CHAIN_IDS = frozenset({1})

PRICING_INTENT = "pricing"


def is_synthetic_supported_chain(
    chain_id: int, synthetic_chain_ids: Optional[AbstractSet[int]] = None
) -> bool:
    chains = DEFAULT_SYNTHETIC_CHAIN_IDS if synthetic_chain_ids is None else synthetic_chain_ids
    return chain_id in chains


def build_routing_configs(
    request: QuoteRequest,
    synthetic_chain_ids: Optional[AbstractSet[int]] = None,
) -> Tuple[ProviderConfig, ...]:
    """
    Provider configs for a request. Classic is always present; synthetic comes
    first when the preference allows it and the origin chain supports it.
    """
    account = request.account
    classic = ClassicConfig(recipient=account)

    if (
        request.router_preference in (RouterPreference.API, RouterPreference.PRICE)
        or not is_synthetic_supported_chain(request.token_in_chain_id, synthetic_chain_ids)
    ):
        return (classic,)

    # recipient === swapper until swap+send to another address is exposed
    synthetic = SyntheticConfig(
        swapper=account,
        recipient=account,
        use_synthetic_quotes=request.router_preference is RouterPreference.X,
    )
    return (synthetic, classic)


def build_quote_request_body(
    request: QuoteRequest, configs: Sequence[ProviderConfig]
) -> Dict[str, Any]:
    """JSON body for POST /quote. Unset optional fields are left out."""
    body: Dict[str, Any] = {
        "tokenInChainId": request.token_in_chain_id,
        "tokenIn": request.token_in_address,
        "tokenOutChainId": request.token_out_chain_id,
        "tokenOut": request.token_out_address,
        "amount": request.amount,
        "sendPortionEnabled": request.send_portion_enabled,
        "type": request.trade_type.value,
        "intent": PRICING_INTENT if request.is_price_probe else None,
        "configs": [c.to_json() for c in configs],
    }
    return {k: v for k, v in body.items() if v is not None}
