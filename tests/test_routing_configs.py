"""
Tests for provider config selection and the routing API request body.

Verifies that:
- Classic is always requested
- Synthetic is requested first only on supported chains and permissive preferences
- Price-only probes carry the pricing intent and never ask for synthetic quotes
"""
from __future__ import annotations

import pytest

from swap_quoter.routing.configs import (
    build_quote_request_body,
    build_routing_configs,
    is_synthetic_supported_chain,
)
from swap_quoter.routing.types import (
    ClassicConfig,
    PoolProtocol,
    QuoteRequest,
    RouterPreference,
    SyntheticConfig,
    TradeType,
)
from tests.fakes.quoting import ACCOUNT, TOKEN_IN, TOKEN_OUT, make_request


class TestBuildRoutingConfigs:
    @pytest.mark.parametrize("preference", list(RouterPreference))
    def test_unsupported_chain_yields_single_classic(self, preference):
        configs = build_routing_configs(make_request(chain_id=80001, preference=preference))
        assert len(configs) == 1
        assert isinstance(configs[0], ClassicConfig)

    @pytest.mark.parametrize("chain_id", [1, 80001, 137])
    def test_price_probe_never_synthetic(self, chain_id):
        configs = build_routing_configs(
            make_request(chain_id=chain_id, preference=RouterPreference.PRICE),
            synthetic_chain_ids={1, 80001, 137},
        )
        assert not any(isinstance(c, SyntheticConfig) for c in configs)

    def test_api_preference_opts_out_of_synthetic(self):
        configs = build_routing_configs(make_request(chain_id=1, preference=RouterPreference.API))
        assert configs == (ClassicConfig(recipient=ACCOUNT),)

    def test_synthetic_ordered_before_classic(self):
        configs = build_routing_configs(make_request(chain_id=1, preference=RouterPreference.AUTO))
        assert [type(c) for c in configs] == [SyntheticConfig, ClassicConfig]
        synthetic = configs[0]
        assert synthetic.swapper == ACCOUNT
        assert synthetic.recipient == ACCOUNT
        assert synthetic.use_synthetic_quotes is False

    def test_force_synthetic_sets_flag(self):
        configs = build_routing_configs(make_request(chain_id=1, preference=RouterPreference.X))
        assert configs[0].use_synthetic_quotes is True

    def test_custom_synthetic_chain_set(self):
        request = make_request(chain_id=80001)
        assert len(build_routing_configs(request, synthetic_chain_ids={80001})) == 2
        assert len(build_routing_configs(make_request(chain_id=1), synthetic_chain_ids=set())) == 1

    def test_classic_defaults(self):
        classic = build_routing_configs(make_request())[0]
        assert classic.protocols == (PoolProtocol.V2, PoolProtocol.V3, PoolProtocol.MIXED)
        assert classic.enable_universal_router is True
        assert classic.enable_fee_on_transfer_fee_fetching is True
        assert classic.recipient == ACCOUNT

    def test_is_synthetic_supported_chain_default(self):
        assert is_synthetic_supported_chain(1)
        assert not is_synthetic_supported_chain(80001)


class TestBuildQuoteRequestBody:
    def test_exact_input_body(self):
        request = make_request()
        body = build_quote_request_body(request, build_routing_configs(request))
        assert body == {
            "tokenInChainId": 80001,
            "tokenIn": TOKEN_IN,
            "tokenOutChainId": 80001,
            "tokenOut": TOKEN_OUT,
            "amount": "1000000000000000000",
            "type": "EXACT_INPUT",
            "configs": [
                {
                    "routingType": "CLASSIC",
                    "protocols": ["V2", "V3", "MIXED"],
                    "enableUniversalRouter": True,
                    "recipient": ACCOUNT,
                    "enableFeeOnTransferFeeFetching": True,
                }
            ],
        }

    def test_price_probe_sets_intent(self):
        request = make_request(preference=RouterPreference.PRICE, trade_type=TradeType.EXACT_OUTPUT)
        body = build_quote_request_body(request, build_routing_configs(request))
        assert body["intent"] == "pricing"
        assert body["type"] == "EXACT_OUTPUT"

    def test_unset_fields_are_omitted(self):
        request = make_request(chain_id=1, account=None)
        body = build_quote_request_body(request, build_routing_configs(request))
        assert "intent" not in body
        assert "sendPortionEnabled" not in body
        assert body["configs"][0] == {"routingType": "DUTCH_LIMIT", "useSyntheticQuotes": False}
        assert "recipient" not in body["configs"][1]

    def test_send_portion_flag_passed_through(self):
        request = QuoteRequest(
            token_in_address=TOKEN_IN,
            token_in_chain_id=1,
            token_out_address=TOKEN_OUT,
            token_out_chain_id=1,
            amount="10",
            trade_type=TradeType.EXACT_INPUT,
            send_portion_enabled=True,
        )
        body = build_quote_request_body(request, build_routing_configs(request))
        assert body["sendPortionEnabled"] is True


class TestQuoteRequest:
    def test_identical_token_and_chain_rejected(self):
        with pytest.raises(ValueError, match="must differ"):
            QuoteRequest(
                token_in_address=TOKEN_IN,
                token_in_chain_id=1,
                token_out_address=TOKEN_IN.lower(),
                token_out_chain_id=1,
                amount="1",
                trade_type=TradeType.EXACT_INPUT,
            )

    def test_same_token_on_other_chain_allowed(self):
        request = QuoteRequest(
            token_in_address=TOKEN_IN,
            token_in_chain_id=1,
            token_out_address=TOKEN_IN,
            token_out_chain_id=10,
            amount="1",
            trade_type=TradeType.EXACT_INPUT,
        )
        assert request.token_out_chain_id == 10

    @pytest.mark.parametrize("amount", ["1.5", "-1", "", "1e18", "²", "١٢", "12\n"])
    def test_non_integer_amount_rejected(self, amount):
        with pytest.raises(ValueError, match="amount"):
            make_request(amount=amount)
