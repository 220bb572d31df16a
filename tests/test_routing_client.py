"""
Routing API client with mocked HTTP (httpx.MockTransport); no live network.
"""
from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from swap_quoter.errors import ConfigurationError
from swap_quoter.routing.client import RemoteQuoteClient, RoutingApiClient
from swap_quoter.routing.configs import build_routing_configs
from swap_quoter.routing.types import ClassifiedError, ProviderPayload
from tests.fakes.quoting import CLASSIC_RESPONSE, make_request

BASE_URL = "https://routing.example.org/v2/"


def _submit(handler, request=None):
    request = request or make_request()

    async def run():
        transport = httpx.MockTransport(handler)
        async with httpx.AsyncClient(transport=transport) as http:
            client = RoutingApiClient(BASE_URL, request_source="tests", client=http)
            return await client.submit(request, build_routing_configs(request))

    return asyncio.run(run())


def test_client_satisfies_protocol():
    assert isinstance(RoutingApiClient(BASE_URL), RemoteQuoteClient)


@pytest.mark.parametrize("url", ["", "   ", None])
def test_missing_base_url_is_configuration_error(url):
    with pytest.raises(ConfigurationError):
        RoutingApiClient(url)


def test_posts_body_and_parses_payload():
    seen = {}

    def handler(req: httpx.Request) -> httpx.Response:
        seen["method"] = req.method
        seen["url"] = str(req.url)
        seen["source"] = req.headers.get("x-request-source")
        seen["body"] = json.loads(req.content)
        return httpx.Response(200, json=CLASSIC_RESPONSE)

    result = _submit(handler)
    assert seen["method"] == "POST"
    assert seen["url"] == "https://routing.example.org/v2/quote"
    assert seen["source"] == "tests"
    assert seen["body"]["tokenInChainId"] == 80001
    assert seen["body"]["configs"][0]["routingType"] == "CLASSIC"
    assert isinstance(result, ProviderPayload)
    assert result.body["quote"]["quote"] == "5937577864394108776"


def test_no_route_error_body_is_classified():
    def handler(req):
        return httpx.Response(404, json={"errorCode": "NO_ROUTE", "detail": "No route found"})

    result = _submit(handler)
    assert isinstance(result, ClassifiedError)
    assert result.http_status == 404
    assert result.error_code == "NO_ROUTE"
    assert result.is_no_route


def test_no_quotes_detail_is_no_route():
    result = _submit(lambda req: httpx.Response(404, json={"detail": "No quotes available"}))
    assert result.is_no_route


def test_server_error_with_text_body():
    result = _submit(lambda req: httpx.Response(502, text="Bad Gateway"))
    assert isinstance(result, ClassifiedError)
    assert result.http_status == 502
    assert result.message == "Bad Gateway"
    assert not result.is_no_route


def test_transport_error_is_classified():
    def handler(req):
        raise httpx.ConnectTimeout("timed out", request=req)

    result = _submit(handler)
    assert isinstance(result, ClassifiedError)
    assert result.http_status is None
    assert "ConnectTimeout" in result.message
    assert not result.is_no_route


def test_undecodable_success_body():
    result = _submit(lambda req: httpx.Response(200, text="<html>oops</html>"))
    assert isinstance(result, ClassifiedError)
    assert "undecodable" in result.message


def test_non_object_success_body():
    result = _submit(lambda req: httpx.Response(200, json=[1, 2, 3]))
    assert isinstance(result, ClassifiedError)
    assert "unexpected response type" in result.message


def test_float_fields_parsed_as_decimal():
    from decimal import Decimal

    body = {"routing": "CLASSIC", "quote": {"slippage": 0.5}}
    result = _submit(lambda req: httpx.Response(200, content=json.dumps(body).encode()))
    assert result.body["quote"]["slippage"] == Decimal("0.5")
