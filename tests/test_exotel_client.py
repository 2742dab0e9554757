"""Exotel HTTP client against httpx.MockTransport."""
import base64
import json

import httpx
import pytest

from apps.backend.clients.exotel import ExotelClient, GatewayCredential
from apps.backend.errors import UpstreamError

CRED = GatewayCredential(api_key="key", api_token="token", subdomain="acme", sid="acme1")


def _client(handler, **kwargs) -> ExotelClient:
    return ExotelClient(transport=httpx.MockTransport(handler), **kwargs)


def test_send_message_posts_payload_with_basic_auth():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["authorization"]
        seen["json"] = json.loads(request.content)
        return httpx.Response(202, json={"response": {"whatsapp": {"messages": [{"data": {"sid": "w1"}}]}}})

    payload = {"whatsapp": {"messages": []}}
    data = _client(handler).send_message(CRED, payload)

    assert seen["method"] == "POST"
    assert seen["url"] == "https://acme.api.exotel.com/v2/accounts/acme1/messages"
    assert seen["auth"] == "Basic " + base64.b64encode(b"key:token").decode()
    assert seen["json"] == payload
    assert data["response"]["whatsapp"]["messages"][0]["data"]["sid"] == "w1"


def test_credential_region_overrides_default():
    urls = []

    def handler(request):
        urls.append(str(request.url))
        return httpx.Response(200, json={})

    cred = GatewayCredential(api_key="k", api_token="t", subdomain="acme", sid="s1", region="api.in.exotel.com")
    _client(handler, default_region="api.eu.exotel.com").list_templates(cred)
    _client(handler, default_region="api.eu.exotel.com").list_templates(CRED)
    assert urls == [
        "https://acme.api.in.exotel.com/v2/accounts/s1/templates",
        "https://acme.api.eu.exotel.com/v2/accounts/acme1/templates",
    ]


def test_validate_onboarding_token_passes_token_as_query():
    def handler(request):
        assert request.method == "GET"
        assert request.url.path == "/v2/accounts/acme1/isv"
        assert request.url.params["token"] == "abc"
        return httpx.Response(200, json={"valid": True})

    assert _client(handler).validate_onboarding_token(CRED, "abc") == {"valid": True}


def test_error_status_raises_upstream_error_with_message():
    def handler(request):
        return httpx.Response(
            400,
            json={"response": {"whatsapp": {"messages": [{"error_data": {"message": "Invalid recipient"}}]}}},
        )

    with pytest.raises(UpstreamError) as exc:
        _client(handler).send_message(CRED, {})
    assert exc.value.upstream_status == 400
    assert exc.value.message == "Invalid recipient"
    assert exc.value.status_code == 502


def test_error_without_message_falls_back_to_status():
    def handler(request):
        return httpx.Response(500, text="boom")

    with pytest.raises(UpstreamError) as exc:
        _client(handler).create_template(CRED, {"name": "x"})
    assert exc.value.upstream_status == 500
    assert "500" in exc.value.message
    assert exc.value.body == {"raw": "boom"}


def test_transport_error_has_no_upstream_status():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamError) as exc:
        _client(handler).create_onboarding_link(CRED)
    assert exc.value.upstream_status is None
