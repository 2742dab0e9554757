"""Exotel WhatsApp REST API client. No retries here: RQ owns retry policy."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from apps.backend.errors import UpstreamError
from apps.backend.services.extraction import extract_error_message

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GatewayCredential:
    api_key: str
    api_token: str
    subdomain: str
    sid: str
    region: str | None = None


class ExotelClient:
    def __init__(
        self,
        default_region: str = "api.exotel.com",
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.default_region = default_region
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings) -> "ExotelClient":
        return cls(default_region=settings.exotel_region, timeout=settings.exotel_timeout_seconds)

    def base_url(self, cred: GatewayCredential) -> str:
        return f"https://{cred.subdomain}.{cred.region or self.default_region}"

    def _account_url(self, cred: GatewayCredential, resource: str) -> str:
        return f"{self.base_url(cred)}/v2/accounts/{cred.sid}/{resource}"

    def _request(
        self,
        method: str,
        cred: GatewayCredential,
        resource: str,
        json: Any = None,
        params: dict | None = None,
    ) -> Any:
        url = self._account_url(cred, resource)
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as c:
                r = c.request(method, url, json=json, params=params, auth=(cred.api_key, cred.api_token))
        except httpx.HTTPError as e:
            logger.warning("exotel_request_failed method=%s resource=%s error=%s", method, resource, e)
            raise UpstreamError(f"Exotel request failed: {e}") from e
        try:
            data = r.json()
        except ValueError:
            data = {"raw": r.text[:500]}
        if r.status_code >= 400:
            message = extract_error_message(data) or f"Exotel returned HTTP {r.status_code}"
            logger.warning(
                "exotel_error_response method=%s resource=%s status=%s message=%s",
                method, resource, r.status_code, message,
            )
            raise UpstreamError(message, upstream_status=r.status_code, body=data)
        return data

    def send_message(self, cred: GatewayCredential, payload: dict) -> Any:
        return self._request("POST", cred, "messages", json=payload)

    def list_templates(self, cred: GatewayCredential) -> Any:
        return self._request("GET", cred, "templates")

    def create_template(self, cred: GatewayCredential, payload: dict) -> Any:
        return self._request("POST", cred, "templates", json=payload)

    def create_onboarding_link(self, cred: GatewayCredential) -> Any:
        return self._request("POST", cred, "isv", json={})

    def validate_onboarding_token(self, cred: GatewayCredential, token: str) -> Any:
        return self._request("GET", cred, "isv", params={"token": token})
