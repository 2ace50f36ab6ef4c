"""Webhook callback URLs for flows.

The base URL comes from a provider because it may need network discovery
(public IP lookup). Results are not cached: each call asks the provider again.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol
from urllib.parse import urlencode

import httpx

from flow_trigger_orchestrator.config import TriggerSettings
from flow_trigger_orchestrator.errors import BackendUrlUnavailable
from flow_trigger_orchestrator.models import FlowId

logger = logging.getLogger(__name__)

WEBHOOK_PATH = "v1/webhooks"


class BackendUrlProvider(Protocol):
    async def get_backend_url(self) -> str: ...


class StaticBackendUrlProvider:
    def __init__(self, url: str) -> None:
        if not url.strip():
            raise ValueError("backend url is required")
        self._url = url.strip()

    async def get_backend_url(self) -> str:
        return self._url


class PublicIpBackendUrlProvider:
    """Build ``http://<public-ip>:<port>`` by asking an IP lookup service."""

    def __init__(
        self,
        *,
        lookup_url: str,
        port: int,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._lookup_url = lookup_url
        self._port = port
        self._timeout = timeout_seconds
        self._transport = transport

    async def get_backend_url(self) -> str:
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                resp = await client.get(self._lookup_url)
                resp.raise_for_status()
                data: Any = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise BackendUrlUnavailable(
                f"Public IP lookup failed: {e}", lookup_url=self._lookup_url
            ) from e

        ip = data.get("ip") if isinstance(data, dict) else None
        if not isinstance(ip, str) or not ip.strip():
            raise BackendUrlUnavailable(
                "Public IP lookup returned no address", lookup_url=self._lookup_url
            )
        return f"http://{ip.strip()}:{self._port}"


def backend_url_provider_from_settings(settings: TriggerSettings) -> BackendUrlProvider:
    if settings.backend_url.strip():
        return StaticBackendUrlProvider(settings.backend_url)
    return PublicIpBackendUrlProvider(
        lookup_url=settings.public_ip_lookup_url,
        port=settings.backend_port,
        timeout_seconds=settings.public_ip_timeout_seconds,
    )


class WebhookUrlBuilder:
    def __init__(self, provider: BackendUrlProvider) -> None:
        self._provider = provider

    async def build_webhook_url(self, flow_id: FlowId) -> str:
        base = (await self._provider.get_backend_url()).rstrip("/")
        return f"{base}/{WEBHOOK_PATH}?{urlencode({'flowId': flow_id})}"
