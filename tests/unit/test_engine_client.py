"""Unit tests for the remote engine client (mocked transport)."""

from __future__ import annotations

import json

import httpx
import pytest

from flow_trigger_orchestrator.engine.client import EngineClient
from flow_trigger_orchestrator.errors import RemoteHookFailure
from flow_trigger_orchestrator.models import (
    CollectionVersion,
    EngineHookRequest,
    FlowVersion,
    TriggerHookType,
)


def _request(flow_version: FlowVersion, collection_version: CollectionVersion) -> EngineHookRequest:
    return EngineHookRequest(
        hook_type=TriggerHookType.ON_ENABLE,
        flow_version=flow_version,
        webhook_url="https://backend.example.com/v1/webhooks?flowId=flow-3",
        collection_version=collection_version,
        project_id="proj-1",
    )


@pytest.mark.asyncio
async def test_execute_trigger_hook_posts_camel_case_body(
    webhook_flow_version, collection_version
) -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={})

    client = EngineClient(
        base_url="http://engine.local/",
        token="secret",
        transport=httpx.MockTransport(handler),
    )
    try:
        await client.execute_trigger_hook(_request(webhook_flow_version, collection_version))
    finally:
        await client.close()

    (request,) = captured
    assert request.method == "POST"
    assert str(request.url) == "http://engine.local/v1/engine/execute-trigger-hook"
    assert request.headers["Authorization"] == "Bearer secret"

    body = json.loads(request.content)
    assert body["hookType"] == "ON_ENABLE"
    assert body["projectId"] == "proj-1"
    assert body["webhookUrl"] == "https://backend.example.com/v1/webhooks?flowId=flow-3"
    assert body["collectionVersion"] == {
        "id": "cv-1",
        "collectionId": "col-1",
        "displayName": "Ops",
    }
    assert body["flowVersion"]["flowId"] == "flow-3"
    assert body["flowVersion"]["trigger"]["settings"]["pieceName"] == "github"


@pytest.mark.asyncio
async def test_execute_trigger_hook_without_token_sends_no_auth(
    webhook_flow_version, collection_version
) -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(204)

    client = EngineClient(base_url="http://engine.local", transport=httpx.MockTransport(handler))
    await client.execute_trigger_hook(_request(webhook_flow_version, collection_version))
    await client.close()

    assert "Authorization" not in captured[0].headers


@pytest.mark.asyncio
async def test_execute_trigger_hook_http_error(webhook_flow_version, collection_version) -> None:
    client = EngineClient(
        base_url="http://engine.local",
        transport=httpx.MockTransport(lambda _request: httpx.Response(500, text="boom")),
    )

    with pytest.raises(RemoteHookFailure) as exc_info:
        await client.execute_trigger_hook(_request(webhook_flow_version, collection_version))
    await client.close()

    assert exc_info.value.params["status_code"] == 500
    assert exc_info.value.params["flow_version_id"] == "fv-webhook"


@pytest.mark.asyncio
async def test_execute_trigger_hook_transport_error(
    webhook_flow_version, collection_version
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client = EngineClient(base_url="http://engine.local", transport=httpx.MockTransport(handler))

    with pytest.raises(RemoteHookFailure):
        await client.execute_trigger_hook(_request(webhook_flow_version, collection_version))
    await client.close()


def test_engine_client_requires_base_url() -> None:
    with pytest.raises(ValueError):
        EngineClient(base_url="")
