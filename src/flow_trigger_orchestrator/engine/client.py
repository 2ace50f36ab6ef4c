"""Client for the remote execution engine's trigger hooks.

The engine runs a piece's ``on_enable`` / ``on_disable`` hook in its sandbox,
which typically subscribes or unsubscribes a webhook on the source service.
"""

from __future__ import annotations

import logging
from typing import Protocol

import httpx

from flow_trigger_orchestrator.config import TriggerSettings
from flow_trigger_orchestrator.errors import RemoteHookFailure
from flow_trigger_orchestrator.models import EngineHookRequest

logger = logging.getLogger(__name__)

EXECUTE_TRIGGER_HOOK_PATH = "/v1/engine/execute-trigger-hook"


class RemoteEngine(Protocol):
    async def execute_trigger_hook(self, request: EngineHookRequest) -> None: ...


class EngineClient:
    """Small httpx wrapper for the engine operations the trigger core needs."""

    def __init__(
        self,
        *,
        base_url: str,
        token: str = "",
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("Engine base URL is required")

        headers = {"User-Agent": "flow-trigger-orchestrator"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout_seconds,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: TriggerSettings) -> EngineClient:
        return cls(
            base_url=settings.engine_url,
            token=settings.engine_token,
            timeout_seconds=settings.engine_timeout_seconds,
        )

    async def execute_trigger_hook(self, request: EngineHookRequest) -> None:
        body = request.model_dump(mode="json", by_alias=True)
        flow_version_id = request.flow_version.id
        try:
            resp = await self._client.post(EXECUTE_TRIGGER_HOOK_PATH, json=body)
        except httpx.HTTPError as e:
            raise RemoteHookFailure(
                f"Engine unreachable while running {request.hook_type.value}: {e}",
                hook_type=request.hook_type.value,
                flow_version_id=flow_version_id,
            ) from e

        if resp.is_error:
            logger.error(
                "Engine trigger hook failed",
                extra={
                    "hook_type": request.hook_type.value,
                    "flow_version_id": flow_version_id,
                    "status_code": resp.status_code,
                },
            )
            raise RemoteHookFailure(
                f"Engine returned HTTP {resp.status_code} for {request.hook_type.value}",
                hook_type=request.hook_type.value,
                flow_version_id=flow_version_id,
                status_code=resp.status_code,
            )

        logger.info(
            "Engine trigger hook executed",
            extra={"hook_type": request.hook_type.value, "flow_version_id": flow_version_id},
        )

    async def close(self) -> None:
        await self._client.aclose()
