"""Shape one inbound event into the payloads that start flow runs."""

from __future__ import annotations

import logging
from typing import Any, assert_never

from flow_trigger_orchestrator.models import (
    CollectionId,
    EmptyTrigger,
    FlowVersion,
    PieceTrigger,
    ScheduleTrigger,
)
from flow_trigger_orchestrator.pieces.base import TriggerRunContext
from flow_trigger_orchestrator.pieces.registry import StrategyResolver
from flow_trigger_orchestrator.store.context_store import ContextStoreFactory
from flow_trigger_orchestrator.webhooks import WebhookUrlBuilder

logger = logging.getLogger(__name__)


class TriggerDispatcher:
    """Turn a raw trigger payload into zero or more flow-run payloads.

    Piece triggers decide their own fan-out (a batch webhook call may become
    one run per item). Schedule and empty triggers pass the payload through.
    Failures from resolution or from the piece's ``run`` propagate unchanged.
    """

    def __init__(
        self,
        *,
        resolver: StrategyResolver,
        store_factory: ContextStoreFactory,
        webhook_urls: WebhookUrlBuilder,
    ) -> None:
        self._resolver = resolver
        self._store_factory = store_factory
        self._webhook_urls = webhook_urls

    async def execute_trigger(
        self, *, collection_id: CollectionId, flow_version: FlowVersion, payload: Any
    ) -> list[Any]:
        trigger = flow_version.trigger
        match trigger:
            case PieceTrigger():
                return await self._run_piece_trigger(
                    collection_id=collection_id,
                    flow_version=flow_version,
                    trigger=trigger,
                    payload=payload,
                )
            case ScheduleTrigger() | EmptyTrigger():
                return [payload]
            case _:
                assert_never(trigger)

    async def _run_piece_trigger(
        self,
        *,
        collection_id: CollectionId,
        flow_version: FlowVersion,
        trigger: PieceTrigger,
        payload: Any,
    ) -> list[Any]:
        definition = self._resolver.resolve_for(trigger)
        ctx = TriggerRunContext(
            store=self._store_factory.create_context_store(collection_id),
            webhook_url=await self._webhook_urls.build_webhook_url(flow_version.flow_id),
            props_value=dict(trigger.settings.input),
            payload=payload,
        )
        payloads = await definition.run(ctx)
        logger.info(
            "Piece trigger produced payloads",
            extra={
                "flow_version_id": flow_version.id,
                "piece_name": trigger.settings.piece_name,
                "trigger_name": trigger.settings.trigger_name,
                "payload_count": len(payloads),
            },
        )
        return payloads
