"""Enable and disable flow triggers.

Transitions by trigger type and strategy:

| Trigger            | enable                        | disable                                   |
|--------------------|-------------------------------|-------------------------------------------|
| SCHEDULE           | add recurring job (cron)      | remove recurring job                      |
| PIECE / WEBHOOK    | engine ON_ENABLE hook         | engine ON_DISABLE hook, then piece hook   |
| PIECE / POLLING    | add recurring job (polling)   | remove recurring job                      |
| EMPTY              | nothing                       | nothing                                   |

Idempotency:
  - Recurring jobs are keyed by flow version id and the queue upserts, so a
    repeated enable replaces the job instead of duplicating it.
  - Removing an absent job is a no-op, so disable never fails on prior state.
  - Webhook disable always calls both hooks, even if enable never ran.

Calls for the same flow version must be serialized by the caller.
"""

from __future__ import annotations

import logging
from typing import assert_never

from flow_trigger_orchestrator.config import EVERY_FIFTEEN_MINUTES
from flow_trigger_orchestrator.engine.client import RemoteEngine
from flow_trigger_orchestrator.models import (
    EmptyTrigger,
    EnableOrDisableParams,
    EngineHookRequest,
    PieceTrigger,
    RepeatableJobData,
    RunEnvironment,
    ScheduleTrigger,
    TriggerHookType,
    TriggerStrategy,
    TriggerType,
)
from flow_trigger_orchestrator.pieces.base import TriggerHookContext
from flow_trigger_orchestrator.pieces.registry import StrategyResolver
from flow_trigger_orchestrator.scheduling.job_queue import ScheduledJobQueue
from flow_trigger_orchestrator.store.context_store import ContextStoreFactory
from flow_trigger_orchestrator.webhooks import WebhookUrlBuilder

logger = logging.getLogger(__name__)


def _job_data(params: EnableOrDisableParams, trigger_type: TriggerType) -> RepeatableJobData:
    return RepeatableJobData(
        environment=RunEnvironment.PRODUCTION,
        collection_id=params.collection_id,
        collection_version_id=params.collection_version.id,
        flow_version=params.flow_version,
        trigger_type=trigger_type,
    )


class TriggerLifecycleManager:
    def __init__(
        self,
        *,
        resolver: StrategyResolver,
        job_queue: ScheduledJobQueue,
        engine: RemoteEngine,
        store_factory: ContextStoreFactory,
        webhook_urls: WebhookUrlBuilder,
        polling_cron_expression: str = EVERY_FIFTEEN_MINUTES,
    ) -> None:
        self._resolver = resolver
        self._job_queue = job_queue
        self._engine = engine
        self._store_factory = store_factory
        self._webhook_urls = webhook_urls
        self._polling_cron_expression = polling_cron_expression

    async def enable(self, params: EnableOrDisableParams) -> None:
        trigger = params.flow_version.trigger
        match trigger:
            case PieceTrigger():
                await self._enable_piece_trigger(params, trigger)
            case ScheduleTrigger():
                await self._job_queue.add(
                    key=params.flow_version.id,
                    data=_job_data(params, TriggerType.SCHEDULE),
                    cron_expression=trigger.settings.cron_expression,
                )
                logger.info(
                    "Created schedule for flow version",
                    extra={
                        "flow_version_id": params.flow_version.id,
                        "cron_expression": trigger.settings.cron_expression,
                    },
                )
            case EmptyTrigger():
                logger.debug(
                    "Empty trigger has nothing to enable",
                    extra={"flow_version_id": params.flow_version.id},
                )
            case _:
                assert_never(trigger)

    async def disable(self, params: EnableOrDisableParams) -> None:
        trigger = params.flow_version.trigger
        match trigger:
            case PieceTrigger():
                await self._disable_piece_trigger(params, trigger)
            case ScheduleTrigger():
                await self._job_queue.remove(key=params.flow_version.id)
                logger.info(
                    "Deleted schedule for flow version",
                    extra={"flow_version_id": params.flow_version.id},
                )
            case EmptyTrigger():
                logger.debug(
                    "Empty trigger has nothing to disable",
                    extra={"flow_version_id": params.flow_version.id},
                )
            case _:
                assert_never(trigger)

    async def _enable_piece_trigger(
        self, params: EnableOrDisableParams, trigger: PieceTrigger
    ) -> None:
        definition = self._resolver.resolve_for(trigger)

        match definition.strategy:
            case TriggerStrategy.WEBHOOK:
                await self._engine.execute_trigger_hook(
                    await self._hook_request(params, TriggerHookType.ON_ENABLE)
                )
                logger.info(
                    "Enabled webhook trigger",
                    extra={"flow_version_id": params.flow_version.id},
                )
            case TriggerStrategy.POLLING:
                await self._job_queue.add(
                    key=params.flow_version.id,
                    data=_job_data(params, TriggerType.PIECE),
                    cron_expression=self._polling_cron_expression,
                )
                logger.info(
                    "Created polling job for flow version",
                    extra={
                        "flow_version_id": params.flow_version.id,
                        "cron_expression": self._polling_cron_expression,
                    },
                )
            case _:
                assert_never(definition.strategy)

    async def _disable_piece_trigger(
        self, params: EnableOrDisableParams, trigger: PieceTrigger
    ) -> None:
        definition = self._resolver.resolve_for(trigger)

        match definition.strategy:
            case TriggerStrategy.WEBHOOK:
                request = await self._hook_request(params, TriggerHookType.ON_DISABLE)
                await self._engine.execute_trigger_hook(request)
                await definition.on_disable(
                    TriggerHookContext(
                        store=self._store_factory.create_context_store(params.collection_id),
                        webhook_url=await self._webhook_urls.build_webhook_url(
                            params.flow_version.flow_id
                        ),
                        props_value=dict(trigger.settings.input),
                    )
                )
                logger.info(
                    "Disabled webhook trigger",
                    extra={"flow_version_id": params.flow_version.id},
                )
            case TriggerStrategy.POLLING:
                await self._job_queue.remove(key=params.flow_version.id)
                logger.info(
                    "Deleted polling job for flow version",
                    extra={"flow_version_id": params.flow_version.id},
                )
            case _:
                assert_never(definition.strategy)

    async def _hook_request(
        self, params: EnableOrDisableParams, hook_type: TriggerHookType
    ) -> EngineHookRequest:
        return EngineHookRequest(
            hook_type=hook_type,
            flow_version=params.flow_version,
            webhook_url=await self._webhook_urls.build_webhook_url(params.flow_version.flow_id),
            collection_version=params.collection_version,
            project_id=params.project_id,
        )
