"""Test configuration and fixtures."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock

import pytest

from flow_trigger_orchestrator.engine.client import RemoteEngine
from flow_trigger_orchestrator.models import (
    CollectionVersion,
    EmptyTrigger,
    EnableOrDisableParams,
    FlowVersion,
    PieceTrigger,
    PieceTriggerSettings,
    ScheduleTrigger,
    ScheduleTriggerSettings,
    TriggerStrategy,
)
from flow_trigger_orchestrator.pieces.base import (
    Piece,
    TriggerDefinition,
    TriggerHookContext,
    TriggerRunContext,
)
from flow_trigger_orchestrator.pieces.registry import PieceRegistry, StrategyResolver
from flow_trigger_orchestrator.scheduling.job_queue import InMemoryScheduledJobQueue
from flow_trigger_orchestrator.store.context_store import (
    ContextStoreFactory,
    InMemoryStoreEntryRepository,
)
from flow_trigger_orchestrator.triggers.dispatcher import TriggerDispatcher
from flow_trigger_orchestrator.triggers.lifecycle import TriggerLifecycleManager
from flow_trigger_orchestrator.webhooks import StaticBackendUrlProvider, WebhookUrlBuilder

BACKEND_URL = "https://backend.example.com"


async def _slack_new_message(ctx: TriggerRunContext) -> list[Any]:
    """Polling trigger: emit messages newer than the stored cursor."""
    last_seen = await ctx.store.get("last_seen") or 0
    messages = [m for m in ctx.payload.get("messages", []) if m["ts"] > last_seen]
    if messages:
        await ctx.store.put("last_seen", max(m["ts"] for m in messages))
    return messages


async def _github_new_push(ctx: TriggerRunContext) -> list[Any]:
    """Webhook trigger: one run per commit in the push body."""
    return list(ctx.payload.get("commits", []))


@pytest.fixture
def disable_calls() -> list[TriggerHookContext]:
    return []


@pytest.fixture
def enable_calls() -> list[TriggerHookContext]:
    return []


@pytest.fixture
def registry(
    enable_calls: list[TriggerHookContext], disable_calls: list[TriggerHookContext]
) -> PieceRegistry:
    async def on_enable(ctx: TriggerHookContext) -> None:
        enable_calls.append(ctx)

    async def on_disable(ctx: TriggerHookContext) -> None:
        disable_calls.append(ctx)

    slack = Piece(name="slack", display_name="Slack")
    slack.add_trigger(
        TriggerDefinition(
            name="new-message",
            strategy=TriggerStrategy.POLLING,
            run_fn=_slack_new_message,
        )
    )
    github = Piece(name="github", display_name="GitHub")
    github.add_trigger(
        TriggerDefinition(
            name="new-push",
            strategy=TriggerStrategy.WEBHOOK,
            run_fn=_github_new_push,
            on_enable_fn=on_enable,
            on_disable_fn=on_disable,
        )
    )
    return PieceRegistry([slack, github])


@pytest.fixture
def job_queue() -> InMemoryScheduledJobQueue:
    return InMemoryScheduledJobQueue()


@pytest.fixture
def engine() -> AsyncMock:
    return AsyncMock(spec=RemoteEngine)


@pytest.fixture
def store_repository() -> InMemoryStoreEntryRepository:
    return InMemoryStoreEntryRepository()


@pytest.fixture
def store_factory(store_repository: InMemoryStoreEntryRepository) -> ContextStoreFactory:
    return ContextStoreFactory(store_repository)


@pytest.fixture
def webhook_urls() -> WebhookUrlBuilder:
    return WebhookUrlBuilder(StaticBackendUrlProvider(BACKEND_URL))


@pytest.fixture
def lifecycle(
    registry: PieceRegistry,
    job_queue: InMemoryScheduledJobQueue,
    engine: AsyncMock,
    store_factory: ContextStoreFactory,
    webhook_urls: WebhookUrlBuilder,
) -> TriggerLifecycleManager:
    return TriggerLifecycleManager(
        resolver=StrategyResolver(registry),
        job_queue=job_queue,
        engine=engine,
        store_factory=store_factory,
        webhook_urls=webhook_urls,
    )


@pytest.fixture
def dispatcher(
    registry: PieceRegistry,
    store_factory: ContextStoreFactory,
    webhook_urls: WebhookUrlBuilder,
) -> TriggerDispatcher:
    return TriggerDispatcher(
        resolver=StrategyResolver(registry),
        store_factory=store_factory,
        webhook_urls=webhook_urls,
    )


@pytest.fixture
def collection_version() -> CollectionVersion:
    return CollectionVersion(id="cv-1", collection_id="col-1", display_name="Ops")


@pytest.fixture
def params_for(
    collection_version: CollectionVersion,
) -> Callable[[FlowVersion], EnableOrDisableParams]:
    def _make(flow_version: FlowVersion) -> EnableOrDisableParams:
        return EnableOrDisableParams(
            collection_id=collection_version.collection_id,
            collection_version=collection_version,
            flow_version=flow_version,
            project_id="proj-1",
        )

    return _make


@pytest.fixture
def schedule_flow_version() -> FlowVersion:
    return FlowVersion(
        id="fv-schedule",
        flow_id="flow-1",
        trigger=ScheduleTrigger(settings=ScheduleTriggerSettings(cron_expression="0 */5 * * * *")),
    )


@pytest.fixture
def polling_flow_version() -> FlowVersion:
    return FlowVersion(
        id="fv-polling",
        flow_id="flow-2",
        trigger=PieceTrigger(
            settings=PieceTriggerSettings(
                piece_name="slack", trigger_name="new-message", input={"channel": "#ops"}
            )
        ),
    )


@pytest.fixture
def webhook_flow_version() -> FlowVersion:
    return FlowVersion(
        id="fv-webhook",
        flow_id="flow-3",
        trigger=PieceTrigger(
            settings=PieceTriggerSettings(
                piece_name="github", trigger_name="new-push", input={"repo": "acme/api"}
            )
        ),
    )


@pytest.fixture
def empty_flow_version() -> FlowVersion:
    return FlowVersion(id="fv-empty", flow_id="flow-4", trigger=EmptyTrigger())
