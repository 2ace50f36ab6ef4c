"""Wire the trigger core to its collaborators."""

from __future__ import annotations

from dataclasses import dataclass

from flow_trigger_orchestrator.config import TriggerSettings
from flow_trigger_orchestrator.engine.client import EngineClient, RemoteEngine
from flow_trigger_orchestrator.pieces.registry import PieceRegistry, StrategyResolver
from flow_trigger_orchestrator.scheduling.job_queue import (
    FileScheduledJobQueue,
    ScheduledJobQueue,
)
from flow_trigger_orchestrator.store.context_store import (
    ContextStoreFactory,
    FileStoreEntryRepository,
)
from flow_trigger_orchestrator.triggers.dispatcher import TriggerDispatcher
from flow_trigger_orchestrator.triggers.lifecycle import TriggerLifecycleManager
from flow_trigger_orchestrator.webhooks import (
    BackendUrlProvider,
    WebhookUrlBuilder,
    backend_url_provider_from_settings,
)


@dataclass
class TriggerServices:
    lifecycle: TriggerLifecycleManager
    dispatcher: TriggerDispatcher
    job_queue: ScheduledJobQueue
    engine: RemoteEngine

    @classmethod
    def build(
        cls,
        *,
        settings: TriggerSettings,
        registry: PieceRegistry,
        job_queue: ScheduledJobQueue | None = None,
        engine: RemoteEngine | None = None,
        store_factory: ContextStoreFactory | None = None,
        backend_urls: BackendUrlProvider | None = None,
    ) -> TriggerServices:
        """Build lifecycle and dispatch services.

        Collaborators default to the local-first adapters configured by
        ``settings``; tests pass fakes instead.
        """

        resolver = StrategyResolver(registry)
        job_queue = job_queue or FileScheduledJobQueue(settings.jobs_state_file)
        engine = engine or EngineClient.from_settings(settings)
        store_factory = store_factory or ContextStoreFactory(
            FileStoreEntryRepository(settings.store_state_file)
        )
        webhook_urls = WebhookUrlBuilder(
            backend_urls or backend_url_provider_from_settings(settings)
        )

        return cls(
            lifecycle=TriggerLifecycleManager(
                resolver=resolver,
                job_queue=job_queue,
                engine=engine,
                store_factory=store_factory,
                webhook_urls=webhook_urls,
                polling_cron_expression=settings.polling_cron_expression,
            ),
            dispatcher=TriggerDispatcher(
                resolver=resolver,
                store_factory=store_factory,
                webhook_urls=webhook_urls,
            ),
            job_queue=job_queue,
            engine=engine,
        )
