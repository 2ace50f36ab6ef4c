#!/usr/bin/env python3
"""Programmatic trigger lifecycle example.

This demonstrates using the trigger services directly:

* define a piece with a polling trigger
* enable a flow version (registers a recurring job)
* execute the trigger against a sample payload
* disable the flow version (removes the job)

Jobs stay in memory and engine hooks are printed instead of sent, so the
example needs no running engine. Set BACKEND_URL to skip public IP discovery.
"""

from __future__ import annotations

import argparse
import asyncio
from typing import Any, Sequence

from flow_trigger_orchestrator.config import TriggerSettings
from flow_trigger_orchestrator.logging import configure_logging
from flow_trigger_orchestrator.models import (
    CollectionVersion,
    EngineHookRequest,
    EnableOrDisableParams,
    FlowVersion,
    PieceTrigger,
    PieceTriggerSettings,
    TriggerStrategy,
)
from flow_trigger_orchestrator.pieces import Piece, PieceRegistry, TriggerDefinition, TriggerRunContext
from flow_trigger_orchestrator.scheduling import InMemoryScheduledJobQueue
from flow_trigger_orchestrator.services import TriggerServices
from flow_trigger_orchestrator.store import ContextStoreFactory, InMemoryStoreEntryRepository
from flow_trigger_orchestrator.webhooks import StaticBackendUrlProvider


async def _new_rows(ctx: TriggerRunContext) -> list[Any]:
    last_row = await ctx.store.get("last_row") or 0
    rows = [row for row in ctx.payload["rows"] if row["row"] > last_row]
    if rows:
        await ctx.store.put("last_row", rows[-1]["row"])
    return rows


class PrintingEngine:
    async def execute_trigger_hook(self, request: EngineHookRequest) -> None:
        print(f"engine hook {request.hook_type.value} -> {request.webhook_url}")


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Enable, run and disable a polling trigger.")
    parser.add_argument("--flow-id", default="flow-demo", help="Flow id used in the webhook URL")
    return parser.parse_args(argv)


async def _run(flow_id: str) -> None:
    settings = TriggerSettings()
    configure_logging(settings.log_level)

    sheets = Piece(name="google-sheets")
    sheets.add_trigger(
        TriggerDefinition(name="new-row", strategy=TriggerStrategy.POLLING, run_fn=_new_rows)
    )

    job_queue = InMemoryScheduledJobQueue()
    services = TriggerServices.build(
        settings=settings,
        registry=PieceRegistry([sheets]),
        job_queue=job_queue,
        engine=PrintingEngine(),
        store_factory=ContextStoreFactory(InMemoryStoreEntryRepository()),
        backend_urls=StaticBackendUrlProvider(settings.backend_url or "http://localhost:3000"),
    )

    flow_version = FlowVersion(
        id=f"{flow_id}-v1",
        flow_id=flow_id,
        trigger=PieceTrigger(
            settings=PieceTriggerSettings(
                piece_name="google-sheets", trigger_name="new-row", input={"sheet": "Leads"}
            )
        ),
    )
    params = EnableOrDisableParams(
        collection_id="demo-collection",
        collection_version=CollectionVersion(id="demo-cv", collection_id="demo-collection"),
        flow_version=flow_version,
        project_id="demo-project",
    )

    await services.lifecycle.enable(params)
    for job in await job_queue.list():
        print(f"registered job {job.key} ({job.cron_expression})")

    payloads = await services.dispatcher.execute_trigger(
        collection_id="demo-collection",
        flow_version=flow_version,
        payload={"rows": [{"row": 1, "name": "Ada"}, {"row": 2, "name": "Grace"}]},
    )
    print(f"flow runs to start: {payloads}")

    await services.lifecycle.disable(params)
    print(f"jobs after disable: {len(await job_queue.list())}")


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    asyncio.run(_run(args.flow_id))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
