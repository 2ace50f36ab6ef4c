"""Piece trigger definitions and the contexts handed to their hooks."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from flow_trigger_orchestrator.models import TriggerStrategy
from flow_trigger_orchestrator.store.context_store import ContextStore


@dataclass(frozen=True, slots=True)
class TriggerHookContext:
    """Inputs for ``on_enable`` / ``on_disable``."""

    store: ContextStore
    webhook_url: str
    props_value: dict[str, Any]


@dataclass(frozen=True, slots=True)
class TriggerRunContext:
    """Inputs for ``run``: the hook inputs plus the raw inbound payload."""

    store: ContextStore
    webhook_url: str
    props_value: dict[str, Any]
    payload: Any


RunFn = Callable[[TriggerRunContext], Awaitable[list[Any] | None]]
HookFn = Callable[[TriggerHookContext], Awaitable[None]]


async def _noop_hook(_ctx: TriggerHookContext) -> None:
    return None


@dataclass(frozen=True, slots=True)
class TriggerDefinition:
    """A trigger exposed by a piece.

    ``run`` turns one raw event into flow-run payloads (the piece decides the
    fan-out). The hooks only matter for WEBHOOK triggers. ``on_enable`` is
    invoked by the execution engine, which receives an ON_ENABLE request
    instead of a local call; the lifecycle manager never runs it in-process.
    ``on_disable`` runs locally after the engine has handled ON_DISABLE.
    """

    name: str
    strategy: TriggerStrategy
    run_fn: RunFn
    on_enable_fn: HookFn = _noop_hook
    on_disable_fn: HookFn = _noop_hook
    display_name: str = ""
    description: str = ""

    async def run(self, ctx: TriggerRunContext) -> list[Any]:
        payloads = await self.run_fn(ctx)
        return [] if payloads is None else payloads

    async def on_enable(self, ctx: TriggerHookContext) -> None:
        await self.on_enable_fn(ctx)

    async def on_disable(self, ctx: TriggerHookContext) -> None:
        await self.on_disable_fn(ctx)


@dataclass(slots=True)
class Piece:
    name: str
    display_name: str = ""
    triggers: dict[str, TriggerDefinition] = field(default_factory=dict)

    def get_trigger(self, trigger_name: str) -> TriggerDefinition | None:
        return self.triggers.get(trigger_name)

    def add_trigger(self, trigger: TriggerDefinition) -> None:
        self.triggers[trigger.name] = trigger
