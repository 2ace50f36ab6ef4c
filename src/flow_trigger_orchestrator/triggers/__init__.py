"""Trigger lifecycle and dispatch."""

from flow_trigger_orchestrator.triggers.dispatcher import TriggerDispatcher
from flow_trigger_orchestrator.triggers.lifecycle import TriggerLifecycleManager

__all__ = ["TriggerDispatcher", "TriggerLifecycleManager"]
