"""Remote execution engine integration."""

from flow_trigger_orchestrator.engine.client import EngineClient, RemoteEngine

__all__ = ["EngineClient", "RemoteEngine"]
