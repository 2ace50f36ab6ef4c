"""REST server exposing trigger enable / disable / execute."""

from flow_trigger_orchestrator.server.app import create_app

__all__ = ["create_app"]
