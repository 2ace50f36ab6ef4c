"""Flow Trigger Orchestrator.

Registers, unregisters and dispatches flow triggers:
- schedule and polling triggers become recurring jobs keyed by flow version
- webhook triggers are subscribed through the remote execution engine
- inbound payloads are shaped into flow-run payloads by the piece trigger
"""

__version__ = "0.1.0"

from flow_trigger_orchestrator.config import TriggerSettings

__all__ = ["__version__", "TriggerSettings"]
