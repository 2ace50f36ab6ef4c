"""Piece registry and trigger definitions."""

from flow_trigger_orchestrator.pieces.base import (
    Piece,
    TriggerDefinition,
    TriggerHookContext,
    TriggerRunContext,
)
from flow_trigger_orchestrator.pieces.registry import (
    PieceRegistry,
    StrategyResolver,
    load_registry,
)

__all__ = [
    "Piece",
    "PieceRegistry",
    "StrategyResolver",
    "TriggerDefinition",
    "TriggerHookContext",
    "TriggerRunContext",
    "load_registry",
]
