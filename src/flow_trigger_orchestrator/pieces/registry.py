"""Piece lookup and trigger strategy resolution."""

from __future__ import annotations

import importlib
import logging
from collections.abc import Iterable

from flow_trigger_orchestrator.errors import PieceNotFound, TriggerNotFound
from flow_trigger_orchestrator.models import PieceTrigger

from .base import Piece, TriggerDefinition

logger = logging.getLogger(__name__)


class PieceRegistry:
    """Name -> piece mapping injected into the trigger core.

    The core does not care how pieces are loaded; tests build a registry with
    a handful of fake pieces.
    """

    def __init__(self, pieces: Iterable[Piece] = ()) -> None:
        self._pieces: dict[str, Piece] = {}
        for piece in pieces:
            self.register(piece)

    def register(self, piece: Piece) -> None:
        if piece.name in self._pieces:
            raise ValueError(f"Piece already registered: {piece.name}")
        self._pieces[piece.name] = piece

    def find_piece(self, name: str) -> Piece | None:
        return self._pieces.get(name)

    def names(self) -> list[str]:
        return sorted(self._pieces)


class StrategyResolver:
    def __init__(self, registry: PieceRegistry) -> None:
        self._registry = registry

    def resolve(self, piece_name: str, trigger_name: str) -> TriggerDefinition:
        """Return the trigger implementation for ``piece_name``/``trigger_name``.

        Raises:
            PieceNotFound: No piece is registered under ``piece_name``.
            TriggerNotFound: The piece exists but has no ``trigger_name`` trigger.
        """

        piece = self._registry.find_piece(piece_name)
        if piece is None:
            raise PieceNotFound(piece_name)

        trigger = piece.get_trigger(trigger_name)
        if trigger is None:
            raise TriggerNotFound(piece_name, trigger_name)

        logger.debug(
            "Resolved piece trigger",
            extra={
                "piece_name": piece_name,
                "trigger_name": trigger_name,
                "strategy": trigger.strategy.value,
            },
        )
        return trigger

    def resolve_for(self, trigger: PieceTrigger) -> TriggerDefinition:
        return self.resolve(trigger.settings.piece_name, trigger.settings.trigger_name)


def load_registry(reference: str) -> PieceRegistry:
    """Import a registry from ``"package.module:attribute"``.

    The attribute may be a :class:`PieceRegistry`, an iterable of pieces, or a
    zero-argument callable returning either.
    """

    module_name, sep, attr = reference.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Invalid pieces registry reference: {reference!r}")

    target: object = getattr(importlib.import_module(module_name), attr)
    if callable(target) and not isinstance(target, PieceRegistry):
        target = target()
    if isinstance(target, PieceRegistry):
        return target
    if isinstance(target, Iterable):
        return PieceRegistry(target)
    raise TypeError(f"{reference!r} is not a piece registry")
