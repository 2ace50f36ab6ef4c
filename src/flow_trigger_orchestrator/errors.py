"""Error kinds raised by the trigger core and its adapters.

Every error carries a stable :class:`ErrorCode` and the parameters that
identify the failing reference, so callers can map them to user-facing
validation messages or retry policies without parsing strings.
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    PIECE_NOT_FOUND = "PIECE_NOT_FOUND"
    PIECE_TRIGGER_NOT_FOUND = "PIECE_TRIGGER_NOT_FOUND"
    BACKEND_URL_UNAVAILABLE = "BACKEND_URL_UNAVAILABLE"
    REMOTE_HOOK_FAILURE = "REMOTE_HOOK_FAILURE"
    QUEUE_OPERATION_FAILURE = "QUEUE_OPERATION_FAILURE"
    STORE_OPERATION_FAILURE = "STORE_OPERATION_FAILURE"


class TriggerError(Exception):
    code: ErrorCode

    def __init__(self, message: str, **params: object) -> None:
        super().__init__(message)
        self.params: dict[str, object] = params

    def to_json(self) -> dict[str, object]:
        return {"code": self.code.value, "message": str(self), "params": self.params}


class PieceNotFound(TriggerError):
    code = ErrorCode.PIECE_NOT_FOUND

    def __init__(self, piece_name: str) -> None:
        super().__init__(f"Piece not found: {piece_name}", piece_name=piece_name)
        self.piece_name = piece_name


class TriggerNotFound(TriggerError):
    code = ErrorCode.PIECE_TRIGGER_NOT_FOUND

    def __init__(self, piece_name: str, trigger_name: str) -> None:
        super().__init__(
            f"Trigger {trigger_name!r} not found on piece {piece_name!r}",
            piece_name=piece_name,
            trigger_name=trigger_name,
        )
        self.piece_name = piece_name
        self.trigger_name = trigger_name


class BackendUrlUnavailable(TriggerError):
    code = ErrorCode.BACKEND_URL_UNAVAILABLE


class RemoteHookFailure(TriggerError):
    code = ErrorCode.REMOTE_HOOK_FAILURE


class QueueOperationFailure(TriggerError):
    code = ErrorCode.QUEUE_OPERATION_FAILURE


class StoreOperationFailure(TriggerError):
    code = ErrorCode.STORE_OPERATION_FAILURE
