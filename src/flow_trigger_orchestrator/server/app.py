"""FastAPI app factory.

Endpoints are intentionally thin wrappers over the trigger services. Flow
publish / unpublish workflows call enable / disable; the run dispatch layer
calls execute with each inbound event.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from flow_trigger_orchestrator import __version__
from flow_trigger_orchestrator.config import TriggerSettings
from flow_trigger_orchestrator.engine.client import EngineClient
from flow_trigger_orchestrator.errors import ErrorCode, TriggerError
from flow_trigger_orchestrator.models import EnableOrDisableParams, FlowVersionId, ScheduledJob
from flow_trigger_orchestrator.pieces.registry import PieceRegistry, load_registry
from flow_trigger_orchestrator.server.models import (
    ApiError,
    ExecuteTriggerRequest,
    ExecuteTriggerResponse,
)
from flow_trigger_orchestrator.services import TriggerServices

logger = logging.getLogger(__name__)

_STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.PIECE_NOT_FOUND: 404,
    ErrorCode.PIECE_TRIGGER_NOT_FOUND: 404,
    ErrorCode.BACKEND_URL_UNAVAILABLE: 502,
    ErrorCode.REMOTE_HOOK_FAILURE: 502,
    ErrorCode.QUEUE_OPERATION_FAILURE: 502,
    ErrorCode.STORE_OPERATION_FAILURE: 502,
}


class FlowVersionLocks:
    """One asyncio lock per flow version id.

    Serializes enable / disable for the same flow version so an interleaved
    disable-then-enable pair cannot leave the wrong registration behind.
    Locks are dropped once nobody holds or waits on them.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[FlowVersionId, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def for_key(self, key: FlowVersionId) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock


def create_app(services: TriggerServices | None = None) -> FastAPI:
    settings = TriggerSettings()

    if services is None:
        registry = (
            load_registry(settings.pieces_registry)
            if settings.pieces_registry.strip()
            else PieceRegistry()
        )
        services = TriggerServices.build(settings=settings, registry=registry)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        if isinstance(services.engine, EngineClient):
            await services.engine.close()

    app = FastAPI(
        title="Flow Trigger Orchestrator",
        version=__version__,
        description="REST API over the flow trigger lifecycle and dispatch services.",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.services = services
    locks = FlowVersionLocks()

    @app.exception_handler(TriggerError)
    async def trigger_error_handler(_request: Request, exc: TriggerError) -> JSONResponse:
        status_code = _STATUS_BY_CODE.get(exc.code, 500)
        logger.warning(
            "Trigger operation failed",
            extra={"code": exc.code.value, "status_code": status_code},
        )
        body = ApiError(code=exc.code.value, message=str(exc), params=exc.params)
        return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))

    @app.get("/api/v1/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    @app.post("/api/v1/triggers/enable", status_code=204)
    async def enable(params: EnableOrDisableParams) -> None:
        async with locks.for_key(params.flow_version.id):
            await services.lifecycle.enable(params)

    @app.post("/api/v1/triggers/disable", status_code=204)
    async def disable(params: EnableOrDisableParams) -> None:
        async with locks.for_key(params.flow_version.id):
            await services.lifecycle.disable(params)

    @app.post("/api/v1/triggers/execute", response_model=ExecuteTriggerResponse)
    async def execute(req: ExecuteTriggerRequest) -> ExecuteTriggerResponse:
        payloads = await services.dispatcher.execute_trigger(
            collection_id=req.collection_id,
            flow_version=req.flow_version,
            payload=req.payload,
        )
        return ExecuteTriggerResponse(payloads=payloads)

    @app.get("/api/v1/jobs", response_model=list[ScheduledJob])
    async def list_jobs() -> list[ScheduledJob]:
        return await services.job_queue.list()

    return app
