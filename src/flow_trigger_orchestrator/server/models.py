"""Pydantic models for the REST server."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from flow_trigger_orchestrator.models import CollectionId, FlowVersion


class ExecuteTriggerRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    collection_id: CollectionId
    flow_version: FlowVersion
    payload: Any = None


class ExecuteTriggerResponse(BaseModel):
    payloads: list[Any] = Field(default_factory=list)


class ApiError(BaseModel):
    code: str
    message: str
    params: dict[str, object] = Field(default_factory=dict)
