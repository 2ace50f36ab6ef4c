"""Domain models shared by the trigger lifecycle and dispatch layers.

A flow version is an immutable snapshot of a flow. It carries exactly one
trigger, modelled as a closed discriminated union on ``type``.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

FlowId = str
FlowVersionId = str
CollectionId = str
CollectionVersionId = str
ProjectId = str


class TriggerType(str, Enum):
    PIECE = "PIECE"
    SCHEDULE = "SCHEDULE"
    EMPTY = "EMPTY"


class TriggerStrategy(str, Enum):
    WEBHOOK = "WEBHOOK"
    POLLING = "POLLING"


class TriggerHookType(str, Enum):
    ON_ENABLE = "ON_ENABLE"
    ON_DISABLE = "ON_DISABLE"


class RunEnvironment(str, Enum):
    PRODUCTION = "PRODUCTION"
    TESTING = "TESTING"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class PieceTriggerSettings(_Frozen):
    piece_name: str = Field(min_length=1)
    trigger_name: str = Field(min_length=1)
    input: dict[str, Any] = Field(default_factory=dict)


class ScheduleTriggerSettings(_Frozen):
    cron_expression: str = Field(min_length=1)


class PieceTrigger(_Frozen):
    type: Literal["PIECE"] = "PIECE"
    name: str = "trigger"
    settings: PieceTriggerSettings


class ScheduleTrigger(_Frozen):
    type: Literal["SCHEDULE"] = "SCHEDULE"
    name: str = "trigger"
    settings: ScheduleTriggerSettings


class EmptyTrigger(_Frozen):
    type: Literal["EMPTY"] = "EMPTY"
    name: str = "trigger"
    settings: dict[str, Any] = Field(default_factory=dict)


Trigger = Annotated[
    PieceTrigger | ScheduleTrigger | EmptyTrigger,
    Field(discriminator="type"),
]


class FlowVersion(_Frozen):
    """One published or edited snapshot of a flow."""

    id: FlowVersionId
    flow_id: FlowId
    display_name: str = ""
    trigger: Trigger


class CollectionVersion(_Frozen):
    id: CollectionVersionId
    collection_id: CollectionId
    display_name: str = ""


class EnableOrDisableParams(_Frozen):
    collection_id: CollectionId
    collection_version: CollectionVersion
    flow_version: FlowVersion
    project_id: ProjectId


class RepeatableJobData(_Frozen):
    """Payload stored with a recurring job and consumed later by the run engine."""

    environment: RunEnvironment
    collection_id: CollectionId
    collection_version_id: CollectionVersionId
    flow_version: FlowVersion
    trigger_type: TriggerType


class ScheduledJob(_Frozen):
    key: FlowVersionId
    data: RepeatableJobData
    cron_expression: str
    created_at: datetime
    updated_at: datetime


class EngineHookRequest(_Frozen):
    hook_type: TriggerHookType
    flow_version: FlowVersion
    webhook_url: str
    collection_version: CollectionVersion
    project_id: ProjectId
