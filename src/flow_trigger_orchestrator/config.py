"""Configuration for the trigger orchestrator.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

Nothing is required at startup. When ``BACKEND_URL`` is empty the webhook base
URL is discovered from the host's public IP on each call.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

EVERY_FIFTEEN_MINUTES = "* 15 * * * *"


class TriggerSettings(BaseSettings):
    """Settings for the trigger lifecycle and dispatch services.

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `TriggerSettings(_env_file=path_to_env)`.
    """

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    backend_url: str = Field(
        default="",
        validation_alias="BACKEND_URL",
        description=(
            "Externally reachable base URL of the backend, used to build webhook URLs. "
            "Leave empty to discover it from the public IP."
        ),
    )
    backend_port: int = Field(
        default=3000,
        validation_alias="BACKEND_PORT",
        ge=1,
        le=65535,
        description="Port appended to the discovered public IP.",
    )
    public_ip_lookup_url: str = Field(
        default="https://api.ipify.org?format=json",
        validation_alias="PUBLIC_IP_LOOKUP_URL",
        description="Service returning {'ip': '<address>'} for the calling host.",
    )
    public_ip_timeout_seconds: float = Field(
        default=10.0,
        validation_alias="PUBLIC_IP_TIMEOUT_SECONDS",
        gt=0,
    )

    engine_url: str = Field(
        default="http://localhost:3001",
        validation_alias="ENGINE_URL",
        description="Base URL of the remote execution engine that runs trigger hooks.",
    )
    engine_token: str = Field(default="", validation_alias="ENGINE_TOKEN")
    engine_timeout_seconds: float = Field(
        default=30.0,
        validation_alias="ENGINE_TIMEOUT_SECONDS",
        gt=0,
    )

    polling_cron_expression: str = Field(
        default=EVERY_FIFTEEN_MINUTES,
        validation_alias="POLLING_CRON_EXPRESSION",
        min_length=1,
        description="Cadence of the recurring job registered for POLLING piece triggers.",
    )

    pieces_registry: str = Field(
        default="",
        validation_alias="PIECES_REGISTRY",
        description=(
            "Import reference ('package.module:attribute') of the piece registry. "
            "Empty means no pieces are available, so every piece trigger fails to resolve."
        ),
    )

    trigger_state_path: Path = Field(
        default=Path("trigger_state"),
        validation_alias="TRIGGER_STATE_PATH",
        description="Directory where recurring jobs and store entries are persisted",
    )

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")

    @property
    def jobs_state_file(self) -> Path:
        """Path where recurring job registrations are persisted."""

        return self.trigger_state_path / "jobs.json"

    @property
    def store_state_file(self) -> Path:
        return self.trigger_state_path / "store.json"
