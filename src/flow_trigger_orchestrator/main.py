"""CLI entrypoint for enabling, disabling and executing flow triggers.

Flow versions and collection versions are read from JSON files, the same
shape the REST server accepts.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from flow_trigger_orchestrator import __version__
from flow_trigger_orchestrator.config import TriggerSettings
from flow_trigger_orchestrator.engine.client import EngineClient
from flow_trigger_orchestrator.errors import TriggerError
from flow_trigger_orchestrator.logging import configure_logging
from flow_trigger_orchestrator.models import (
    CollectionVersion,
    EnableOrDisableParams,
    FlowVersion,
)
from flow_trigger_orchestrator.pieces.registry import PieceRegistry, load_registry
from flow_trigger_orchestrator.services import TriggerServices

logger = logging.getLogger(__name__)


def _read_json(value: str) -> Any:
    if value == "-":
        return json.load(sys.stdin)
    return json.loads(Path(value).read_text(encoding="utf-8"))


def _add_lifecycle_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--flow-version",
        required=True,
        help="Path to the flow version JSON document",
    )
    parser.add_argument(
        "--collection-version",
        required=True,
        help="Path to the collection version JSON document",
    )
    parser.add_argument("--project-id", required=True, help="Owning project id")
    parser.add_argument(
        "--collection-id",
        default=None,
        help="Collection id (defaults to the collection version's collection id)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="flow-triggers",
        description="Enable, disable and execute flow triggers",
    )
    parser.add_argument(
        "--version", action="version", version=f"flow-trigger-orchestrator {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    enable = subparsers.add_parser("enable", help="Register a flow version's trigger")
    _add_lifecycle_arguments(enable)

    disable = subparsers.add_parser("disable", help="Unregister a flow version's trigger")
    _add_lifecycle_arguments(disable)

    execute = subparsers.add_parser(
        "execute", help="Turn one inbound payload into flow-run payloads"
    )
    execute.add_argument(
        "--flow-version",
        required=True,
        help="Path to the flow version JSON document",
    )
    execute.add_argument("--collection-id", required=True, help="Collection id")
    execute.add_argument(
        "--payload",
        default="-",
        help="Path to the JSON payload ('-' reads stdin)",
    )

    subparsers.add_parser("jobs", help="List registered recurring jobs")

    return parser


def _lifecycle_params(args: argparse.Namespace) -> EnableOrDisableParams:
    collection_version = CollectionVersion.model_validate(_read_json(args.collection_version))
    return EnableOrDisableParams(
        collection_id=args.collection_id or collection_version.collection_id,
        collection_version=collection_version,
        flow_version=FlowVersion.model_validate(_read_json(args.flow_version)),
        project_id=args.project_id,
    )


async def _run(args: argparse.Namespace, services: TriggerServices) -> int:
    try:
        if args.command == "enable":
            params = _lifecycle_params(args)
            await services.lifecycle.enable(params)
            print(f"Enabled trigger for flow version {params.flow_version.id}")
            return 0

        if args.command == "disable":
            params = _lifecycle_params(args)
            await services.lifecycle.disable(params)
            print(f"Disabled trigger for flow version {params.flow_version.id}")
            return 0

        if args.command == "execute":
            payloads = await services.dispatcher.execute_trigger(
                collection_id=args.collection_id,
                flow_version=FlowVersion.model_validate(_read_json(args.flow_version)),
                payload=_read_json(args.payload),
            )
            print(json.dumps(payloads, indent=2, ensure_ascii=False, default=str))
            return 0

        if args.command == "jobs":
            for job in await services.job_queue.list():
                print(f"{job.key}\t{job.cron_expression}\t{job.data.trigger_type.value}")
            return 0

        logger.error("Unknown command", extra={"command": args.command})
        return 2
    finally:
        if isinstance(services.engine, EngineClient):
            await services.engine.close()


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = TriggerSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    try:
        registry = (
            load_registry(settings.pieces_registry)
            if settings.pieces_registry.strip()
            else PieceRegistry()
        )
        services = TriggerServices.build(settings=settings, registry=registry)
        return asyncio.run(_run(args, services))

    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.error("Invalid input", extra={"error": str(e)})
        print(f"Invalid input: {e}", file=sys.stderr)
        return 2

    except TriggerError as e:
        logger.warning(str(e), extra={"code": e.code.value, "params": e.params})
        print(f"{e.code.value}: {e}", file=sys.stderr)
        return 3

    except Exception:
        logger.exception("Command failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
