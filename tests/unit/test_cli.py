"""Unit tests for the flow-triggers CLI."""

from __future__ import annotations

import json
import logging
import sys
import types
from collections.abc import Iterator
from pathlib import Path

import pytest

from flow_trigger_orchestrator.main import main
from flow_trigger_orchestrator.models import TriggerStrategy
from flow_trigger_orchestrator.pieces.base import Piece, TriggerDefinition, TriggerRunContext


async def _split_items(ctx: TriggerRunContext) -> list[object]:
    return list(ctx.payload["items"])


@pytest.fixture(autouse=True)
def _env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    piece = Piece(name="batch")
    piece.add_trigger(
        TriggerDefinition(name="items", strategy=TriggerStrategy.WEBHOOK, run_fn=_split_items)
    )
    module = types.ModuleType("cli_test_pieces")
    module.PIECES = [piece]  # type: ignore[attr-defined]
    monkeypatch.setitem(sys.modules, "cli_test_pieces", module)

    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("PIECES_REGISTRY", "cli_test_pieces:PIECES")
    monkeypatch.setenv("BACKEND_URL", "https://backend.example.com")
    monkeypatch.setenv("TRIGGER_STATE_PATH", str(tmp_path / "state"))
    monkeypatch.setenv("LOG_LEVEL", "WARNING")

    # main() reconfigures the root logger.
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _write_json(path: Path, obj: object) -> str:
    path.write_text(json.dumps(obj), encoding="utf-8")
    return str(path)


def test_enable_jobs_disable_schedule(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    flow_version = _write_json(
        tmp_path / "fv.json",
        {
            "id": "fv-1",
            "flowId": "flow-1",
            "trigger": {"type": "SCHEDULE", "settings": {"cronExpression": "0 */5 * * * *"}},
        },
    )
    collection_version = _write_json(
        tmp_path / "cv.json", {"id": "cv-1", "collectionId": "col-1"}
    )
    args = [
        "--flow-version",
        flow_version,
        "--collection-version",
        collection_version,
        "--project-id",
        "proj-1",
    ]

    assert main(["enable", *args]) == 0
    assert main(["jobs"]) == 0
    out = capsys.readouterr().out
    assert "Enabled trigger for flow version fv-1" in out
    assert "fv-1\t0 */5 * * * *\tSCHEDULE" in out

    assert main(["disable", *args]) == 0
    assert main(["jobs"]) == 0
    out = capsys.readouterr().out
    assert "Disabled trigger for flow version fv-1" in out
    assert "SCHEDULE" not in out


def test_execute_prints_payloads(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    flow_version = _write_json(
        tmp_path / "fv.json",
        {
            "id": "fv-2",
            "flowId": "flow-2",
            "trigger": {
                "type": "PIECE",
                "settings": {"pieceName": "batch", "triggerName": "items"},
            },
        },
    )
    payload = _write_json(tmp_path / "payload.json", {"items": [1, 2, 3]})

    code = main(
        ["execute", "--flow-version", flow_version, "--collection-id", "col-1", "--payload", payload]
    )

    assert code == 0
    assert json.loads(capsys.readouterr().out) == [1, 2, 3]


def test_unknown_piece_exit_code(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    flow_version = _write_json(
        tmp_path / "fv.json",
        {
            "id": "fv-3",
            "flowId": "flow-3",
            "trigger": {"type": "PIECE", "settings": {"pieceName": "nope", "triggerName": "t"}},
        },
    )

    code = main(
        ["execute", "--flow-version", flow_version, "--collection-id", "col-1", "--payload", flow_version]
    )

    assert code == 3
    assert "PIECE_NOT_FOUND" in capsys.readouterr().err


def test_missing_file_exit_code(tmp_path: Path) -> None:
    code = main(
        [
            "execute",
            "--flow-version",
            str(tmp_path / "missing.json"),
            "--collection-id",
            "col-1",
        ]
    )

    assert code == 2
