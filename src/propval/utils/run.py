from __future__ import annotations

import datetime as _dt
import uuid as _uuid
from pathlib import Path
from typing import Any

from .io import dump_json, write_text


def new_run_id(prefix: str = "run") -> str:
    ts = _dt.datetime.now(_dt.timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    short = str(_uuid.uuid4())[:8]
    return f"{prefix}-{ts}-{short}"


def run_dir(run_id: str, root: str | Path = "artifacts") -> Path:
    p = Path(root) / run_id
    p.mkdir(parents=True, exist_ok=True)
    (p / "logs").mkdir(parents=True, exist_ok=True)
    return p


def log_event(run_id: str, event: str, root: str | Path = "artifacts", **fields: Any) -> None:
    payload: dict[str, Any] = {
        "ts": _dt.datetime.now(_dt.timezone.utc).isoformat(timespec="seconds"),
        "event": event,
        **fields,
    }
    log_path = run_dir(run_id, root) / "logs" / "run.jsonl"
    with log_path.open("a", encoding="utf-8") as f:
        f.write(dump_json(payload) + "\n")


def snapshot_config(
    run_id: str, spec_payload: dict[str, Any], root: str | Path = "artifacts"
) -> None:
    json_path = run_dir(run_id, root) / "config.spec.json"
    write_text(json_path, dump_json(spec_payload))
