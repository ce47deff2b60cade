"""Shared versioned contracts for participation-intake JSON outputs."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

CONTRACT_VERSIONS = {
    "participation_intake.ingest": "1.0.0",
    "participation_intake.dataset": "1.0.0",
    "participation_intake.areas": "1.0.0",
}


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def build_contract(name: str) -> dict[str, str]:
    version = CONTRACT_VERSIONS[name]
    return {"name": name, "version": version}


def build_run_summary(
    *,
    command: str,
    input_path: Path,
    status: str = "ok",
    output_path: Path | None = None,
    metrics: dict[str, Any] | None = None,
    warnings: list[str] | None = None,
) -> dict[str, Any]:
    return {
        "tool": "participation-intake",
        "command": command,
        "status": status,
        "generated_at": utc_now_iso(),
        "input_file": str(input_path),
        "output_file": str(output_path) if output_path else None,
        "warnings_count": len(warnings or []),
        "warnings": list(warnings or []),
        "metrics": metrics or {},
    }
