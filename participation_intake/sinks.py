"""
Destinations for a parsed record set.

The pipeline never keeps state between documents. Everything that remembers a
previous upload (the stored dataset, the dataset it replaced, upload history)
lives here, on the caller's side.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol, Sequence

import openpyxl
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from participation_intake import __version__ as TOOL_VERSION
from participation_intake.areas import infer_area
from participation_intake.contracts import build_contract, utc_now_iso
from participation_intake.rows import StoreRecord, is_in_range

UNKNOWN_FILE_NAME = "Unknown File"

DATASET_FILE = "dataset.json"
PREVIOUS_FILE = "previous.json"
HISTORY_FILE = "history.json"

WORKBOOK_HEADERS = ["Store", "Participation %", "Area Code", "Area", "Area Number", "In Range"]
HEADER_COLOR = "4CAF50"
FILL_OUT_OF_RANGE = PatternFill("solid", fgColor="FCE4D6")   # soft orange


class RecordSink(Protocol):
    def accept(self, records: Sequence[StoreRecord], *, source_name: str | None = None) -> Path | None:
        ...


@dataclass(frozen=True)
class HistoryEntry:
    file_name: str
    upload_time: str
    record_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "file_name": self.file_name,
            "upload_time": self.upload_time,
            "record_count": self.record_count,
        }


@dataclass(frozen=True)
class Movement:
    store: str
    participation: float
    previous: float | None

    @property
    def delta(self) -> float | None:
        if self.previous is None:
            return None
        return round(self.participation - self.previous, 4)

    def to_dict(self) -> dict[str, Any]:
        return {
            "store": self.store,
            "participation": self.participation,
            "previous": self.previous,
            "delta": self.delta,
        }


def compute_movement(
    previous: Sequence[StoreRecord],
    current: Sequence[StoreRecord],
) -> list[Movement]:
    """Pair every current store with its last known value; first occurrence wins on duplicates."""
    previous_by_store: dict[str, float] = {}
    for record in previous:
        previous_by_store.setdefault(record.store, record.participation)
    return [
        Movement(record.store, record.participation, previous_by_store.get(record.store))
        for record in current
    ]


class DatasetStoreError(Exception):
    """The stored dataset or history on disk cannot be read back."""


def _read_json(path: Path, default: Any) -> Any:
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise DatasetStoreError(f"Stored data file is corrupt: {path} ({exc})") from exc


def _write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")


class JsonDatasetSink:
    """Keeps the current dataset, the one it replaced, and an upload history on disk."""

    def __init__(self, directory: Path, *, record_history: bool = True) -> None:
        self.directory = Path(directory)
        self.record_history = record_history

    @property
    def dataset_path(self) -> Path:
        return self.directory / DATASET_FILE

    @property
    def previous_path(self) -> Path:
        return self.directory / PREVIOUS_FILE

    @property
    def history_path(self) -> Path:
        return self.directory / HISTORY_FILE

    def _load_records(self, path: Path) -> list[StoreRecord]:
        payload = _read_json(path, {"records": []})
        try:
            return [StoreRecord.from_dict(item) for item in payload.get("records", [])]
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise DatasetStoreError(f"Stored dataset has an unexpected shape: {path}") from exc

    def current_records(self) -> list[StoreRecord]:
        return self._load_records(self.dataset_path)

    def previous_records(self) -> list[StoreRecord]:
        return self._load_records(self.previous_path)

    def history(self) -> list[HistoryEntry]:
        try:
            return [HistoryEntry(**item) for item in _read_json(self.history_path, [])]
        except TypeError as exc:
            raise DatasetStoreError(f"Upload history has an unexpected shape: {self.history_path}") from exc

    def accept(self, records: Sequence[StoreRecord], *, source_name: str | None = None) -> Path:
        contract = build_contract("participation_intake.dataset")
        replaced = _read_json(self.dataset_path, None)
        if replaced is not None:
            _write_json(self.previous_path, replaced)

        _write_json(
            self.dataset_path,
            {
                "contract": contract,
                "schema_version": contract["version"],
                "tool_version": TOOL_VERSION,
                "source_file": source_name or UNKNOWN_FILE_NAME,
                "saved_at": utc_now_iso(),
                "records": [record.to_dict() for record in records],
            },
        )

        if self.record_history:
            entries = self.history()
            entries.append(
                HistoryEntry(
                    file_name=source_name or UNKNOWN_FILE_NAME,
                    upload_time=datetime.now().replace(microsecond=0).isoformat(sep=" "),
                    record_count=len(records),
                )
            )
            _write_json(self.history_path, [entry.to_dict() for entry in entries])

        return self.dataset_path


def _style_header(ws, col_widths: list[int]) -> None:
    fill = PatternFill("solid", fgColor=HEADER_COLOR)
    font = Font(bold=True, color="FFFFFF")
    for cell in ws[1]:
        cell.font = font
        cell.fill = fill
        cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=False)
    ws.freeze_panes = "A2"
    for i, width in enumerate(col_widths, start=1):
        ws.column_dimensions[get_column_letter(i)].width = width


class WorkbookSink:
    """Writes the record set with inferred areas to a single-sheet .xlsx file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def accept(self, records: Sequence[StoreRecord], *, source_name: str | None = None) -> Path:
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = "Participation"
        ws.append(WORKBOOK_HEADERS)

        for record in records:
            area = infer_area(record)
            in_range = is_in_range(record.participation)
            ws.append(
                [
                    record.store,
                    record.participation,
                    record.area_code,
                    area.code,
                    area.number,
                    in_range,
                ]
            )
            if not in_range:
                ws.cell(row=ws.max_row, column=2).fill = FILL_OUT_OF_RANGE

        widths = [max(12, min(60, max((len(r.store) for r in records), default=0) + 2)), 16, 12, 12, 12, 10]
        _style_header(ws, widths)
        if source_name:
            wb.properties.title = source_name

        self.path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(self.path)
        return self.path
