"""Turn tokenized data rows into validated store records."""

from __future__ import annotations

import re
from dataclasses import dataclass

from participation_intake.headers import HeaderMapping

PARTICIPATION_MIN = 0.0
PARTICIPATION_MAX = 100.0

ROW_VALID = "valid"
ROW_VALID_WITH_WARNING = "valid_with_warning"
ROW_SKIPPED = "skipped"

SKIP_SHORT_ROW = "row has fewer fields than the mapped columns"
SKIP_EMPTY_STORE = "store value is empty"
SKIP_EMPTY_PARTICIPATION = "participation value is empty"
SKIP_NOT_A_NUMBER = "participation value is not a number"

LEADING_NUMBER_RE = re.compile(
    r"^\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))", re.ASCII
)


@dataclass(frozen=True)
class StoreRecord:
    store: str
    participation: float
    area_code: str | None = None

    def to_dict(self) -> dict:
        payload: dict = {"store": self.store, "participation": self.participation}
        if self.area_code:
            payload["area_code"] = self.area_code
        return payload

    @classmethod
    def from_dict(cls, payload: dict) -> "StoreRecord":
        return cls(
            store=str(payload["store"]),
            participation=float(payload["participation"]),
            area_code=payload.get("area_code") or None,
        )


@dataclass(frozen=True)
class RowOutcome:
    line_number: int
    status: str
    record: StoreRecord | None = None
    reason: str | None = None

    @property
    def accepted(self) -> bool:
        return self.status != ROW_SKIPPED


def clean_participation(raw: str) -> float | None:
    """
    Strip `%` signs and thousands commas, then read the leading number.

    Trailing text after the number is ignored ("95 pts" reads as 95.0).
    A leading "Infinity" or an overflowing exponent reads as infinity and is
    kept; returns None only when no number can be read.
    """
    cleaned = raw.replace("%", "").replace(",", "")
    match = LEADING_NUMBER_RE.match(cleaned)
    if not match:
        return None
    return float(match.group(1))


def is_in_range(value: float) -> bool:
    return PARTICIPATION_MIN <= value <= PARTICIPATION_MAX


def _field(fields: list[str], index: int) -> str:
    return fields[index].strip()


def parse_row(fields: list[str], mapping: HeaderMapping, line_number: int = 0) -> RowOutcome:
    if len(fields) <= mapping.max_index:
        return RowOutcome(line_number, ROW_SKIPPED, reason=SKIP_SHORT_ROW)

    store = _field(fields, mapping.store_column)
    participation_raw = _field(fields, mapping.participation_column)
    if not store:
        return RowOutcome(line_number, ROW_SKIPPED, reason=SKIP_EMPTY_STORE)
    if not participation_raw:
        return RowOutcome(line_number, ROW_SKIPPED, reason=SKIP_EMPTY_PARTICIPATION)

    participation = clean_participation(participation_raw)
    if participation is None:
        return RowOutcome(line_number, ROW_SKIPPED, reason=SKIP_NOT_A_NUMBER)

    area_code = None
    if mapping.area_code_column is not None:
        area_code = _field(fields, mapping.area_code_column) or None

    record = StoreRecord(store=store, participation=participation, area_code=area_code)
    if is_in_range(participation):
        return RowOutcome(line_number, ROW_VALID, record=record)
    return RowOutcome(
        line_number,
        ROW_VALID_WITH_WARNING,
        record=record,
        reason=f"Suspicious participation value for {store}: {participation:g}%",
    )
