"""Derive area identifiers from explicit codes or store names."""

from __future__ import annotations

import re
from dataclasses import dataclass

from participation_intake.rows import StoreRecord

EXPLICIT_CODE_RE = re.compile(r"A(\d+)", re.ASCII)
STORE_CODE_RE = re.compile(r"A(\d{3})", re.IGNORECASE | re.ASCII)
AREA_PHRASE_RE = re.compile(r"area\s*([0-9]+)", re.IGNORECASE)

UNKNOWN_CODE = "UNKNOWN"


@dataclass(frozen=True)
class AreaInfo:
    code: str
    number: int
    display: str

    @property
    def is_known(self) -> bool:
        return self.code != UNKNOWN_CODE

    def to_dict(self) -> dict:
        return {"code": self.code, "number": self.number, "display": self.display}


UNKNOWN_AREA = AreaInfo(code=UNKNOWN_CODE, number=0, display="No Area")


def area_label(number: int) -> str:
    return f"Area {number}"


def canonical_area_code(number: int) -> str:
    return f"A{number:03d}"


def infer_area(record: StoreRecord) -> AreaInfo:
    """
    Resolve an area for one record, most confident source first:

    1. the explicit area code column (any ``A<digits>`` inside it)
    2. a strict ``A<3 digits>`` token in the store name
    3. a looser ``area <digits>`` phrase in the store name
    """
    explicit = (record.area_code or "").strip().upper()
    if explicit:
        match = EXPLICIT_CODE_RE.search(explicit)
        if match:
            number = int(match.group(1))
            return AreaInfo(code=explicit, number=number, display=area_label(number))

    match = STORE_CODE_RE.search(record.store)
    if match:
        number = int(match.group(1))
        return AreaInfo(code=match.group(0).upper(), number=number, display=area_label(number))

    match = AREA_PHRASE_RE.search(record.store)
    if match:
        number = int(match.group(1))
        return AreaInfo(code=canonical_area_code(number), number=number, display=area_label(number))

    return UNKNOWN_AREA


def area_key(record: StoreRecord) -> str:
    """Grouping key used when counting areas: the raw code if given, else the inferred one."""
    return record.area_code or infer_area(record).code
