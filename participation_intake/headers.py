"""Map free-form header titles onto the store / participation / area-code roles."""

from __future__ import annotations

import re
from dataclasses import dataclass

ROLE_STORE = "store"
ROLE_PARTICIPATION = "participation"
ROLE_AREA_CODE = "area_code"

REQUIRED_ROLES = (ROLE_STORE, ROLE_PARTICIPATION)

# Evaluated in order; every role takes the left-most header that matches.
ROLE_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (ROLE_STORE, ("store", "storename", "shop", "branch", "location", "sitename", "outlet")),
    (
        ROLE_PARTICIPATION,
        (
            "participation%",
            "participation",
            "participationpercent",
            "participationpercentage",
            "percent",
            "percentage",
        ),
    ),
    (ROLE_AREA_CODE, ("areacode",)),
)

WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class HeaderMapping:
    store_column: int | None
    participation_column: int | None
    area_code_column: int | None = None

    @property
    def is_usable(self) -> bool:
        return self.store_column is not None and self.participation_column is not None

    @property
    def missing_roles(self) -> list[str]:
        missing = []
        if self.store_column is None:
            missing.append(ROLE_STORE)
        if self.participation_column is None:
            missing.append(ROLE_PARTICIPATION)
        return missing

    @property
    def max_index(self) -> int:
        """Highest column index a data row must reach to be parseable."""
        if not self.is_usable:
            raise ValueError("header mapping is missing required columns")
        indices = [self.store_column, self.participation_column]
        if self.area_code_column is not None:
            indices.append(self.area_code_column)
        return max(indices)

    def to_dict(self) -> dict[str, int | None]:
        return {
            ROLE_STORE: self.store_column,
            ROLE_PARTICIPATION: self.participation_column,
            ROLE_AREA_CODE: self.area_code_column,
        }


def normalize_header(header: str) -> str:
    return WHITESPACE_RE.sub("", header.strip()).lower()


def match_role(normalized_header: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in normalized_header for keyword in keywords)


def resolve_headers(header_fields: list[str]) -> HeaderMapping:
    normalized = [normalize_header(header) for header in header_fields]
    resolved: dict[str, int | None] = {}
    for role, keywords in ROLE_KEYWORDS:
        resolved[role] = next(
            (index for index, header in enumerate(normalized) if match_role(header, keywords)),
            None,
        )
    return HeaderMapping(
        store_column=resolved[ROLE_STORE],
        participation_column=resolved[ROLE_PARTICIPATION],
        area_code_column=resolved[ROLE_AREA_CODE],
    )
