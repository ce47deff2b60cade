"""Whole-document orchestration: text in, ordered store records out."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from participation_intake.errors import EmptyOrHeaderOnly, MissingRequiredColumns, NoValidRows
from participation_intake.headers import HeaderMapping, resolve_headers
from participation_intake.rows import ROW_SKIPPED, ROW_VALID_WITH_WARNING, RowOutcome, StoreRecord, parse_row
from participation_intake.tokenizer import tokenize

logger = logging.getLogger(__name__)

BOM = "\ufeff"


@dataclass(frozen=True)
class ParsedDocument:
    headers: list[str]
    mapping: HeaderMapping
    outcomes: list[RowOutcome] = field(default_factory=list)

    @property
    def records(self) -> tuple[StoreRecord, ...]:
        return tuple(outcome.record for outcome in self.outcomes if outcome.record is not None)

    @property
    def warnings(self) -> list[str]:
        return [
            outcome.reason
            for outcome in self.outcomes
            if outcome.status == ROW_VALID_WITH_WARNING and outcome.reason
        ]

    @property
    def skipped(self) -> list[RowOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status == ROW_SKIPPED]


def _normalize_newlines(raw_text: str) -> str:
    if raw_text.startswith(BOM):
        raw_text = raw_text[len(BOM):]
    return raw_text.replace("\r\n", "\n").replace("\r", "\n")


def split_lines(raw_text: str) -> list[str]:
    text = _normalize_newlines(raw_text).strip()
    if not text:
        return []
    return text.split("\n")


def leading_line_offset(raw_text: str) -> int:
    """Number of file lines trimmed away before the header line."""
    text = _normalize_newlines(raw_text)
    return text[: len(text) - len(text.lstrip())].count("\n")


def parse_document(raw_text: str) -> ParsedDocument:
    lines = split_lines(raw_text)
    if len(lines) < 2:
        raise EmptyOrHeaderOnly()

    headers = tokenize(lines[0])
    logger.debug("Detected headers: %s", headers)
    mapping = resolve_headers(headers)
    logger.debug("Resolved columns: %s", mapping.to_dict())
    if not mapping.is_usable:
        raise MissingRequiredColumns(headers, mapping.missing_roles)

    outcomes: list[RowOutcome] = []
    first_data_line = leading_line_offset(raw_text) + 2
    for line_number, line in enumerate(lines[1:], start=first_data_line):
        if not line.strip():
            continue
        outcome = parse_row(tokenize(line), mapping, line_number)
        if outcome.status == ROW_SKIPPED:
            logger.debug("Skipping line %d: %s", line_number, outcome.reason)
        elif outcome.status == ROW_VALID_WITH_WARNING:
            logger.warning("Line %d: %s", line_number, outcome.reason)
        outcomes.append(outcome)

    document = ParsedDocument(headers=headers, mapping=mapping, outcomes=outcomes)
    if not document.records:
        raise NoValidRows(skipped_rows=len(document.skipped))
    return document


def process_document(raw_text: str) -> tuple[StoreRecord, ...]:
    """Parse a CSV document into store records in file order, or raise a DocumentError."""
    return parse_document(raw_text).records
