"""
loader.py — reads an uploaded participation CSV from disk

Public API:
    upload = load_upload("path/to/participation.csv")
    records = process_document(upload.text)

The loader owns the caller-side concerns the pipeline does not: the file-type
check, byte decoding and encoding diagnostics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import chardet

from participation_intake.errors import InvalidFileType

ACCEPTED_SUFFIXES = {".csv"}
FALLBACK_ENCODINGS = ("latin-1",)


@dataclass(frozen=True)
class LoadedUpload:
    path: Path
    text: str
    encoding: str
    confidence: float
    warnings: list[str] = field(default_factory=list)

    @property
    def file_name(self) -> str:
        return self.path.name


# ══════════════════════════════════════════════════════════════════════════════
# FILE TYPE
# ══════════════════════════════════════════════════════════════════════════════

def check_file_type(path: Path) -> None:
    if path.suffix.lower() not in ACCEPTED_SUFFIXES:
        raise InvalidFileType(path.name)


# ══════════════════════════════════════════════════════════════════════════════
# ENCODING DETECTION
# ══════════════════════════════════════════════════════════════════════════════

def detect_encoding(raw: bytes) -> tuple[str, float]:
    """Best-effort encoding guess; ("unknown", 0.0) when chardet has no opinion."""
    result = chardet.detect(raw)
    detected = result.get("encoding") or "unknown"
    confidence = round(result.get("confidence") or 0.0, 2)
    return detected, confidence


def decode_text(raw: bytes, preferred_encoding: str) -> tuple[str, int]:
    """
    Decode raw bytes line by line.

    Strategy per line:
      1. Try UTF-8
      2. Try preferred_encoding (chardet result)
      3. Try latin-1
      4. CP1252 with replace (never crashes)

    Embedded null bytes are dropped. Returns the text and the number of lines
    that needed a fallback encoding.
    """
    decoded_lines: list[str] = []
    fallback_lines = 0
    for raw_line in raw.split(b"\n"):
        decoded: str | None = None
        for index, enc in enumerate(("utf-8", preferred_encoding, *FALLBACK_ENCODINGS)):
            if not enc or enc == "unknown":
                continue
            try:
                decoded = raw_line.decode(enc)
            except (LookupError, UnicodeDecodeError):
                continue
            if index > 0:
                fallback_lines += 1
            break
        if decoded is None:
            decoded = raw_line.decode("cp1252", errors="replace")
            fallback_lines += 1
        decoded_lines.append(decoded.replace("\x00", ""))
    return "\n".join(decoded_lines), fallback_lines


# ══════════════════════════════════════════════════════════════════════════════
# PUBLIC API
# ══════════════════════════════════════════════════════════════════════════════

def load_upload(path: Path | str) -> LoadedUpload:
    path = Path(path)
    check_file_type(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    raw = path.read_bytes()
    encoding, confidence = detect_encoding(raw)
    text, fallback_lines = decode_text(raw, encoding)

    warnings: list[str] = []
    if b"\x00" in raw:
        warnings.append("Null bytes were removed from the file")
    if fallback_lines:
        warnings.append(
            f"{fallback_lines} line(s) were not valid UTF-8 and were decoded with a fallback encoding"
        )

    return LoadedUpload(
        path=path,
        text=text,
        encoding=encoding,
        confidence=confidence,
        warnings=warnings,
    )
