"""Document-level rejections raised by the intake pipeline.

Row-level problems never surface here: a malformed row is skipped and the
rest of the document is still parsed. Only whole-document failures raise.
"""

from __future__ import annotations


class DocumentError(Exception):
    """Base class for every rejection of a whole document."""

    code = "document_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, object]:
        return {"code": self.code, "message": self.message}


class InvalidFileType(DocumentError):
    code = "invalid_file_type"

    def __init__(self, file_name: str) -> None:
        super().__init__(f"Please select a valid CSV file (got '{file_name}').")
        self.file_name = file_name

    def to_dict(self) -> dict[str, object]:
        return {**super().to_dict(), "file_name": self.file_name}


class EmptyOrHeaderOnly(DocumentError):
    code = "empty_or_header_only"

    def __init__(self) -> None:
        super().__init__("CSV file must contain at least a header and one data row.")


class MissingRequiredColumns(DocumentError):
    code = "missing_required_columns"

    def __init__(self, headers: list[str], missing: list[str]) -> None:
        super().__init__(
            'CSV must contain "Store/Location" and "Participation %" columns. '
            f"Detected headers: {', '.join(headers)}"
        )
        self.headers = list(headers)
        self.missing = list(missing)

    def to_dict(self) -> dict[str, object]:
        return {**super().to_dict(), "headers": self.headers, "missing": self.missing}


class NoValidRows(DocumentError):
    code = "no_valid_rows"

    def __init__(self, skipped_rows: int = 0) -> None:
        super().__init__("No valid data found in CSV file.")
        self.skipped_rows = skipped_rows

    def to_dict(self) -> dict[str, object]:
        return {**super().to_dict(), "skipped_rows": self.skipped_rows}
