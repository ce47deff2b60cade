from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from participation_intake import __version__ as TOOL_VERSION
from participation_intake.areas import infer_area
from participation_intake.config import ConfigError, Settings, load_settings
from participation_intake.contracts import build_contract, build_run_summary
from participation_intake.errors import DocumentError, InvalidFileType
from participation_intake.loader import LoadedUpload, load_upload
from participation_intake.log import setup_logging
from participation_intake.pipeline import ParsedDocument, parse_document
from participation_intake.sinks import DatasetStoreError, JsonDatasetSink, WorkbookSink, compute_movement
from participation_intake.summary import build_upload_summary, render_summary_text

EXIT_SUCCESS = 0
EXIT_COMMAND_ERROR = 1
EXIT_PARSE_FAILED = 2
EXIT_DOCUMENT_REJECTED = 3

DEFAULT_OUTPUT_DIR_NAME = "participation-intake-output"

logger = logging.getLogger("participation_intake.cli")


class CliError(Exception):
    def __init__(self, message: str, code: int = EXIT_COMMAND_ERROR) -> None:
        super().__init__(message)
        self.code = code


class IntakeArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:
        raise CliError(message, EXIT_COMMAND_ERROR)


def eprint(message: str) -> None:
    print(message, file=sys.stderr)


def emit_human(message: str, *, quiet: bool = False) -> None:
    if not quiet:
        eprint(message)


def json_dumps(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False, sort_keys=True)


def write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json_dumps(payload), encoding="utf-8")


def timestamp_token(settings: Settings) -> str:
    if settings.output_stamp:
        return settings.output_stamp
    return datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def determine_output_dir(args: argparse.Namespace, input_path: Path, settings: Settings) -> Path:
    if getattr(args, "out_dir", None):
        return Path(args.out_dir)
    return Path.cwd() / DEFAULT_OUTPUT_DIR_NAME / f"{input_path.stem}-{timestamp_token(settings)}"


def classify_exception(exc: Exception) -> int:
    if isinstance(exc, CliError):
        return exc.code
    if isinstance(exc, (InvalidFileType, DatasetStoreError)):
        return EXIT_COMMAND_ERROR
    if isinstance(exc, DocumentError):
        return EXIT_DOCUMENT_REJECTED
    if isinstance(exc, FileNotFoundError):
        return EXIT_COMMAND_ERROR
    if isinstance(exc, (UnicodeDecodeError, ValueError)):
        return EXIT_PARSE_FAILED
    return EXIT_COMMAND_ERROR


def configure_logging(args: argparse.Namespace, settings: Settings) -> None:
    if getattr(args, "json", False) or getattr(args, "quiet", False):
        level = logging.ERROR
    elif getattr(args, "verbose", False):
        level = logging.DEBUG
    else:
        level = settings.log_level
    setup_logging(level)


def load_and_parse(input_path: Path) -> tuple[LoadedUpload, ParsedDocument]:
    upload = load_upload(input_path)
    for warning in upload.warnings:
        logger.warning(warning)
    logger.debug("Decoded %s as %s (confidence %.2f)", upload.file_name, upload.encoding, upload.confidence)
    return upload, parse_document(upload.text)


def render_rejection(exc: DocumentError) -> dict[str, Any]:
    return {"status": "rejected", "error": exc.to_dict()}


def build_ingest_payload(
    upload: LoadedUpload,
    document: ParsedDocument,
    *,
    movement: list[dict[str, Any]],
    dataset_path: Path | None,
    export_path: Path | None,
) -> dict[str, Any]:
    contract = build_contract("participation_intake.ingest")
    records = document.records
    summary = build_upload_summary(records)
    warnings = [*upload.warnings, *document.warnings]
    return {
        "contract": contract,
        "schema_version": contract["version"],
        "tool_version": TOOL_VERSION,
        "status": "ok",
        "file": upload.file_name,
        "encoding": {"detected": upload.encoding, "confidence": upload.confidence},
        "headers": document.headers,
        "columns": document.mapping.to_dict(),
        "rows": {
            "data_lines": len(document.outcomes),
            "accepted": len(records),
            "flagged": len(document.warnings),
            "skipped": len(document.skipped),
        },
        "skipped": [
            {"line": outcome.line_number, "reason": outcome.reason} for outcome in document.skipped
        ],
        "records": [
            {**record.to_dict(), "area": infer_area(record).to_dict()} for record in records
        ],
        "summary": summary,
        "movement": movement,
        "run_summary": build_run_summary(
            command="ingest",
            input_path=upload.path,
            output_path=dataset_path or export_path,
            warnings=warnings,
            metrics={
                "records": len(records),
                "skipped_rows": len(document.skipped),
                "out_of_range": summary["out_of_range_count"],
            },
        ),
    }


def build_parser() -> argparse.ArgumentParser:
    parser = IntakeArgumentParser(prog="participation-intake", description="Store participation CSV intake")
    subparsers = parser.add_subparsers(dest="command", required=True)

    ingest = subparsers.add_parser("ingest", help="Parse a participation CSV and store the result.")
    ingest.add_argument("input", help="Input CSV path")
    ingest.add_argument("-o", "--out", dest="out_dir", help="Output directory for the ingest report")
    ingest.add_argument("--output", help="Explicit ingest report path")
    ingest.add_argument("--data-dir", dest="data_dir", help="Dataset and upload history directory")
    ingest.add_argument("--export", help="Also write the records to an .xlsx workbook")
    ingest.add_argument("--no-history", dest="no_history", action="store_true", help="Do not append to upload history")
    ingest.add_argument("--dry-run", action="store_true", help="Parse and summarise without writing anything")
    ingest.add_argument("--json", action="store_true", help="Write machine JSON to stdout")
    ingest.add_argument("-q", "--quiet", action="store_true", help="Minimal human logs")
    ingest.add_argument("-v", "--verbose", action="store_true", help="More human logs")

    areas = subparsers.add_parser("areas", help="List stores with their inferred areas.")
    areas.add_argument("input", help="Input CSV path")
    areas.add_argument("--json", action="store_true", help="Write machine JSON to stdout")
    areas.add_argument("-q", "--quiet", action="store_true", help="Minimal human logs")
    areas.add_argument("-v", "--verbose", action="store_true", help="More human logs")

    subparsers.add_parser("version", help="Print version")
    return parser


def run_ingest(args: argparse.Namespace, settings: Settings) -> int:
    input_path = Path(args.input)
    if args.export and Path(args.export).suffix.lower() != ".xlsx":
        eprint("--export must point to an .xlsx file")
        return EXIT_COMMAND_ERROR

    try:
        upload, document = load_and_parse(input_path)
        records = document.records

        dataset_sink = JsonDatasetSink(
            Path(args.data_dir) if args.data_dir else settings.data_dir,
            record_history=not args.no_history,
        )
        movement = compute_movement(dataset_sink.current_records(), records)

        dataset_path = None
        export_path = None
        report_path = None
        if not args.dry_run:
            dataset_path = dataset_sink.accept(records, source_name=upload.file_name)
            if args.export:
                export_path = WorkbookSink(Path(args.export)).accept(records, source_name=upload.file_name)

        payload = build_ingest_payload(
            upload,
            document,
            movement=[item.to_dict() for item in movement],
            dataset_path=dataset_path,
            export_path=export_path,
        )
        if not args.dry_run:
            out_dir = determine_output_dir(args, input_path, settings)
            report_path = Path(args.output) if args.output else out_dir / "ingest.json"
            write_json(report_path, payload)

        if args.json:
            print(json_dumps(payload))
        else:
            emit_human(render_summary_text(payload["summary"]), quiet=args.quiet)
            if document.skipped:
                emit_human(f"Skipped rows: {len(document.skipped)}", quiet=args.quiet)
            if dataset_path:
                emit_human(f"Dataset saved: {dataset_path}", quiet=args.quiet)
            if export_path:
                emit_human(f"Workbook written: {export_path}", quiet=args.quiet)
            if report_path:
                emit_human(f"Report written: {report_path}", quiet=args.quiet)
        return EXIT_SUCCESS
    except DocumentError as exc:
        if args.json:
            print(json_dumps(render_rejection(exc)))
        else:
            eprint(exc.message)
        return classify_exception(exc)
    except Exception as exc:
        eprint(str(exc))
        return classify_exception(exc)


def run_areas(args: argparse.Namespace) -> int:
    input_path = Path(args.input)
    try:
        upload, document = load_and_parse(input_path)
    except DocumentError as exc:
        if args.json:
            print(json_dumps(render_rejection(exc)))
        else:
            eprint(exc.message)
        return classify_exception(exc)
    except Exception as exc:
        eprint(str(exc))
        return classify_exception(exc)

    rows = [{"store": record.store, **infer_area(record).to_dict()} for record in document.records]
    if args.json:
        contract = build_contract("participation_intake.areas")
        print(
            json_dumps(
                {
                    "contract": contract,
                    "schema_version": contract["version"],
                    "file": upload.file_name,
                    "stores": rows,
                }
            )
        )
    else:
        width = max(len(row["store"]) for row in rows)
        for row in rows:
            print(f"{row['store']:<{width}}  {row['code']:<8} {row['display']}")
    return EXIT_SUCCESS


def run_version() -> int:
    print(TOOL_VERSION)
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    try:
        parser = build_parser()
        args = parser.parse_args(argv)
        if args.command == "version":
            return run_version()
        settings = load_settings()
        configure_logging(args, settings)
        if args.command == "ingest":
            return run_ingest(args, settings)
        if args.command == "areas":
            return run_areas(args)
        raise CliError(f"Unknown command: {args.command}", EXIT_COMMAND_ERROR)
    except ConfigError as exc:
        eprint(str(exc))
        return EXIT_COMMAND_ERROR
    except CliError as exc:
        eprint(str(exc))
        return exc.code


if __name__ == "__main__":
    raise SystemExit(main())
