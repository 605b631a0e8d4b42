"""Command line entry point for the expense-log OCR tools."""

import argparse
import json
import sys
from collections.abc import Sequence
from datetime import date
from pathlib import Path

from app.config.settings import Settings
from app.database.connection import close_pool
from app.logging.logger import Log
from app.processor.processor import build_processor
from app.records.transfer import RecordTransfer
from app.reporting.summary import HourlyMode, build_summary
from app.storage.base import BaseRecordStore
from app.storage.factory import RecordStoreFactory
from app.storage.migration import load_normalized_records


def create_cli() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="expense-ocr",
        description="Turn transaction-log screenshots into deduplicated expense records",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    ingest = subparsers.add_parser("ingest", help="Recognize records from images")
    ingest.add_argument("images", nargs="+", type=Path, help="Image files of one batch")

    importer = subparsers.add_parser("import", help="Import records from a .json or .csv file")
    importer.add_argument("file", type=Path)

    exporter = subparsers.add_parser("export", help="Export records to a file")
    exporter.add_argument("format", choices=sorted(RecordTransfer.EXPORTERS))
    exporter.add_argument(
        "--output-dir",
        type=Path,
        default=Path("."),
        help="Directory to write the export to (default: current directory)",
    )

    subparsers.add_parser("clear", help="Delete every stored record")

    summary = subparsers.add_parser("summary", help="Print aggregate statistics as JSON")
    summary.add_argument(
        "--hourly-mode",
        choices=[m.value for m in HourlyMode],
        default=HourlyMode.COUNT.value,
    )
    return parser


def run_command(args: argparse.Namespace, settings: Settings, store: BaseRecordStore) -> int:
    if args.command == "ingest":
        last_decile = -1

        def report(value: float) -> None:
            nonlocal last_decile
            decile = int(value * 10)
            if decile > last_decile:
                last_decile = decile
                Log.info(f"Recognition progress: {int(value * 100)}%")

        processor = build_processor(settings, store, on_progress=report)
        try:
            result = processor.process(args.images)
        except Exception as exc:
            # Already reported by the pipeline's failure step.
            Log.debug(f"ingest aborted: {exc!r}")
            return 1
        if result.new_records:
            Log.info(f"Done: {len(result.new_records)} new records added")
        else:
            Log.info("Done: no new records found")
        return 0

    if args.command == "import":
        RecordTransfer(store).import_file(args.file)
        return 0

    if args.command == "export":
        RecordTransfer(store).export_file(args.output_dir, args.format)
        return 0

    if args.command == "clear":
        store.clear()
        Log.info("All records cleared")
        return 0

    records = load_normalized_records(store)
    summary = build_summary(records, HourlyMode(args.hourly_mode), today=date.today())
    print(json.dumps(summary, ensure_ascii=False, indent=2))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point: parse args -> configure logging -> build store -> run command."""
    args = create_cli().parse_args(argv)
    settings = Settings()
    Log.configure("DEBUG" if args.verbose else settings.log_level)

    try:
        store = RecordStoreFactory.create(settings)
        return run_command(args, settings, store)
    except Exception as exc:
        if Log.is_debug():
            Log.exception(f"{args.command} failed: {exc}")
        else:
            Log.error(f"{args.command} failed: {exc}")
        return 1
    finally:
        close_pool()


if __name__ == "__main__":
    sys.exit(main())
