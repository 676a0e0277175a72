"""CLI entrypoint for the personals sheet sync."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

from personals_sync.common.config_loader import load_settings, load_sync_config
from personals_sync.common.constants import COMMANDS, DEFAULT_SAMPLE_SIZE, EXIT_FAILURE, EXIT_SUCCESS
from personals_sync.common.errors import SyncError
from personals_sync.common.ids import generate_run_id
from personals_sync.common.logging import build_logger, log_event
from personals_sync.common.models import Invalid, PersonalRecord, Skipped
from personals_sync.pipeline.sync import RunContext, connect, inspect_row, run_sync
from personals_sync.sheets.structure import StructureReport, validate_structure


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("command", nargs="?", default="sync", choices=COMMANDS)
    parser.add_argument("--test", dest="dry_run", action="store_true", help="fetch and process without writing")
    parser.add_argument("--row", type=int, default=None, help="Mirror sheet row number for inspect-row")
    parser.add_argument("--config", default="./config/sync.yml")
    parser.add_argument("--overlay-config", default=None)
    parser.add_argument("--output", default=None)
    parser.add_argument("--env-file", default=".env")
    parser.add_argument("--sample-size", type=int, default=None)
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--log-dir", default=None)
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARN", "ERROR"])
    return parser.parse_args(argv)


def format_record(record: PersonalRecord) -> str:
    return "\n".join(
        [
            f"ID: {record.id}",
            f"Title: {record.title}",
            f"Contact: {record.contact}",
            f"Locations: {', '.join(record.locations)}",
            f"Categories: {', '.join(record.categories)}",
            f"Date Posted: {record.date_posted}",
        ]
    )


def print_structure_report(report: StructureReport) -> None:
    print(f'Spreadsheet: "{report.title}"')
    for table, table_report in report.tables.items():
        print(f"\n[{table}] headers: {table_report.headers}")
        for name in table_report.found_required:
            print(f"  required  {name}: found")
        for name in table_report.missing_required:
            print(f"  required  {name}: MISSING")
        for name in table_report.found_optional:
            print(f"  optional  {name}: found")
        for name in table_report.missing_optional:
            print(f"  optional  {name}: not found")
    print("\nStructure is valid." if report.ok else "\nStructure validation failed.")


def _command_sync(client, ctx: RunContext, args: argparse.Namespace, sample_size: int) -> int:
    result = run_sync(client, ctx, dry_run=args.dry_run)
    if result.dry_run:
        print(f"Processed {len(result.records)} valid personals (test mode, nothing written)")
        for index, record in enumerate(result.records[:sample_size], start=1):
            print(f"\n--- Personal {index} ---")
            print(format_record(record))
    return EXIT_SUCCESS


def _command_validate(client, ctx: RunContext) -> int:
    report = validate_structure(client, ctx.cfg, ctx.strategy, run_id=ctx.run_id, logger=ctx.logger)
    print_structure_report(report)
    return EXIT_SUCCESS if report.ok else EXIT_FAILURE


def _command_inspect_row(client, ctx: RunContext, row_number: int) -> int:
    inspection = inspect_row(client, ctx, row_number)
    print(f"Mirror row {row_number}: title={inspection.mirror.title!r} approved={inspection.mirror.approved!r}")
    if isinstance(inspection.outcome, Skipped):
        print(f"Skipped: {inspection.outcome.reason}")
        return EXIT_SUCCESS
    if isinstance(inspection.outcome, Invalid):
        print(f"Validation failed: {inspection.outcome.describe()}")
        return EXIT_FAILURE
    print(format_record(inspection.record))
    return EXIT_SUCCESS


def run_command(args: argparse.Namespace) -> int:
    if args.command == "inspect-row" and (args.row is None or args.row < 2):
        print("inspect-row requires --row N with N >= 2 (row 1 is the header)", file=sys.stderr)
        return EXIT_FAILURE

    run_id = args.run_id or generate_run_id()
    cfg = load_sync_config(
        Path(args.config),
        overlay_path=Path(args.overlay_config) if args.overlay_config else None,
    )
    output_path = Path(args.output or cfg["output"]["path"])
    log_dir = args.log_dir or cfg["output"].get("log_dir")
    logger = build_logger(run_id, level=args.log_level, log_dir=Path(log_dir) if log_dir else None)
    sample_size = args.sample_size or int((cfg.get("dry_run") or {}).get("sample_size", DEFAULT_SAMPLE_SIZE))

    settings = load_settings()
    ctx = RunContext(run_id=run_id, cfg=cfg, output_path=output_path, logger=logger)
    log_event(logger, f"starting {args.command}", run_id=run_id, stage=args.command, event="RUN_START", status="ok")

    client = connect(settings, cfg)
    try:
        if args.command == "validate":
            code = _command_validate(client, ctx)
        elif args.command == "inspect-row":
            code = _command_inspect_row(client, ctx, args.row)
        else:
            code = _command_sync(client, ctx, args, sample_size)
    finally:
        client.close()

    log_event(logger, f"{args.command} finished", run_id=run_id, stage=args.command, event="RUN_END", status="ok")
    return code


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    load_dotenv(args.env_file)
    try:
        return run_command(args)
    except SyncError as exc:
        print(f"Sync failed: {exc}", file=sys.stderr)
        print(f"Error code: {exc.error_code}", file=sys.stderr)
        return EXIT_FAILURE
    except Exception as exc:
        print(f"Sync failed: {exc}", file=sys.stderr)
        print("Error code: UNEXPECTED_ERROR", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    raise SystemExit(main())
