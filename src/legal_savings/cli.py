"""CLI entrypoint for the legal time-savings pipeline."""

import argparse
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path

from legal_savings import __version__
from legal_savings.config import Settings
from legal_savings.io import (
    JsonConversationStore,
    StoreLockError,
    ensure_directory,
    load_records_jsonl,
    save_json,
    summarize_records,
)
from legal_savings.mock_data import generate_mock_records
from legal_savings.models import CollaboratorTimeoutError
from legal_savings.observability import build_text_client, get_langsmith_status
from legal_savings.pipeline import (
    analyze_and_update_records,
    build_render_payload,
    generate_report,
)
from legal_savings.schemas import CATEGORIES


def _add_category_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--category",
        required=True,
        choices=CATEGORIES,
        help="Legal category of the conversations to process.",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="legal-savings",
        description="Estimate time saved by AI legal consultations and build category reports",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        type=str,
        default="configs/default.yaml",
        help="Path to YAML config file (default: configs/default.yaml)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("info", help="Show current configuration and stored record counts")

    seed_parser = sub.add_parser("seed", help="Store synthetic records for a category")
    _add_category_argument(seed_parser)
    seed_parser.add_argument("--count", type=int, default=12, help="Records to generate.")
    seed_parser.add_argument("--seed", type=int, default=7, help="Random seed.")

    import_parser = sub.add_parser("import", help="Import records from a JSONL file")
    import_parser.add_argument("--input", type=str, required=True, help="Path to records JSONL.")

    analyze_parser = sub.add_parser(
        "analyze",
        help="Analyze every record in a category and store durations and time savings.",
    )
    _add_category_argument(analyze_parser)
    analyze_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute analysis results without writing them back to the store.",
    )
    analyze_parser.add_argument(
        "--max-concurrency",
        type=int,
        default=None,
        help="Parallel record analyses (default: analysis_max_concurrency setting).",
    )

    report_parser = sub.add_parser("report", help="Assemble the report for a category")
    _add_category_argument(report_parser)
    report_parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Path for the report JSON (default: <output_dir>/<category>-<timestamp>.json).",
    )

    archive_parser = sub.add_parser("archive", help="Move a category's records to the archive")
    _add_category_argument(archive_parser)

    return parser


def _store(settings: Settings) -> JsonConversationStore:
    return JsonConversationStore(settings.storage_path, archive_path=settings.archive_path)


def _cmd_info(settings: Settings) -> int:
    store = _store(settings)
    tracing = get_langsmith_status(settings)
    print(f"legal-savings {__version__}")
    print(f"  model:            {settings.openai_model}")
    print(f"  api key source:   {settings.resolved_openai_key_source()}")
    print(f"  base url:         {settings.resolved_openai_base_url() or '(default)'}")
    print(f"  timeout:          {settings.collaborator_timeout_seconds}s")
    print(f"  concurrency:      {settings.analysis_max_concurrency}")
    print(f"  tracing:          {'on' if tracing['enabled'] else 'off'}")
    print(f"  storage:          {settings.storage_path}")
    print(f"  archive:          {settings.archive_path}")
    for category in CATEGORIES:
        summary = summarize_records(store.load_records(category))
        print(
            f"  {category}: {summary.record_count} records, "
            f"{summary.analyzed_count} analyzed, {summary.pending_count} pending"
        )
    return 0


def _cmd_seed(settings: Settings, args: argparse.Namespace) -> int:
    store = _store(settings)
    records = generate_mock_records(args.category, count=args.count, seed=args.seed)
    for record in records:
        store.save_record(record)
    print(f"Stored {len(records)} synthetic {args.category} records in {settings.storage_path}")
    return 0


def _cmd_import(settings: Settings, args: argparse.Namespace) -> int:
    store = _store(settings)
    records = load_records_jsonl(args.input)
    for record in records:
        store.save_record(record)
    summary = summarize_records(records)
    print(f"Imported {summary.record_count} records ({summary.turn_count} turns)")
    for category, count in sorted(summary.records_by_category.items()):
        print(f"  {category}: {count}")
    return 0


def _print_progress(done: int, total: int) -> None:
    print(f"    analyzed {done}/{total}")


def _cmd_analyze(settings: Settings, args: argparse.Namespace) -> int:
    store = _store(settings)
    text_client = build_text_client(settings)
    result = analyze_and_update_records(
        store,
        args.category,
        text_client,
        dry_run=args.dry_run,
        max_concurrency=args.max_concurrency or settings.analysis_max_concurrency,
        timeout=settings.collaborator_timeout_seconds,
        progress_callback=_print_progress,
    )
    mode = " (DRY RUN - no updates written)" if result.dry_run else ""
    print(f"Analysis of {args.category}{mode}:")
    for analysis in result.analyses:
        savings = analysis.time_savings
        factors = savings.factors
        print(
            f"  {analysis.record_id}: chat {analysis.derived_metadata.chat_duration_minutes} min, "
            f"traditional {savings.traditional_duration_minutes} min, "
            f"saved {savings.time_saved_minutes} min "
            f"(research {factors.legal_research}, review {factors.document_review}, "
            f"preparation {factors.preparation}, follow-up {factors.follow_up})"
        )
    for failure in result.failures:
        print(f"  FAILED {failure['record_id']} [{failure['stage']}]: {failure['error']}")
    print(f"  updated: {result.updated_count}, failed: {len(result.failures)}")
    print(f"  client metrics: {text_client.metrics_snapshot()}")
    return 0


def _cmd_report(settings: Settings, args: argparse.Namespace) -> int:
    store = _store(settings)
    text_client = build_text_client(settings)
    report = generate_report(
        store,
        args.category,
        text_client,
        timeout=settings.collaborator_timeout_seconds,
    )
    if args.output:
        output_path = Path(args.output)
    else:
        stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ")
        output_path = ensure_directory(settings.output_dir) / f"{args.category}-{stamp}.json"
    save_json(output_path, build_render_payload(report))

    summary = report.time_savings_summary
    print(f"Report for {args.category}: {len(report.per_conversation)} conversations")
    print(f"  topic clusters:      {len(report.topic_clusters)}")
    print(f"  faq clusters:        {len(report.faq_clusters)}")
    print(f"  total time saved:    {summary.total_time_saved} min")
    print(f"  average per chat:    {summary.average_time_saved_per_conversation:.1f} min")
    print(f"  traditional vs AI:   {summary.total_traditional_time} / {summary.total_ai_time} min")
    print(f"  written to:          {output_path}")
    return 0


def _cmd_archive(settings: Settings, args: argparse.Namespace) -> int:
    moved = _store(settings).archive_category(args.category)
    print(f"Archived and cleared {moved} {args.category} records")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = Settings.from_yaml(args.config)

    handlers = {
        "info": lambda: _cmd_info(settings),
        "seed": lambda: _cmd_seed(settings, args),
        "import": lambda: _cmd_import(settings, args),
        "analyze": lambda: _cmd_analyze(settings, args),
        "report": lambda: _cmd_report(settings, args),
        "archive": lambda: _cmd_archive(settings, args),
    }
    try:
        return handlers[args.command]()
    except (CollaboratorTimeoutError, StoreLockError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
