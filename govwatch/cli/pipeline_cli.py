"""
Command-line interface for the Local Gov Watch pipeline.

Provides commands to set up the database, run connectors, discover
minutes, export calendars, inspect agenda extraction, and build digests.

Usage:
    python -m govwatch.cli.pipeline_cli init-db
    python -m govwatch.cli.pipeline_cli seed
    python -m govwatch.cli.pipeline_cli run --source-id 1
    python -m govwatch.cli.pipeline_cli run --scope city:austin-tx,county:travis-county-tx
    python -m govwatch.cli.pipeline_cli --help
"""

import asyncio
import argparse
import json
import logging
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from ..config import settings
from ..db.repositories import JurisdictionRepository, SourceRepository
from ..db.session import db
from ..exceptions import GovWatchError
from ..models.ingest_stats import RunStatus
from ..parsing.agenda_extractor import extract_legislation_from_agenda
from ..parsing.pdf_extractor import extract_text_from_bytes
from ..services.alert_notifier import AlertNotifier
from ..services.calendar_service import CalendarService, generate_ics, parse_scope
from ..services.connector_service import ConnectorRunResult, ConnectorService, jurisdiction_scope
from ..services.digest_service import DigestService, render_digest_html
from ..services.minutes_discovery_service import MinutesDiscoveryService
from ..utils.text import normalize_date

logger = logging.getLogger(__name__)


# Default jurisdictions: (slug, name, type, parent slug)
SEED_JURISDICTIONS = [
    ("texas", "Texas", "state", None),
    ("travis-county-tx", "Travis County", "county", "texas"),
    ("austin-tx", "Austin", "city", "travis-county-tx"),
]

# Default sources: (key, name, kind, parser key, jurisdiction slug, schedule)
SEED_SOURCES = [
    ("austin-council-meetings", "Austin City Council Meetings", "meetings",
     "austin_council_meetings", "austin-tx", "0 */6 * * *"),
    ("austin-ordinances", "Austin Ordinances", "ordinances",
     "austin_ordinances", "austin-tx", "0 3 * * *"),
    ("texas-bills", "Texas Legislature Bills", "bills",
     "texas_bills", "texas", "0 4 * * *"),
    ("travis-elections", "Travis County Elections", "elections",
     "travis_elections", "travis-county-tx", "0 5 * * 1"),
]


def configure_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else getattr(logging, settings.app.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def parse_when(value: str) -> datetime:
    """Parse a CLI date/datetime argument as naive UTC; offsets are converted."""
    parsed = normalize_date(value, timezone_name="UTC")
    if parsed is None:
        raise argparse.ArgumentTypeError(f"Invalid date: {value}")
    return parsed


def print_results(results: List[ConnectorRunResult]) -> int:
    print("\n" + "=" * 60)
    print("RESULTS")
    print("=" * 60)
    for result in results:
        stats = result.stats
        print(f"{result.source_key}: {result.status.value}")
        print(f"  {result.log}")
        print(
            f"  found={stats.found} new={stats.new} updated={stats.updated} "
            f"unchanged={stats.unchanged} pdfs={stats.pdfs_processed} ai_tokens={stats.ai_tokens_used}"
        )
        for message in stats.error_messages[:5]:
            print(f"  ! {message}")
    print("=" * 60 + "\n")
    return 1 if any(result.status == RunStatus.ERROR for result in results) else 0


# MARK: - Commands

async def cmd_init_db(args) -> int:
    await db.create_tables()
    print("Database tables created")
    return 0


async def cmd_seed(args) -> int:
    async with db.session() as session:
        jurisdictions = JurisdictionRepository(session)
        by_slug = {}
        for slug, name, type_, parent_slug in SEED_JURISDICTIONS:
            by_slug[slug] = await jurisdictions.get_or_create(
                slug, name, type_, parent=by_slug.get(parent_slug)
            )

        sources = SourceRepository(session)
        for key, name, kind, parser_key, jurisdiction_slug, schedule in SEED_SOURCES:
            await sources.get_or_create(
                key,
                name=name,
                kind=kind,
                parser_key=parser_key,
                jurisdiction_id=by_slug[jurisdiction_slug].id,
                schedule=schedule,
                enabled=True,
            )

    print(f"Seeded {len(SEED_JURISDICTIONS)} jurisdictions and {len(SEED_SOURCES)} sources")
    return 0


async def cmd_run(args) -> int:
    service = ConnectorService()
    try:
        if args.source_id is not None:
            results = [await service.run_source(args.source_id)]
        else:
            slugs = await jurisdiction_scope(db, args.scope.split(","))
            results = await service.run_scope(slugs)
    finally:
        await service.close()
    return print_results(results)


async def cmd_run_all(args) -> int:
    service = ConnectorService()
    try:
        results = await service.run_all()
    finally:
        await service.close()
    return print_results(results)


async def cmd_discover_minutes(args) -> int:
    service = MinutesDiscoveryService()
    try:
        result = await service.discover()
    finally:
        await service.fetcher.close()

    print(f"Checked {result.checked} meetings, found minutes for {result.found}")
    for update in result.updates:
        print(f"  {update['title']}: {update['url']}")
    return 0


async def cmd_calendar(args) -> int:
    start = args.start or datetime.utcnow()
    end = args.end or start + timedelta(days=30)
    kinds = [kind.strip() for kind in args.kinds.split(",") if kind.strip()]

    async with db.session() as session:
        events = await CalendarService(session).list_events(start, end, parse_scope(args.scope), kinds)

    ics = generate_ics(events)
    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(ics, encoding="utf-8", newline="")
        print(f"Wrote {len(events)} events to {output_path.absolute()}")
    else:
        sys.stdout.write(ics)
    return 0


async def cmd_digest(args) -> int:
    async with db.session() as session:
        digest = await DigestService(session).build(args.jurisdiction, scope=args.scope, topics=args.topics)

    html = render_digest_html(digest, settings.alerts.frontend_url)
    if not args.send:
        print(html)
        return 0

    notifier = AlertNotifier()
    try:
        await notifier.send(args.email, f"Your Weekly Civic Digest: {digest.jurisdiction_name}", html)
    finally:
        await notifier.close()
    print(f"Digest sent to {args.email}")
    return 0


def cmd_extract_agenda(args) -> int:
    path = Path(args.file)
    if path.suffix.lower() == ".pdf":
        text = extract_text_from_bytes(path.read_bytes())
        if text is None:
            print(f"No extractable text in {path}", file=sys.stderr)
            return 1
    else:
        text = path.read_text(encoding="utf-8", errors="replace")

    items = extract_legislation_from_agenda(text)
    print(json.dumps([item.to_dict() for item in items], indent=2, ensure_ascii=False))
    return 0


COMMANDS = {
    "init-db": cmd_init_db,
    "seed": cmd_seed,
    "run": cmd_run,
    "run-all": cmd_run_all,
    "discover-minutes": cmd_discover_minutes,
    "calendar": cmd_calendar,
    "digest": cmd_digest,
}


async def run_command(args) -> int:
    await db.initialize()
    try:
        return await COMMANDS[args.command](args)
    except GovWatchError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    finally:
        await db.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Local Gov Watch ingestion pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create tables and default Austin/Travis/Texas sources
  python -m govwatch.cli.pipeline_cli init-db
  python -m govwatch.cli.pipeline_cli seed

  # Run one source, or every source of a county and its cities
  python -m govwatch.cli.pipeline_cli run --source-id 1
  python -m govwatch.cli.pipeline_cli run --scope county:travis-county-tx

  # Export the next month of meetings and elections
  python -m govwatch.cli.pipeline_cli calendar --scope city:austin-tx --output austin.ics

  # Check agenda extraction against a downloaded agenda
  python -m govwatch.cli.pipeline_cli extract-agenda agenda.pdf
        """
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging (DEBUG level)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create database tables")
    subparsers.add_parser("seed", help="Insert default jurisdictions and sources")

    run_parser = subparsers.add_parser("run", help="Run one source or a jurisdiction scope")
    target = run_parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--source-id", type=int, help="Source id to run")
    target.add_argument("--scope", type=str, help="Comma-separated scope, e.g. city:austin-tx,county:travis-county-tx")

    subparsers.add_parser("run-all", help="Run every enabled source")
    subparsers.add_parser("discover-minutes", help="Look for newly posted minutes of past meetings")

    calendar_parser = subparsers.add_parser("calendar", help="Export meetings and elections as iCalendar")
    calendar_parser.add_argument("--start", type=parse_when, help="Range start (default: now)")
    calendar_parser.add_argument("--end", type=parse_when, help="Range end, exclusive (default: start + 30 days)")
    calendar_parser.add_argument("--scope", type=str, default="city:austin-tx", help="Comma-separated jurisdiction scope")
    calendar_parser.add_argument("--kinds", type=str, default="meetings,elections", help="meetings, elections, or both")
    calendar_parser.add_argument("--output", type=str, help="Write the .ics to this file instead of stdout")

    agenda_parser = subparsers.add_parser("extract-agenda", help="Print legislation found in an agenda file as JSON")
    agenda_parser.add_argument("file", help="Agenda PDF or plain-text file")

    digest_parser = subparsers.add_parser("digest", help="Build (and optionally send) a weekly digest")
    digest_parser.add_argument("--jurisdiction", required=True, help="Jurisdiction slug, e.g. austin-tx")
    digest_parser.add_argument("--email", required=True, help="Recipient address")
    digest_parser.add_argument("--scope", choices=["city", "county", "both"], default="city")
    digest_parser.add_argument("--topics", nargs="*", help="Only include these topic tags")
    digest_parser.add_argument("--send", action="store_true", help="Send through Resend instead of printing")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    load_dotenv()
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    if args.command == "extract-agenda":
        return cmd_extract_agenda(args)
    return asyncio.run(run_command(args))


if __name__ == "__main__":
    sys.exit(main())
