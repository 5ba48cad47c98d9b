import argparse
from dataclasses import replace
from pathlib import Path

from . import __version__
from .config import ConfigurationError, Settings
from .crawler import run_crawl
from .database import get_session, init_database
from .discovery import DOMAIN_CONCURRENCY, run_ats_discovery, run_network_discovery, run_website_discovery
from .env import load_env
from .liveness import run_stale_check
from .logger import get_logger
from .scrapers import DISCOVERY_PLATFORMS, PROBES

logger = get_logger()


def _settings(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env()
    if args.db:
        settings = replace(settings, database_path=Path(args.db))
    if args.log_level:
        settings = replace(settings, log_level=args.log_level)
    logger.set_level(settings.log_level)
    return settings


def _session(settings: Settings):
    init_database(settings.database_path)
    return get_session(settings.database_path)


def _print_summary(title: str, summary: dict) -> None:
    print(f"\n=== {title} ===")
    for key, value in summary.items():
        if key == "errors":
            continue
        print(f"  {key.replace('_', ' ').capitalize()}: {value}")
    errors = summary.get("errors") or []
    if errors:
        print(f"\nErrors ({len(errors)}):")
        for e in errors:
            print(f"  {e}")
    if summary.get("dry_run"):
        print("  (Dry run: no changes saved)")


def cmd_discover_ats(args: argparse.Namespace) -> None:
    settings = _settings(args)
    session = _session(settings)
    try:
        summary = run_ats_discovery(
            session,
            settings,
            country=args.country,
            platforms=[args.platform] if args.platform else None,
            offset=args.offset,
            limit=args.limit,
            force=args.force,
            dry_run=args.dry_run,
        )
    finally:
        session.close()
    logger.log_metrics_summary()
    _print_summary("ATS Discovery", {**summary, "dry_run": args.dry_run})


def cmd_discover_networks(args: argparse.Namespace) -> None:
    settings = _settings(args)
    session = _session(settings)
    try:
        summary = run_network_discovery(
            session,
            settings,
            platforms=[args.platform] if args.platform else None,
            force=args.force,
            dry_run=args.dry_run,
        )
    finally:
        session.close()
    logger.log_metrics_summary()
    _print_summary("Network ATS Discovery", {**summary, "dry_run": args.dry_run})


def cmd_discover_websites(args: argparse.Namespace) -> None:
    settings = _settings(args)
    session = _session(settings)
    try:
        summary = run_website_discovery(
            session,
            settings,
            country=args.country,
            offset=args.offset,
            limit=args.limit,
            force=args.force,
            concurrency=args.concurrency,
            dry_run=args.dry_run,
        )
    finally:
        session.close()
    _print_summary("Website Discovery", {**summary, "dry_run": args.dry_run})


def cmd_crawl(args: argparse.Namespace) -> None:
    settings = _settings(args)
    session = _session(settings)
    try:
        results = run_crawl(
            session,
            settings,
            max_pages=args.max_pages,
            sources=() if args.skip_boards else None,
            include_ats=not args.skip_ats,
            include_career_pages=not args.skip_career_pages,
            country=args.country,
            platform=args.platform,
            offset=args.offset,
            limit=args.limit,
            dry_run=args.dry_run,
        )
    except ConfigurationError as e:
        raise SystemExit(str(e))
    finally:
        session.close()

    logger.log_metrics_summary()
    for result in results:
        _print_summary(result["source"], result)
    if args.dry_run:
        print("\n(Dry run: no changes saved)")


def cmd_stale_check(args: argparse.Namespace) -> None:
    settings = _settings(args)
    session = _session(settings)
    try:
        summary = run_stale_check(
            session,
            settings,
            batch_size=args.batch_size,
            batch_delay=args.batch_delay,
            dry_run=args.dry_run,
        )
    finally:
        session.close()
    _print_summary("Stale Check", {**summary, "dry_run": args.dry_run})


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--db", help="SQLite database path (default: JOBHARVEST_DB or data/jobs.db)")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Console log level")
    parser.add_argument("--dry-run", action="store_true", help="Compute everything but save nothing")


def _add_filters(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--country", help="Only organizations with this ISO country code")
    parser.add_argument("--offset", type=int, default=0, help="Skip the first N organizations")
    parser.add_argument("--limit", type=int, help="Process at most N organizations")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jobharvest",
        description="Discover school hiring surfaces, harvest their jobs and retire stale ones",
    )
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")

    ats = subparsers.add_parser("discover-ats", help="Probe ATS platforms for each school's job board")
    _add_common(ats)
    _add_filters(ats)
    ats.add_argument("--platform", choices=DISCOVERY_PLATFORMS, help="Only probe this platform")
    ats.add_argument("--force", action="store_true", help="Re-test schools that already have a confirmed ATS")
    ats.set_defaults(func=cmd_discover_ats)

    networks = subparsers.add_parser(
        "discover-networks", help="Probe school group ATS accounts and attach them to member schools"
    )
    _add_common(networks)
    networks.add_argument("--platform", choices=DISCOVERY_PLATFORMS, help="Only probe this platform")
    networks.add_argument("--force", action="store_true", help="Replace a member school's existing confirmed ATS")
    networks.set_defaults(func=cmd_discover_networks)

    web = subparsers.add_parser("discover-websites", help="Find school websites, career pages and embedded ATS")
    _add_common(web)
    _add_filters(web)
    web.add_argument(
        "--concurrency", type=int, default=DOMAIN_CONCURRENCY,
        help=f"Parallel domain probes (default {DOMAIN_CONCURRENCY}, max 30)",
    )
    web.add_argument("--force", action="store_true", help="Re-check schools that already have a website")
    web.set_defaults(func=cmd_discover_websites)

    crawl = subparsers.add_parser("crawl", help="Harvest jobs from boards, ATS platforms and career pages")
    _add_common(crawl)
    _add_filters(crawl)
    crawl.add_argument("--max-pages", type=int, help="Page cap per job board")
    crawl.add_argument("--platform", choices=sorted(PROBES), help="Only harvest schools on this ATS")
    crawl.add_argument("--skip-boards", action="store_true", help="Skip paginated job boards")
    crawl.add_argument("--skip-ats", action="store_true", help="Skip schools with a confirmed ATS")
    crawl.add_argument("--skip-career-pages", action="store_true", help="Skip school career pages")
    crawl.set_defaults(func=cmd_crawl)

    stale = subparsers.add_parser("stale-check", help="Re-check live harvested jobs and take down dead ones")
    _add_common(stale)
    stale.add_argument("--batch-size", type=int, help="URLs checked concurrently per batch")
    stale.add_argument("--batch-delay", type=float, help="Seconds between batches")
    stale.set_defaults(func=cmd_stale_check)

    return parser


def main(argv=None):
    load_env()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if getattr(args, "concurrency", None) is not None:
        args.concurrency = max(1, min(args.concurrency, 30))

    if hasattr(args, "func"):
        args.func(args)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
