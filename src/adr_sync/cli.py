"""Command line entry point for adr-sync.

Subcommands:

    adr-sync sync [--dry-run] [--format text|json]
    adr-sync report [--format markdown|json]
    adr-sync indicator show PAGE_ID
    adr-sync indicator set PAGE_ID STATUS
    adr-sync indicator remove PAGE_ID

Progress lines and reports go to stdout; log records and errors go to
stderr.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

import requests
import yaml
from dotenv import load_dotenv

from . import __version__
from .config import Config, load_config
from .config_loader import discover_config_files, load_hierarchical_config
from .config_schema import AdrConfig, UnifiedConfig, build_config, resolve_adr_config
from .core.client import ConfluenceAPIError, ConfluenceClient
from .logger import setup_logging
from .sync.collector import PageCollector
from .sync.engine import SyncEngine
from .sync.indicators import indicator_for_code, map_status, property_value
from .sync.reconciler import PropertyReconciler
from .sync.reporter import (
    format_result_line,
    format_run_header,
    format_status_markdown,
    format_tally,
    report_to_json,
    status_report_to_json,
)
from .sync.status_report import build_status_report
from .sync.titles import TitleFilter

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_INCOMPLETE = 2

SECRETS_ENV_FILE = Path.home() / ".local" / "secrets" / "atlassian.env"


class CommandError(Exception):
    """Raised for user-facing failures that end the command with exit 1."""


def _stderr_print(msg: str) -> None:
    print(msg, file=sys.stderr, flush=True)


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


# ---------------------------------------------------------------------------
# Bootstrap
# ---------------------------------------------------------------------------


def load_unified_config() -> UnifiedConfig:
    """Load .env files and YAML config into a ``UnifiedConfig``."""
    # .env first so ${VAR} interpolation in YAML can see its values
    load_dotenv()
    if SECRETS_ENV_FILE.exists():
        load_dotenv(SECRETS_ENV_FILE)

    config_files = discover_config_files()
    if not config_files:
        return UnifiedConfig()
    unified = build_config(load_hierarchical_config())
    logger.info("Configuration loaded from: %s", config_files[0])
    return unified


def build_connection(unified: UnifiedConfig, args: argparse.Namespace) -> Config:
    yaml_fallbacks = {
        k: v
        for k, v in unified.confluence.model_dump().items()
        if v is not None
    }
    return load_config(
        site=args.site,
        email=args.email,
        insecure=args.insecure,
        debug=args.debug,
        yaml_fallbacks=yaml_fallbacks,
    )


def build_profile(unified: UnifiedConfig, args: argparse.Namespace) -> AdrConfig:
    return resolve_adr_config(
        unified,
        cli_overrides={
            "space_key": args.space,
            "parent_page_id": args.parent_id,
        },
    )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def cmd_sync(
    client: ConfluenceClient, profile: AdrConfig, args: argparse.Namespace
) -> int:
    as_json = args.format == "json"
    engine = SyncEngine(
        client,
        profile,
        on_result=None if as_json else lambda r: print(format_result_line(r), flush=True),
    )

    # Collect before printing anything so a failed search leaves no output.
    adrs = engine.collect_adrs()

    if not as_json:
        print(format_run_header(args.dry_run))
        print(f"Found {len(adrs)} ADR pages\n", flush=True)

    report = engine.run(dry_run=args.dry_run, pages=adrs)

    if as_json:
        _print_json(report_to_json(report))
    else:
        print()
        print(format_tally(report))

    return EXIT_INCOMPLETE if report.has_failures else EXIT_OK


def cmd_report(
    client: ConfluenceClient,
    profile: AdrConfig,
    args: argparse.Namespace,
) -> int:
    collector = PageCollector(
        client, profile.space_key, profile.parent_page_id, profile.page_size
    )
    pages = collector.collect()
    report = build_status_report(
        pages,
        TitleFilter.from_config(profile),
        site_url=client.config.base_url,
    )

    if args.format == "json":
        _print_json(status_report_to_json(report))
    else:
        print(format_status_markdown(report))
    return EXIT_OK


def cmd_indicator(
    client: ConfluenceClient,
    profile: AdrConfig,
    args: argparse.Namespace,
) -> int:
    reconciler = PropertyReconciler(client)
    page_id = args.page_id
    keys = profile.property_keys

    if args.action == "show":
        found = [(key, reconciler.read(page_id, key)) for key in keys]
        stored = next((p.value for _, p in found if p is not None), None)
        indicator = indicator_for_code(str(stored)) if stored is not None else None
        _print_json(
            {
                "pageId": page_id,
                "indicator": indicator.code if indicator else None,
                "symbol": indicator.symbol if indicator else None,
                "properties": [
                    {"key": key, "value": p.value, "version": p.version}
                    for key, p in found
                    if p is not None
                ],
            }
        )
        return EXIT_OK

    if args.action == "set":
        indicator = map_status(args.status) or indicator_for_code(args.status)
        if indicator is None:
            raise CommandError(
                f'"{args.status}" is not a standard ADR status or indicator code'
            )
        value = property_value(indicator, profile.property_value)
        results = [reconciler.reconcile(page_id, key, value) for key in keys]
        _print_json(
            {
                "pageId": page_id,
                "indicator": indicator.code,
                "symbol": indicator.symbol,
                "properties": [
                    {
                        "key": r.key,
                        "outcome": r.outcome.value,
                        "version": r.version,
                        **({"error": r.error} if r.error else {}),
                    }
                    for r in results
                ],
            }
        )
        return EXIT_OK if all(r.ok for r in results) else EXIT_INCOMPLETE

    deleted: list[str] = []
    missing: list[str] = []
    for key in keys:
        (deleted if reconciler.remove(page_id, key) else missing).append(key)
    _print_json({"pageId": page_id, "deleted": deleted, "missing": missing})
    return EXIT_OK


COMMANDS = {
    "sync": cmd_sync,
    "report": cmd_report,
    "indicator": cmd_indicator,
}


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="adr-sync",
        description="Sync ADR status indicators on Confluence pages",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Preview which indicators would be written
  adr-sync sync --dry-run

  # Write indicators for every ADR
  adr-sync sync

  # Status report as JSON
  adr-sync report --format json

  # Set or clear the indicator on a single page
  adr-sync indicator set 123456 accepted
  adr-sync indicator remove 123456

Credentials are read from ATLASSIAN_SITE, ATLASSIAN_EMAIL and
ATLASSIAN_API_TOKEN (.env and ~/.local/secrets/atlassian.env are loaded).
        """,
    )
    parser.add_argument(
        "--site",
        help="Confluence site, e.g. example.atlassian.net (overrides ATLASSIAN_SITE)",
    )
    parser.add_argument(
        "--email", help="Account email (overrides ATLASSIAN_EMAIL)"
    )
    parser.add_argument(
        "--space", help="Space key holding the ADRs (overrides ADR_SPACE_KEY)"
    )
    parser.add_argument(
        "--parent-id",
        help="Page id of the ADR parent page (overrides ADR_PARENT_PAGE_ID)",
    )
    parser.add_argument(
        "--insecure",
        action="store_true",
        help="Skip SSL certificate verification (use only for development)",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging"
    )
    parser.add_argument("--log-file", help="Also write log records to this file")
    parser.add_argument(
        "--log-format",
        choices=("text", "json"),
        default="text",
        help="Log record format (default: text)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"adr-sync version {__version__}",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    sync = sub.add_parser("sync", help="Sync indicators from ADR status")
    sync.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would change without making any updates",
    )
    sync.add_argument(
        "--format", choices=("text", "json"), default="text"
    )

    report = sub.add_parser("report", help="Print an ADR status report")
    report.add_argument(
        "--format", choices=("markdown", "json"), default="markdown"
    )

    indicator = sub.add_parser(
        "indicator", help="Show, set or remove one page's indicator"
    )
    actions = indicator.add_subparsers(dest="action", required=True)
    show = actions.add_parser("show", help="Show the stored indicator")
    show.add_argument("page_id")
    set_ = actions.add_parser("set", help="Set the indicator from a status")
    set_.add_argument("page_id")
    set_.add_argument("status", help="ADR status or indicator code")
    remove = actions.add_parser("remove", help="Delete the indicator properties")
    remove.add_argument("page_id")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the CLI and return the process exit code."""
    args = build_parser().parse_args(argv)

    try:
        unified = load_unified_config()
    except (OSError, ValueError, yaml.YAMLError) as e:
        _stderr_print(f"ERROR: Configuration error: {e}")
        return EXIT_FATAL

    setup_logging(
        debug=args.debug,
        log_file=args.log_file or unified.logging.file,
        debug_format=args.log_format,
        level=unified.logging.level,
    )

    try:
        config = build_connection(unified, args)
        profile = build_profile(unified, args)
    except ValueError as e:
        logger.error("Configuration error: %s", e)
        _stderr_print(f"ERROR: Configuration error: {e}")
        return EXIT_FATAL

    client = ConfluenceClient(config)
    try:
        return COMMANDS[args.command](client, profile, args)
    except CommandError as e:
        _stderr_print(f"ERROR: {e}")
        return EXIT_FATAL
    except (ConfluenceAPIError, requests.RequestException, ValueError) as e:
        logger.error("%s failed: %s", args.command, e)
        _stderr_print(f"ERROR: {e}")
        return EXIT_FATAL
    except KeyboardInterrupt:
        _stderr_print("\nInterrupted.")
        return EXIT_FATAL


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
