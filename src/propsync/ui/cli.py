# ruff: noqa: T201

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from propsync.app import list_sync_cursors, sync_market_sources
from propsync.config import MARKET_SOURCES, configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Synchronise market transaction sources")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log per-record decisions at DEBUG level",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    codes = ", ".join(source.code for source in MARKET_SOURCES)
    sync = subparsers.add_parser("sync", help="Run a resumable sync for one or more sources")
    sync.add_argument(
        "--source",
        dest="sources",
        action="append",
        metavar="ID",
        help=f"Source id or code to sync; repeatable (default: all of {codes})",
    )
    sync.add_argument(
        "--today",
        type=str,
        help="ISO date (YYYY-MM-DD) used as the inclusive end of the sync window",
    )

    subparsers.add_parser("cursors", help="List stored sync cursors")

    return parser.parse_args(list(argv))


def _parse_iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except ValueError as exc:
        raise ValueError(f"Invalid ISO date: {value}") from exc


def _print_json(payload: object) -> None:
    print(json.dumps(payload, indent=2, sort_keys=False))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
    try:
        today = (
            _parse_iso_date(parsed_args.today)
            if parsed_args.command == "sync" and parsed_args.today
            else None
        )
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "sync":
            report = sync_market_sources(parsed_args.sources, today=today)
            _print_json(report.as_dict())
            if not report.succeeded:
                sys.exit(1)
        elif parsed_args.command == "cursors":
            _print_json(
                [
                    {
                        "source_id": cursor.source_id,
                        "last_synced_date": (
                            cursor.last_synced_date.isoformat()
                            if cursor.last_synced_date
                            else None
                        ),
                        "total_records_synced": cursor.total_records_synced,
                        "last_sync_at": (
                            cursor.last_sync_at.isoformat() if cursor.last_sync_at else None
                        ),
                    }
                    for cursor in list_sync_cursors()
                ]
            )
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during sync")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console-script entry point: load ``.env`` and install the SIGINT handler."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
