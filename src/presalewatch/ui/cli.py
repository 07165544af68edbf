from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from presalewatch import __version__
from presalewatch.app import (
    RunOptions,
    StoreKind,
    detect_overrides,
    import_sites,
    init_store,
    run_collection,
)
from presalewatch.config import ConfigurationError, configure_logging
from presalewatch.domain.pipeline import OutcomeStatus

if TYPE_CHECKING:
    from collections.abc import Sequence

log = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}") from exc
    if parsed < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {parsed}")
    return parsed


def _non_negative_float(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {parsed}")
    return parsed


def _add_store_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--store",
        type=StoreKind,
        choices=list(StoreKind),
        default=StoreKind.SHEETS,
        help="Tabular store backing projects and history (default: sheets)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="presalewatch",
        description="Collect and reconcile crypto presale facts",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Collect all configured projects once")
    _add_store_argument(run)
    run.add_argument(
        "--sites",
        type=Path,
        help="Local JSON sites file used instead of the SitesConfig table",
    )
    run.add_argument(
        "--workers",
        type=_positive_int,
        help="Projects processed concurrently per batch (defaults to MAX_CONCURRENT_REQUESTS)",
    )
    run.add_argument(
        "--delay",
        type=_non_negative_float,
        help="Seconds to wait between batches (defaults to INTER_BATCH_DELAY_SECONDS)",
    )
    run.add_argument(
        "--only",
        nargs="+",
        default=[],
        metavar="URL",
        help="Restrict the run to these project URLs",
    )
    run.add_argument(
        "--no-notify",
        action="store_true",
        help="Do not send Telegram reports",
    )

    detect = subparsers.add_parser(
        "detect-overrides",
        help="Flag manual edits in stored projects without collecting",
    )
    _add_store_argument(detect)

    init = subparsers.add_parser("init-store", help="Create tables and header rows")
    _add_store_argument(init)

    importer = subparsers.add_parser(
        "import-sites",
        help="Copy a local JSON sites file into the SitesConfig table",
    )
    _add_store_argument(importer)
    importer.add_argument("file", type=Path, help="JSON sites file")

    return parser


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    args = _build_parser().parse_args(list(argv))
    if args.command == "run" and args.store is StoreKind.MEMORY and args.sites is None:
        raise ValueError("--store memory has no SitesConfig table; pass --sites FILE")
    return args


def _run(args: argparse.Namespace) -> None:
    result = run_collection(
        RunOptions(
            store=args.store,
            sites_file=args.sites,
            workers=args.workers,
            inter_batch_delay=args.delay,
            only=tuple(args.only),
            notify=not args.no_notify,
        ),
        handle_sigint=True,
    )
    counts = result.counts()
    log.info(
        "Run finished: %s%s",
        ", ".join(f"{status}={counts[status]}" for status in OutcomeStatus),
        " (cancelled)" if result.cancelled else "",
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    try:
        configure_logging()
        args = _parse_args(list(argv) if argv is not None else sys.argv[1:])
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if args.command == "run":
            _run(args)
        elif args.command == "detect-overrides":
            flagged = detect_overrides(args.store)
            for url, fields in flagged:
                log.info("Flagged %s: %s", url, ", ".join(sorted(fields)))
        elif args.command == "init-store":
            init_store(args.store)
        elif args.command == "import-sites":
            imported = import_sites(args.store, args.file)
            log.info("Imported %d site(s)", imported)
        else:
            raise ValueError(f"Unsupported command: {args.command}")  # noqa: TRY301
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during run")
        sys.exit(1)


if __name__ == "__main__":
    main()
