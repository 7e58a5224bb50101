"""
Command line entry point.

    verify-puzzles                      # verify the configured catalog
    verify-puzzles verify data/puzzles.json --strict --jobs 4
    verify-puzzles build lichess_db_puzzle.csv -o data/puzzles.json

`verify` prints one line per puzzle and a summary, and exits 0 only when every
puzzle passed (1 otherwise, 2 when the catalog itself cannot be loaded), so it
can gate a build.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from .builder import build_catalog
from .catalog import PuzzleCatalog
from .config import get_settings
from .errors import MalformedCatalog
from .logging_setup import configure_logging
from .puzzle_types import BUCKET_ORDER
from .runner import verify_catalog
from .verifier import PuzzleVerifier

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_MALFORMED = 2


def _verify_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="verify-puzzles",
        description="Check that every catalog puzzle is a legal line ending in checkmate.",
    )
    ap.add_argument("catalog", nargs="?", default=None,
                    help="Catalog JSON file (default: PUZZLE_CATALOG_PATH or data/puzzles.json)")
    ap.add_argument("--strict", action="store_true", default=None,
                    help="Also require every solver move to check and leave a single reply.")
    ap.add_argument("--jobs", type=int, default=None, help="Worker threads (default: 1).")
    ap.add_argument("--timeout", type=float, default=None, help="Per-puzzle time limit in seconds.")
    ap.add_argument("--json", action="store_true", help="Print the report as JSON instead of status lines.")
    ap.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING (default), ERROR.")
    return ap


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="verify-puzzles build",
        description="Build a mate puzzle catalog from a Lichess puzzle CSV export.",
    )
    ap.add_argument("csv", help="Lichess puzzle database CSV")
    ap.add_argument("-o", "--output", default=None, help="Output JSON (default: the configured catalog path)")
    ap.add_argument("--per-bucket", type=int, default=20, help="Puzzles per bucket (0 = no limit).")
    ap.add_argument("--keep-setup-move", action="store_true",
                    help="Keep the opponent's first move in the solution instead of applying it.")
    ap.add_argument("--log-level", default=None)
    return ap


def run_verify(argv: List[str]) -> int:
    args = _verify_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(args.log_level or settings.log_level)

    path = args.catalog or settings.catalog_path
    try:
        catalog = PuzzleCatalog.load(path)
    except MalformedCatalog as exc:
        print(f"Malformed catalog: {exc}", file=sys.stderr)
        return EXIT_MALFORMED

    strict = settings.strict if args.strict is None else args.strict
    verifier = PuzzleVerifier(strict=strict)
    report = verify_catalog(
        catalog,
        verifier,
        max_workers=args.jobs or settings.max_workers,
        timeout=args.timeout if args.timeout is not None else settings.verify_timeout_s,
    )

    if args.json:
        print(report.to_json())
    else:
        for r in report.reports:
            print(r.line())
        print(report.summary_line())
    return report.exit_code


def run_build(argv: List[str]) -> int:
    args = _build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(args.log_level or settings.log_level)

    try:
        catalog = build_catalog(args.csv, per_bucket=args.per_bucket or None, keep_setup_move=args.keep_setup_move)
    except (MalformedCatalog, OSError) as exc:
        print(f"Cannot build catalog: {exc}", file=sys.stderr)
        return EXIT_MALFORMED

    output = args.output or settings.catalog_path
    catalog.dump(output)
    counts = ", ".join(f"{b.value}={len(catalog.by_bucket(b))}" for b in BUCKET_ORDER)
    print(f"Built {output} ({counts})")
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    if argv and argv[0] == "build":
        return run_build(argv[1:])
    if argv and argv[0] == "verify":
        argv = argv[1:]
    return run_verify(argv)


if __name__ == "__main__":
    sys.exit(main())
