#!/usr/bin/env python3
"""Replay reference/progress realignment scenarios and report failures."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from slotsync.services.realign import realign  # noqa: E402
from slotsync.services.realign_report import (  # noqa: E402
    format_alignment_table,
    format_sequence,
    parse_sequence,
)
from slotsync.utils.errors import PreconditionViolationError  # noqa: E402
from slotsync.utils.logging import configure_logging  # noqa: E402

# (reference, progress) pairs covering additions, removals and mixed edits.
CASES: tuple[tuple[str, str], ...] = (
    ("1,2,3", "1,0"),
    ("1,2,3", "0,3"),
    ("1,2,3", "1,3"),
    ("5,10,15,20", "0,0"),
    ("5,10,15,20", "5,10,15"),
    ("5,10,15,20", "10,15"),
    ("5,10,15,20", "5,15"),
    ("5,10,15,20", "5,6,10"),
    ("5,10,15,20", "5,10,15,20,25"),
    ("5,10,15,20", "0,0,0,20,0"),
    ("5,10,15,20", "0,0,0,0,0"),
    ("5,10,15,20", "0,10,15,0,0"),
    ("5,10,15,20", "5,0,0,0,0"),
    ("5,10,15,20", "5,0,0,0,40"),
    ("5,10,15,20", "5,0,0,40"),
    ("5,10,15,20", "5,6,15"),
    ("1,5,10,15,20", "5,6,15,17"),
    ("15,20", "5,6,15,17,0"),
    ("15,20", "0,6,0,17,0"),
    ("1,5,10,15,17,18", "1,5,10,15,17,18"),
    ("1,5,10,15,17,18", "1,5,11,15,17,18"),
    ("1,5,10,15,17,18", "1,5,0,15,17,18"),
    ("1,5,10,15,17,18", "0,0,0,15,17,0"),
    ("18", "0"),
    ("", ""),
    ("5,10,15,16,20,25", "10,15,20,25"),
    ("5,10,15,16,20,25", "0,15,20,25"),
    ("5,10,15,16,20,25", "0,5,10,15,16,20,25"),
    ("5,10,15,16,20,25", "0,5,10,15,16,20,25,29"),
    ("5,10,15,16,20,25", "5,10,15,0,0,16,20,25"),
    ("5,10,15,16,20,25", "0,0,5,10,15,16,20,25,29"),
    ("5,10,15,16,20,25", "0,5,10,16,20,0,25"),
    ("5,10,15,16,20,25", "0,5,10,15,0,0"),
    ("", "0,5,0"),
    ("3,13,23", ""),
    ("1,8,9,10", "0,0,8,0"),
)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--reference",
        help="Realign a single case: comma-delimited reference identifiers.",
    )
    parser.add_argument(
        "--progress",
        default="",
        help="Comma-delimited progress slots for --reference (0 = pending).",
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Only print the final summary."
    )
    return parser.parse_args()


def run_case(reference_text: str, progress_text: str, *, quiet: bool = False) -> bool:
    """Realign one case, print its before/after tables and return success."""

    reference = parse_sequence(reference_text)
    progress = parse_sequence(progress_text)
    if not quiet:
        print("=" * 43)
        print(format_alignment_table(reference, progress))
    try:
        result = realign(reference, progress)
    except PreconditionViolationError as exc:
        print(f"ERROR: {exc.code}: {exc}")
        return False

    if not quiet:
        for edit in result.edits:
            print(f"  {edit.phase}: {edit.kind} {edit.position}")
        print(format_alignment_table(reference, result.progress))
    if not result.ok:
        print(f"ERROR: vectors out of sync ({result.error.code})")  # type: ignore[union-attr]
        return False
    if not quiet:
        print(f"OK ({result.status}): {format_sequence(result.progress)}")
    return True


def main() -> int:
    configure_logging()
    args = parse_args()
    cases = CASES
    if args.reference is not None:
        cases = ((args.reference, args.progress),)

    failures = sum(
        1 for reference, progress in cases if not run_case(reference, progress, quiet=args.quiet)
    )
    if failures:
        print(f"{failures} case(s) FAILED")
        return 1
    print(f"All {len(cases)} case(s) realigned")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
