"""Gap detection and single-step gap correction.

A gap run is a maximal span of reference positions whose identifiers appear
nowhere in the progress sequence. Each run must be matched in progress by the
same number of placeholders, located between the same anchors (identifiers
present in both sequences). The resolver inspects runs in order and proposes
one edit for the first run that is sized wrongly; callers re-run detection
after applying it because one edit can shift every later run.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from ..utils.errors import PreconditionViolationError
from .slots import SlotEdit, index_of, is_consistent


@dataclass(frozen=True, slots=True)
class GapRun:
    """Unmatched reference span, 0-based and inclusive on both ends."""

    start: int
    end: int
    reference_size: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    @property
    def is_leading(self) -> bool:
        return self.start == 0

    @property
    def is_trailing(self) -> bool:
        return self.end == self.reference_size - 1

    @property
    def is_interior(self) -> bool:
        return not self.is_leading and not self.is_trailing

    @property
    def kind(self) -> str:
        if self.is_leading and self.is_trailing:
            return "full"
        if self.is_leading:
            return "leading"
        if self.is_trailing:
            return "trailing"
        return "interior"

    def as_one_based(self) -> tuple[int, int]:
        return self.start + 1, self.end + 1

    def to_dict(self) -> dict[str, object]:
        start, end = self.as_one_based()
        return {"start": start, "end": end, "kind": self.kind}


def find_gap_runs(reference: Sequence[int], progress: Sequence[int]) -> List[GapRun]:
    """Return the ordered, disjoint runs of reference positions missing from progress."""

    present = set(progress)
    size = len(reference)
    runs: List[GapRun] = []
    run_start: int | None = None
    for idx, value in enumerate(reference):
        if value in present:
            if run_start is not None:
                runs.append(GapRun(run_start, idx - 1, size))
                run_start = None
        elif run_start is None:
            run_start = idx
    if run_start is not None:
        runs.append(GapRun(run_start, size - 1, size))
    return runs


def _anchor_index(value: int, progress: Sequence[int], run: GapRun, *, last: bool = False) -> int:
    idx = index_of(value, progress, last=last)
    if idx is None:
        raise PreconditionViolationError(
            "anchor_missing",
            f"Anchor {value} bounding gap {run.as_one_based()} is absent from progress",
            {"anchor": value, "run": run.to_dict()},
        )
    return idx


def _delete(idx: int, progress: Sequence[int]) -> SlotEdit:
    return SlotEdit.delete_at(idx, phase="gap", value=progress[idx])


def _resolve_full(reference: Sequence[int], progress: Sequence[int]) -> SlotEdit | None:
    # no anchors at all: only the slot count matters
    if len(progress) == len(reference):
        return None
    if len(progress) < len(reference):
        return SlotEdit.insert_at(0)
    return _delete(0, progress)


def _resolve_leading(run: GapRun, reference: Sequence[int], progress: Sequence[int]) -> SlotEdit | None:
    expected = run.end + 1
    actual = _anchor_index(reference[expected], progress, run)
    if actual == expected:
        return None
    if actual < expected:
        return SlotEdit.insert_at(0)
    return _delete(0, progress)


def _resolve_trailing(run: GapRun, reference: Sequence[int], progress: Sequence[int]) -> SlotEdit | None:
    anchor_ref = run.start - 1
    anchor_prog = _anchor_index(reference[anchor_ref], progress, run, last=True)
    from_end_ref = len(reference) - 1 - anchor_ref
    from_end_prog = len(progress) - 1 - anchor_prog
    if from_end_ref == from_end_prog:
        return None
    if from_end_ref < from_end_prog:
        return _delete(len(progress) - 1, progress)
    return SlotEdit.insert_at(len(progress))


def _resolve_interior(run: GapRun, reference: Sequence[int], progress: Sequence[int]) -> SlotEdit | None:
    before_ref = run.start - 1
    after_ref = run.end + 1
    before_prog = _anchor_index(reference[before_ref], progress, run)
    after_prog = _anchor_index(reference[after_ref], progress, run)
    span_prog = after_prog - before_prog
    if span_prog <= 0:
        raise PreconditionViolationError(
            "anchor_span_invalid",
            f"Anchors around gap {run.as_one_based()} are out of order in progress",
            {
                "run": run.to_dict(),
                "before": reference[before_ref],
                "after": reference[after_ref],
                "span": span_prog,
            },
        )
    span_ref = after_ref - before_ref
    if span_ref == span_prog:
        return None
    if span_ref < span_prog:
        return _delete(before_prog + 1, progress)
    return SlotEdit.insert_at(before_prog + 1)


def resolve_gap_run(run: GapRun, reference: Sequence[int], progress: Sequence[int]) -> SlotEdit | None:
    """Return the edit that moves *run* towards its reference size, if any."""

    if run.is_leading and run.is_trailing:
        return _resolve_full(reference, progress)
    if run.is_leading:
        return _resolve_leading(run, reference, progress)
    if run.is_trailing:
        return _resolve_trailing(run, reference, progress)
    return _resolve_interior(run, reference, progress)


def resolve_gap_runs(
    reference: Sequence[int],
    progress: Sequence[int],
    runs: Sequence[GapRun] | None = None,
) -> SlotEdit | None:
    """Return one edit for the first mis-sized gap run, or ``None`` when all fit.

    *progress* must already be free of stale markers.
    """

    if is_consistent(reference, progress):
        return None
    if not progress:
        return SlotEdit.insert_at(0) if reference else None

    if runs is None:
        runs = find_gap_runs(reference, progress)
    for run in runs:
        edit = resolve_gap_run(run, reference, progress)
        if edit is not None:
            return edit
    return None


__all__ = ["GapRun", "find_gap_runs", "resolve_gap_run", "resolve_gap_runs"]
