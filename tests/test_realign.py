"""Tests for the realignment orchestrator."""

from __future__ import annotations

import json
import logging
import random

import pytest

from slotsync.config import Settings
from slotsync.services.realign import default_edit_budget, realign
from slotsync.services.realign_report import parse_sequence
from slotsync.services.slots import is_consistent
from slotsync.utils.errors import PreconditionViolationError, UnreconcilableStateError
from slotsync.utils.trace import RealignTracer


REALIGN_CASES = [
    ("1,2,3", "1,0", "1,0,0"),
    ("1,2,3", "0,3", "0,0,3"),
    ("1,2,3", "1,3", "1,0,3"),
    ("5,10,15,20", "0,0", "0,0,0,0"),
    ("5,10,15,20", "5,10,15", "5,10,15,0"),
    ("5,10,15,20", "10,15", "0,10,15,0"),
    ("5,10,15,20", "5,15", "5,0,15,0"),
    ("5,10,15,20", "5,6,10", "5,10,0,0"),
    ("5,10,15,20", "5,10,15,20,25", "5,10,15,20"),
    ("5,10,15,20", "0,0,0,20,0", "0,0,0,20"),
    ("5,10,15,20", "0,0,0,0,0", "0,0,0,0"),
    ("5,10,15,20", "0,10,15,0,0", "0,10,15,0"),
    ("5,10,15,20", "5,0,0,0,0", "5,0,0,0"),
    ("5,10,15,20", "5,0,0,0,40", "5,0,0,0"),
    ("5,10,15,20", "5,0,0,40", "5,0,0,0"),
    ("5,10,15,20", "5,6,15", "5,0,15,0"),
    ("1,5,10,15,20", "5,6,15,17", "0,5,0,15,0"),
    ("15,20", "5,6,15,17,0", "15,0"),
    ("15,20", "0,6,0,17,0", "0,0"),
    ("1,5,10,15,17,18", "1,5,11,15,17,18", "1,5,0,15,17,18"),
    ("1,5,10,15,17,18", "1,5,0,15,17,18", "1,5,0,15,17,18"),
    ("1,5,10,15,17,18", "0,0,0,15,17,0", "0,0,0,15,17,0"),
    ("18", "0", "0"),
    ("", "", ""),
    ("5,10,15,16,20,25", "10,15,20,25", "0,10,15,0,20,25"),
    ("5,10,15,16,20,25", "0,15,20,25", "0,0,15,0,20,25"),
    ("5,10,15,16,20,25", "0,5,10,15,16,20,25", "5,10,15,16,20,25"),
    ("5,10,15,16,20,25", "0,5,10,15,16,20,25,29", "5,10,15,16,20,25"),
    ("5,10,15,16,20,25", "5,10,15,0,0,16,20,25", "5,10,15,16,20,25"),
    ("5,10,15,16,20,25", "0,0,5,10,15,16,20,25,29", "5,10,15,16,20,25"),
    ("5,10,15,16,20,25", "0,5,10,16,20,0,25", "5,10,0,16,20,25"),
    ("5,10,15,16,20,25", "0,5,10,15,0,0", "5,10,15,0,0,0"),
    ("", "0,5,0", ""),
    ("3,13,23", "", "0,0,0"),
]


@pytest.mark.parametrize(("reference", "progress", "expected"), REALIGN_CASES)
def test_realign_cases(reference: str, progress: str, expected: str) -> None:
    ref = parse_sequence(reference)
    prog = parse_sequence(progress)

    result = realign(ref, prog)

    assert result.ok
    assert result.progress == parse_sequence(expected)
    assert is_consistent(ref, result.progress)


def test_moved_marker_lands_on_its_new_index() -> None:
    """4 was removed and 10 appended; 8 must end up in the second slot."""

    progress = [0, 0, 8, 0]
    result = realign([1, 8, 9, 10], progress)

    assert result.status == "realigned"
    assert progress == [0, 8, 0, 0]
    assert result.progress is progress
    assert [edit.signed for edit in result.edits] == [-1, 3]
    assert [run.as_one_based() for run in result.gap_runs] == [(1, 1), (3, 4)]


def test_growing_reference_pads_placeholders() -> None:
    result = realign([5, 10, 15, 20, 25], [0, 0])

    assert result.progress == [0, 0, 0, 0, 0]
    assert [edit.signed for edit in result.edits] == [0, 0, 0]


def test_stale_markers_are_reported() -> None:
    result = realign([15, 20], [5, 6, 15, 17, 0])

    assert result.progress == [15, 0]
    assert result.stale_markers == [5, 6, 17]
    assert all(edit.phase == "stale" for edit in result.edits)


def test_empty_reference_clears_progress() -> None:
    result = realign([], [0, 5, 0])

    assert result.progress == []
    assert result.stale_markers == [5]
    assert [edit.phase for edit in result.edits] == ["stale", "surplus", "surplus"]


def test_consistent_input_is_left_untouched() -> None:
    progress = [1, 5, 10, 15, 17, 18]
    result = realign([1, 5, 10, 15, 17, 18], progress)

    assert result.status == "unchanged"
    assert result.edits == []
    assert not result.changed
    assert progress == [1, 5, 10, 15, 17, 18]


def test_realign_is_idempotent() -> None:
    reference = [5, 10, 15, 16, 20, 25]
    first = realign(reference, [0, 5, 10, 16, 20, 0, 25])
    again = realign(reference, list(first.progress))

    assert again.status == "unchanged"
    assert again.progress == first.progress


def _random_case(rng: random.Random) -> tuple[list[int], list[int]]:
    old_reference = sorted(rng.sample(range(1, 60), rng.randint(0, 12)))
    progress: list[int] = []
    for value in old_reference:
        progress.append(value if rng.random() < 0.5 else 0)
    for _ in range(rng.randint(0, 3)):
        progress.insert(rng.randint(0, len(progress)), 0)

    kept = [value for value in old_reference if rng.random() < 0.7]
    added = rng.sample(range(1, 60), rng.randint(0, 5))
    reference = sorted(set(kept) | set(added))
    return reference, progress


def test_random_edits_converge_and_preserve_markers() -> None:
    rng = random.Random(20240917)
    for _ in range(300):
        reference, progress = _random_case(rng)
        original = list(progress)

        result = realign(reference, progress)

        assert result.ok, (reference, original, result.error)
        assert is_consistent(reference, result.progress)
        surviving = {value for value in original if value in set(reference)}
        for index, value in enumerate(reference):
            if value in surviving:
                assert result.progress[index] == value, (reference, original)
        fabricated = {value for value in result.progress if value} - set(original)
        assert not fabricated
        assert len(result.edits) <= default_edit_budget(reference, original)

        again = realign(reference, list(result.progress))
        assert again.status == "unchanged"


def test_malformed_input_fails_fast() -> None:
    with pytest.raises(PreconditionViolationError) as excinfo:
        realign([10, 5], [0, 0])
    assert excinfo.value.code == "reference_not_ascending"

    with pytest.raises(PreconditionViolationError) as excinfo:
        realign([1, 2, 3], [3, 0, 1])
    assert excinfo.value.code == "progress_not_ascending"


def test_out_of_order_anchors_raise_without_validation() -> None:
    with pytest.raises(PreconditionViolationError) as excinfo:
        realign([1, 2, 3], [3, 0, 1], validate=False)
    assert excinfo.value.code == "anchor_span_invalid"


def test_duplicate_markers_end_unreconcilable() -> None:
    result = realign([1, 2], [1, 1], validate=False)

    assert result.status == "unreconcilable"
    assert not result.ok
    assert result.error is not None
    assert result.error.code == "out_of_sync"
    assert result.error.progress == (1, 1, 0)

    with pytest.raises(UnreconcilableStateError) as excinfo:
        result.raise_for_status()
    assert excinfo.value.code == "out_of_sync"
    assert excinfo.value.progress == [1, 1, 0]


def test_marker_is_never_deleted_outside_stale_phase() -> None:
    progress = [3, 0, 0, 2]
    result = realign([1, 2, 3], progress, validate=False)

    assert result.status == "unreconcilable"
    assert result.error is not None and result.error.code == "marker_deletion"
    assert progress == [3, 0, 0, 2]


def test_edit_budget_bounds_the_loop() -> None:
    result = realign([5, 10, 15, 20, 25], [0, 0], max_edits=1)

    assert result.status == "unreconcilable"
    assert result.error is not None and result.error.code == "edit_budget_exhausted"
    assert len(result.edits) == 1


def test_settings_drive_validation_and_budget(tmp_path) -> None:
    settings = Settings(
        realign_validate_inputs=False,
        realign_max_edits=1,
        realign_trace_dir=tmp_path,
    )

    result = realign([1, 2], [1, 1], settings=settings)
    assert result.error is not None and result.error.code == "edit_budget_exhausted"


def test_tracer_records_phases(tmp_path) -> None:
    tracer = RealignTracer(run_id="case-a", out_dir=str(tmp_path))

    realign([15, 20, 25], [5, 15, 0], tracer=tracer)

    types = [event["type"] for event in tracer.as_list()]
    assert types[0] == "start_run"
    assert "stale_removed" in types
    assert types[-1] == "end_run"

    summary = tracer.summary()
    assert summary["edits_by_phase"] == {"gap": 1}
    assert summary["outcome"]["status"] == "realigned"
    assert summary["outcome"]["progress"] == [15, 0, 0]

    path = tracer.flush_jsonl()
    lines = (tmp_path / "case-a.jsonl").read_text(encoding="utf-8").splitlines()
    assert path.endswith("case-a.jsonl")
    assert json.loads(lines[0])["type"] == "start_run"
    assert json.loads((tmp_path / "case-a.summary.json").read_text(encoding="utf-8"))[
        "run_id"
    ] == "case-a"


def test_edits_are_logged(caplog) -> None:
    with caplog.at_level(logging.DEBUG, logger="slotsync.services.realign"):
        realign([1, 2, 3], [1, 3])

    assert any("Inserted placeholder after slot 1" in record.message for record in caplog.records)
