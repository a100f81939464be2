"""Realign a progress sequence with an edited reference sequence.

The reference lists step identifiers in strictly ascending order. The progress
sequence mirrors it slot for slot, holding ``0`` for pending steps and the
step's identifier once completed. When identifiers are added to or removed
from the reference, :func:`realign` patches progress in place, one slot at a
time, until it corresponds to the reference again. Markers whose identifier
survived keep their value and land on the identifier's new index.

Phases, in order:

1. stale markers (identifiers no longer referenced) lose their slot;
2. gap runs are resized one edit at a time until all fit;
3. surplus placeholders are dropped while progress is still too long;
4. the result is verified, and failures are reported on the returned
   :class:`RealignResult` instead of raising.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Literal, MutableSequence, Sequence

from ..config import Settings
from ..utils.errors import UnreconcilableStateError
from ..utils.logging import TRACE_LEVEL
from ..utils.trace import RealignTracer
from .gap_runs import GapRun, find_gap_runs, resolve_gap_runs
from .placeholder_surplus import find_surplus_placeholder
from .realign_report import format_alignment_table
from .slots import PLACEHOLDER, SlotEdit, apply_edit, is_consistent, validate_sequences
from .stale_markers import remove_stale_markers

LOGGER = logging.getLogger(__name__)

RealignStatus = Literal["unchanged", "realigned", "unreconcilable"]


@dataclass(frozen=True, slots=True)
class UnreconcilableState:
    """Why a realignment stopped short of a consistent progress sequence."""

    code: str
    message: str
    progress: tuple[int, ...]

    def to_dict(self) -> dict[str, object]:
        return {"code": self.code, "message": self.message, "progress": list(self.progress)}


@dataclass
class RealignResult:
    """Outcome of one :func:`realign` call."""

    reference: tuple[int, ...]
    initial: tuple[int, ...]
    progress: MutableSequence[int]
    status: RealignStatus = "unchanged"
    edits: List[SlotEdit] = field(default_factory=list)
    stale_markers: List[int] = field(default_factory=list)
    gap_runs: List[GapRun] = field(default_factory=list)
    error: UnreconcilableState | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def changed(self) -> bool:
        return bool(self.edits)

    def raise_for_status(self) -> "RealignResult":
        """Raise :class:`UnreconcilableStateError` when the run failed."""

        if self.error is not None:
            raise UnreconcilableStateError(
                self.error.code,
                self.error.message,
                progress=list(self.error.progress),
                extra={"reference": list(self.reference), "edits": len(self.edits)},
            )
        return self


def default_edit_budget(reference: Sequence[int], progress: Sequence[int]) -> int:
    """Upper bound on edits for well-formed inputs, with headroom."""

    return 2 * (len(reference) + len(progress)) + 2


def _log_state(label: str, reference: Sequence[int], progress: Sequence[int]) -> None:
    if LOGGER.isEnabledFor(TRACE_LEVEL):
        LOGGER.log(TRACE_LEVEL, "%s\n%s", label, format_alignment_table(reference, progress))


class _Realigner:
    """Single-use state machine behind :func:`realign`."""

    def __init__(
        self,
        reference: Sequence[int],
        progress: MutableSequence[int],
        *,
        budget: int,
        tracer: RealignTracer | None,
    ) -> None:
        self.reference = reference
        self.progress = progress
        self.budget = budget
        self.tracer = tracer
        self.result = RealignResult(
            reference=tuple(reference), initial=tuple(progress), progress=progress
        )

    def run(self) -> RealignResult:
        reference, progress = self.reference, self.progress
        if self.tracer:
            self.tracer.ev(
                "start_run",
                reference=list(reference),
                progress=list(progress),
                budget=self.budget,
            )
        _log_state("Before realignment", reference, progress)

        if is_consistent(reference, progress):
            return self._finish("unchanged")

        stale_edits = remove_stale_markers(reference, progress)
        self.result.edits.extend(stale_edits)
        self.result.stale_markers = [edit.value for edit in stale_edits]
        if self.tracer and stale_edits:
            self.tracer.ev(
                "stale_removed",
                markers=self.result.stale_markers,
                positions=[edit.position for edit in stale_edits],
            )
        if is_consistent(reference, progress):
            return self._finish("realigned")

        self.result.gap_runs = find_gap_runs(reference, progress)
        if self.tracer:
            self.tracer.ev("gap_runs", runs=[run.to_dict() for run in self.result.gap_runs])

        while True:
            if self._budget_spent():
                return self._fail("edit_budget_exhausted", "Gap correction did not converge")
            edit = resolve_gap_runs(reference, progress)
            if edit is None:
                break
            if not self._apply(edit):
                return self._fail("marker_deletion", "Gap correction would delete a marker")

        while len(progress) > len(reference):
            if self._budget_spent():
                return self._fail(
                    "edit_budget_exhausted", "Surplus placeholder removal did not converge"
                )
            edit = find_surplus_placeholder(reference, progress)
            if edit is None:
                LOGGER.warning("No surplus placeholder found in %s slots", len(progress))
                break
            if not self._apply(edit):
                return self._fail("marker_deletion", "Surplus removal would delete a marker")

        if not is_consistent(reference, progress):
            return self._fail("out_of_sync", "Progress does not correspond to reference")
        return self._finish("realigned")

    def _budget_spent(self) -> bool:
        return len(self.result.edits) >= self.budget

    def _apply(self, edit: SlotEdit) -> bool:
        if edit.kind == "delete" and edit.value != PLACEHOLDER:
            LOGGER.warning("Refusing to delete marker %s at slot %s", edit.value, edit.position)
            if self.tracer:
                self.tracer.ev("edit_rejected", **edit.to_dict())
            return False
        apply_edit(edit, self.progress)
        self.result.edits.append(edit)
        if edit.kind == "insert":
            LOGGER.debug("Inserted placeholder after slot %s (%s)", edit.position, edit.phase)
        else:
            LOGGER.debug("Deleted placeholder slot %s (%s)", edit.position, edit.phase)
        if self.tracer:
            self.tracer.ev("edit_applied", size=len(self.progress), **edit.to_dict())
        _log_state(f"After {edit.kind} {edit.position}", self.reference, self.progress)
        return True

    def _finish(self, status: RealignStatus) -> RealignResult:
        self.result.status = status
        if self.tracer:
            self.tracer.ev(
                "end_run",
                status=status,
                edits=len(self.result.edits),
                progress=list(self.progress),
            )
        return self.result

    def _fail(self, code: str, message: str) -> RealignResult:
        LOGGER.error("%s: %s", message, code)
        _log_state("Unreconcilable state", self.reference, self.progress)
        self.result.error = UnreconcilableState(
            code=code, message=message, progress=tuple(self.progress)
        )
        return self._finish("unreconcilable")


def realign(
    reference: Sequence[int],
    progress: MutableSequence[int],
    *,
    settings: Settings | None = None,
    validate: bool | None = None,
    max_edits: int | None = None,
    tracer: RealignTracer | None = None,
) -> RealignResult:
    """Patch *progress* in place so that it corresponds to *reference*.

    Raises :class:`~slotsync.utils.errors.PreconditionViolationError` for
    malformed inputs (when validation is enabled) and for gap anchors that are
    out of order. Any other failure is returned as an ``unreconcilable``
    result carrying an :class:`UnreconcilableState`.
    """

    if validate is None:
        validate = settings.realign_validate_inputs if settings else True
    if validate:
        validate_sequences(reference, progress)

    budget = max_edits
    if budget is None and settings is not None:
        budget = settings.realign_max_edits
    if budget is None:
        budget = default_edit_budget(reference, progress)

    return _Realigner(reference, progress, budget=budget, tracer=tracer).run()


__all__ = [
    "RealignResult",
    "RealignStatus",
    "UnreconcilableState",
    "default_edit_budget",
    "realign",
]
