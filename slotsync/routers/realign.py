"""Realignment endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from ..config import Settings, get_settings
from ..observability import metrics_registry
from ..services.gap_runs import GapRun, find_gap_runs
from ..services.realign import RealignResult, realign
from ..services.slots import SlotEdit, is_consistent, validate_sequences
from ..services.stale_markers import find_stale_markers
from ..utils.errors import PreconditionViolationError
from ..utils.trace import RealignTracer

router = APIRouter(prefix="/api", tags=["realign"])


class SequencesPayload(BaseModel):
    """Reference and progress sequences submitted for inspection or realignment."""

    reference: list[int] = Field(default_factory=list)
    progress: list[int] = Field(default_factory=list)


class RealignRequest(SequencesPayload):
    trace: bool = False


class SlotEditPayload(BaseModel):
    """A single applied edit using the 1-based recorder convention."""

    kind: str
    position: int = Field(ge=0)
    signed: int
    phase: str
    value: int

    @classmethod
    def from_edit(cls, edit: SlotEdit) -> "SlotEditPayload":
        return cls(**edit.to_dict())


class GapRunPayload(BaseModel):
    start: int = Field(ge=1)
    end: int = Field(ge=1)
    kind: str

    @classmethod
    def from_run(cls, run: GapRun) -> "GapRunPayload":
        return cls(**run.to_dict())


class RealignResponse(BaseModel):
    """API response describing a successful realignment."""

    status: str
    progress: list[int]
    edits: list[SlotEditPayload]
    stale_markers: list[int]
    gap_runs: list[GapRunPayload]
    trace_path: str | None = None

    @classmethod
    def from_result(
        cls, result: RealignResult, trace_path: str | None = None
    ) -> "RealignResponse":
        return cls(
            status=result.status,
            progress=list(result.progress),
            edits=[SlotEditPayload.from_edit(edit) for edit in result.edits],
            stale_markers=list(result.stale_markers),
            gap_runs=[GapRunPayload.from_run(run) for run in result.gap_runs],
            trace_path=trace_path,
        )


class CheckResponse(BaseModel):
    consistent: bool
    stale_markers: list[int]
    gap_runs: list[GapRunPayload]


def _precondition_failed(
    exc: PreconditionViolationError, trace_path: str | None = None
) -> HTTPException:
    detail = {"code": exc.code, "message": str(exc), "extra": exc.extra}
    if trace_path is not None:
        detail["trace_path"] = trace_path
    return HTTPException(status_code=422, detail=detail)


@router.post("/realign", response_model=RealignResponse, summary="Realign progress")
def post_realign(
    payload: RealignRequest,
    settings: Settings = Depends(get_settings),
) -> RealignResponse:
    """Return the progress sequence patched to correspond to the reference."""

    tracer: RealignTracer | None = None
    if payload.trace or settings.realign_trace:
        tracer = RealignTracer(out_dir=str(settings.realign_trace_dir))

    progress = list(payload.progress)
    try:
        result = realign(payload.reference, progress, settings=settings, tracer=tracer)
    except PreconditionViolationError as exc:
        metrics_registry.realignment_finished("rejected", (), failure_code=exc.code)
        rejected_trace: str | None = None
        if tracer:
            tracer.ev("rejected", code=exc.code, message=str(exc), extra=exc.extra)
            rejected_trace = tracer.flush_jsonl()
        raise _precondition_failed(exc, trace_path=rejected_trace) from exc

    trace_path = tracer.flush_jsonl() if tracer else None
    metrics_registry.realignment_finished(
        result.status,
        (edit.phase for edit in result.edits),
        failure_code=result.error.code if result.error else None,
    )

    if result.error is not None:
        detail = result.error.to_dict()
        detail["reference"] = list(result.reference)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)

    return RealignResponse.from_result(result, trace_path=trace_path)


@router.post("/realign/check", response_model=CheckResponse, summary="Inspect alignment")
def post_realign_check(
    payload: SequencesPayload,
    settings: Settings = Depends(get_settings),
) -> CheckResponse:
    """Report consistency, stale markers and gap runs without editing anything."""

    if settings.realign_validate_inputs:
        try:
            validate_sequences(payload.reference, payload.progress)
        except PreconditionViolationError as exc:
            raise _precondition_failed(exc) from exc

    return CheckResponse(
        consistent=is_consistent(payload.reference, payload.progress),
        stale_markers=find_stale_markers(payload.reference, payload.progress),
        gap_runs=[
            GapRunPayload.from_run(run)
            for run in find_gap_runs(payload.reference, payload.progress)
        ],
    )


__all__ = ["router"]
