"""Realignment services."""

from .gap_runs import GapRun, find_gap_runs, resolve_gap_runs
from .placeholder_surplus import find_surplus_placeholder
from .realign import RealignResult, UnreconcilableState, realign
from .slots import SlotEdit, delete_slot, insert_placeholder, is_consistent
from .stale_markers import find_stale_markers, remove_stale_markers

__all__ = [
    "GapRun",
    "RealignResult",
    "SlotEdit",
    "UnreconcilableState",
    "delete_slot",
    "find_gap_runs",
    "find_stale_markers",
    "find_surplus_placeholder",
    "insert_placeholder",
    "is_consistent",
    "realign",
    "remove_stale_markers",
    "resolve_gap_runs",
]
