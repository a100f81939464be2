"""Slot-level primitives shared by every realignment phase.

Positions crossing this module's public edit functions are 1-based and follow
the recorder contract: ``insert_placeholder(n)`` inserts *after* slot ``n``
(``0`` prepends, ``len(progress)`` appends) and ``delete_slot(n)`` removes slot
``n``. Everything else in :mod:`slotsync.services` works on 0-based indices and
converts through :class:`SlotEdit`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, MutableSequence, Sequence

from ..utils.errors import PreconditionViolationError

PLACEHOLDER = 0

EditKind = Literal["insert", "delete"]
EditPhase = Literal["stale", "gap", "surplus"]


@dataclass(frozen=True, slots=True)
class SlotEdit:
    """A single corrective edit on the progress sequence."""

    kind: EditKind
    position: int
    phase: EditPhase = "gap"
    value: int = PLACEHOLDER

    @property
    def signed(self) -> int:
        """Return the signed encoding: ``n >= 0`` inserts after ``n``, ``-n`` deletes ``n``."""

        if self.kind == "insert":
            return self.position
        return -self.position

    @classmethod
    def from_signed(cls, signed: int, *, phase: EditPhase = "gap") -> "SlotEdit":
        if signed >= 0:
            return cls(kind="insert", position=signed, phase=phase)
        return cls(kind="delete", position=-signed, phase=phase)

    @classmethod
    def insert_at(cls, index: int, *, phase: EditPhase = "gap") -> "SlotEdit":
        """Edit inserting a placeholder so that it lands at 0-based ``index``."""

        return cls(kind="insert", position=index, phase=phase)

    @classmethod
    def delete_at(
        cls, index: int, *, phase: EditPhase = "gap", value: int = PLACEHOLDER
    ) -> "SlotEdit":
        """Edit deleting the slot at 0-based ``index``."""

        return cls(kind="delete", position=index + 1, phase=phase, value=value)

    def to_dict(self) -> dict[str, object]:
        return {
            "kind": self.kind,
            "position": self.position,
            "signed": self.signed,
            "phase": self.phase,
            "value": self.value,
        }


def insert_placeholder(position: int, progress: MutableSequence[int]) -> None:
    """Insert a placeholder after 1-based ``position`` (``0`` prepends)."""

    if position < 0 or position > len(progress):
        raise PreconditionViolationError(
            "edit_out_of_range",
            f"Cannot insert after position {position} in a sequence of {len(progress)}",
            {"position": position, "size": len(progress)},
        )
    progress.insert(position, PLACEHOLDER)


def delete_slot(position: int, progress: MutableSequence[int]) -> int:
    """Delete the 1-based slot ``position`` and return the value it held."""

    if position < 1 or position > len(progress):
        raise PreconditionViolationError(
            "edit_out_of_range",
            f"Cannot delete position {position} in a sequence of {len(progress)}",
            {"position": position, "size": len(progress)},
        )
    value = progress[position - 1]
    del progress[position - 1]
    return value


def apply_edit(edit: SlotEdit, progress: MutableSequence[int]) -> None:
    if edit.kind == "insert":
        insert_placeholder(edit.position, progress)
    else:
        delete_slot(edit.position, progress)


def is_consistent(reference: Sequence[int], progress: Sequence[int]) -> bool:
    """Return True when every progress slot is a placeholder or its reference value."""

    if len(reference) != len(progress):
        return False
    return all(
        slot == PLACEHOLDER or slot == expected
        for expected, slot in zip(reference, progress)
    )


def index_of(value: int, sequence: Sequence[int], *, last: bool = False) -> int | None:
    """Return the 0-based index of ``value`` in ``sequence`` or ``None``."""

    if last:
        for idx in range(len(sequence) - 1, -1, -1):
            if sequence[idx] == value:
                return idx
        return None
    for idx, candidate in enumerate(sequence):
        if candidate == value:
            return idx
    return None


def validate_sequences(reference: Sequence[int], progress: Sequence[int]) -> None:
    """Raise :class:`PreconditionViolationError` for malformed inputs."""

    previous: int | None = None
    for idx, value in enumerate(reference):
        if value <= 0:
            raise PreconditionViolationError(
                "reference_not_positive",
                f"Reference value {value} at index {idx} is not a positive identifier",
                {"index": idx, "value": value},
            )
        if previous is not None and value <= previous:
            raise PreconditionViolationError(
                "reference_not_ascending",
                f"Reference value {value} at index {idx} does not follow {previous}",
                {"index": idx, "value": value, "previous": previous},
            )
        previous = value

    previous = None
    for idx, value in enumerate(progress):
        if value < 0:
            raise PreconditionViolationError(
                "progress_negative",
                f"Progress slot {idx} holds negative value {value}",
                {"index": idx, "value": value},
            )
        if value == PLACEHOLDER:
            continue
        if previous is not None and value <= previous:
            raise PreconditionViolationError(
                "progress_not_ascending",
                f"Progress marker {value} at index {idx} does not follow marker {previous}",
                {"index": idx, "value": value, "previous": previous},
            )
        previous = value


__all__ = [
    "PLACEHOLDER",
    "EditKind",
    "EditPhase",
    "SlotEdit",
    "apply_edit",
    "delete_slot",
    "index_of",
    "insert_placeholder",
    "is_consistent",
    "validate_sequences",
]
