"""Deletion of placeholders left over once every gap run is sized correctly."""

from __future__ import annotations

from typing import Sequence

from .slots import PLACEHOLDER, SlotEdit, index_of


def find_surplus_placeholder(
    reference: Sequence[int], progress: Sequence[int]
) -> SlotEdit | None:
    """Return a deletion of one surplus placeholder, or ``None`` if none can be found.

    Anchors (markers) are paired with their reference index in progress order.
    An anchor already at its reference index pushes the cursor past it; an
    anchor sitting later than its reference index has a surplus placeholder
    right before it. Once every anchor is aligned the surplus is past the last
    anchor, so the slot at the cursor goes.
    """

    if len(progress) <= len(reference):
        return None

    cursor = 0
    for prog_idx in range(len(progress)):
        value = progress[prog_idx]
        if value == PLACEHOLDER:
            continue
        ref_idx = index_of(value, reference)
        if ref_idx is None:
            return None
        if ref_idx == prog_idx:
            cursor = prog_idx + 1
            continue
        if prog_idx > ref_idx and progress[prog_idx - 1] == PLACEHOLDER:
            return SlotEdit.delete_at(prog_idx - 1, phase="surplus")
        return None

    if cursor < len(progress) and progress[cursor] == PLACEHOLDER:
        return SlotEdit.delete_at(cursor, phase="surplus")
    return None


__all__ = ["find_surplus_placeholder"]
