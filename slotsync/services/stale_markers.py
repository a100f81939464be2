"""Removal of progress markers whose identifiers left the reference."""

from __future__ import annotations

import logging
from typing import List, MutableSequence, Sequence

from .slots import PLACEHOLDER, SlotEdit, delete_slot, index_of

LOGGER = logging.getLogger(__name__)


def find_stale_markers(reference: Sequence[int], progress: Sequence[int]) -> List[int]:
    """Return non-zero progress values absent from *reference*, in progress order."""

    known = set(reference)
    return [value for value in progress if value != PLACEHOLDER and value not in known]


def remove_stale_markers(
    reference: Sequence[int], progress: MutableSequence[int]
) -> List[SlotEdit]:
    """Delete the slot of every stale marker and return the deletions applied.

    The slot disappears entirely rather than being reset to a placeholder: the
    step it recorded no longer exists, so keeping the slot would shift every
    later marker off its reference position.
    """

    edits: List[SlotEdit] = []
    stale = find_stale_markers(reference, progress)
    while stale:
        value = stale[0]
        idx = index_of(value, progress)
        if idx is None:  # pragma: no cover - find_stale_markers only yields present values
            break
        edit = SlotEdit.delete_at(idx, phase="stale", value=value)
        delete_slot(edit.position, progress)
        LOGGER.debug("Removed stale marker %s from slot %s", value, edit.position)
        edits.append(edit)
        stale = find_stale_markers(reference, progress)
    return edits


__all__ = ["find_stale_markers", "remove_stale_markers"]
