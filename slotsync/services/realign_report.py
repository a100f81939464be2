"""Text helpers for feeding sequences in and printing them side by side."""

from __future__ import annotations

from typing import List, Sequence

from ..utils.errors import PreconditionViolationError


def parse_sequence(text: str | None) -> List[int]:
    """Return the integers in a comma-delimited string (``"1,8,9"`` -> ``[1, 8, 9]``)."""

    if not text or not text.strip():
        return []
    values: List[int] = []
    for position, chunk in enumerate(text.split(","), start=1):
        chunk = chunk.strip()
        try:
            values.append(int(chunk))
        except ValueError as exc:
            raise PreconditionViolationError(
                "sequence_unparseable",
                f"Item {position} ({chunk!r}) is not an integer",
                {"text": text, "position": position},
            ) from exc
    return values


def format_sequence(values: Sequence[int]) -> str:
    return ",".join(str(value) for value in values)


def format_alignment_table(reference: Sequence[int], progress: Sequence[int]) -> str:
    """Render reference and progress as two aligned columns, one slot per row."""

    rows = max(len(reference), len(progress))
    ref_width = max([len("Reference")] + [len(str(value)) for value in reference])
    lines = [f"   {'Reference'.ljust(ref_width)}   Progress"]
    for idx in range(rows):
        ref_cell = str(reference[idx]) if idx < len(reference) else ""
        prog_cell = str(progress[idx]) if idx < len(progress) else ""
        lines.append(f"   {ref_cell.rjust(ref_width)}   {prog_cell}".rstrip())
    return "\n".join(lines)


__all__ = ["format_alignment_table", "format_sequence", "parse_sequence"]
