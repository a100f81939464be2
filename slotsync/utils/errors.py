from __future__ import annotations

from typing import Any, Dict


class PreconditionViolationError(Exception):
    """Raised when reference/progress sequences are not well formed."""

    def __init__(self, code: str, message: str, extra: Dict[str, Any] | None = None):
        super().__init__(message)
        self.code = code
        self.extra = extra or {}


class UnreconcilableStateError(Exception):
    """Raised on request when a realignment could not make progress consistent."""

    def __init__(
        self,
        code: str,
        message: str,
        progress: list[int] | None = None,
        extra: Dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.progress = list(progress or [])
        self.extra = extra or {}
