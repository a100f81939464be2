"""Isolate configuration for the package-local tests."""

from __future__ import annotations

from pathlib import Path
from typing import Generator

import pytest

from slotsync.config import reset_settings_cache


@pytest.fixture(autouse=True)
def _isolate_settings(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Generator[None, None, None]:
    monkeypatch.setenv("REALIGN_TRACE_DIR", str(tmp_path / "traces"))
    for name in ("REALIGN_TRACE", "REALIGN_MAX_EDITS", "REALIGN_VALIDATE_INPUTS"):
        monkeypatch.delenv(name, raising=False)
    reset_settings_cache()
    yield
    reset_settings_cache()
