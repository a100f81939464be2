"""Test configuration for SlotSync."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Generator

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from slotsync.config import reset_settings_cache  # noqa: E402
from slotsync.observability import metrics_registry  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Generator[None, None, None]:
    """Provide isolated configuration for each test."""

    monkeypatch.setenv("REALIGN_TRACE_DIR", str(tmp_path / "traces"))
    monkeypatch.delenv("REALIGN_TRACE", raising=False)
    monkeypatch.delenv("REALIGN_MAX_EDITS", raising=False)
    monkeypatch.delenv("REALIGN_VALIDATE_INPUTS", raising=False)
    reset_settings_cache()
    metrics_registry.reset()
    yield
    reset_settings_cache()
    metrics_registry.reset()


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    """Return a test client for the FastAPI application."""

    from slotsync.main import app

    with TestClient(app) as test_client:
        yield test_client
