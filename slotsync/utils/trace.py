from __future__ import annotations

import json
import os
import time
import uuid
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .logging import configure_logging


LOGGER = configure_logging().getChild("realign.trace")


@dataclass(slots=True)
class TraceEvent:
    t: float
    type: str
    data: Dict[str, Any]


class RealignTracer:
    """Collect structured events for a single realignment run."""

    def __init__(
        self, run_id: Optional[str] = None, out_dir: str = "slotsync/logs/realign"
    ) -> None:
        self.run_id = run_id or str(uuid.uuid4())
        self.out_dir = out_dir
        self.events: List[TraceEvent] = []
        self._path = os.path.join(self.out_dir, f"{self.run_id}.jsonl")
        self._summary_path = os.path.join(self.out_dir, f"{self.run_id}.summary.json")

    def ev(self, event_type: str, **data: Any) -> None:
        self.events.append(TraceEvent(t=time.time(), type=event_type, data=data))

    def flush_jsonl(self) -> str:
        os.makedirs(self.out_dir, exist_ok=True)
        with open(self._path, "w", encoding="utf-8") as handle:
            for event in self.events:
                payload = {"t": event.t, "type": event.type, **event.data}
                handle.write(json.dumps(payload, ensure_ascii=False) + "\n")
        with open(self._summary_path, "w", encoding="utf-8") as handle:
            json.dump(self.summary(), handle, ensure_ascii=False, indent=2)
        LOGGER.info("[realign] Trace saved: %s", self._path)
        return self._path

    @property
    def path(self) -> str:
        return self._path

    @property
    def summary_path(self) -> str:
        return self._summary_path

    def as_list(self) -> List[Dict[str, Any]]:
        return [{"t": event.t, "type": event.type, **event.data} for event in self.events]

    def summary(self) -> Dict[str, Any]:
        """Return the run inputs, edit counts per phase and the final outcome."""

        start: Dict[str, Any] = {}
        end: Dict[str, Any] = {}
        phases: Counter[str] = Counter()
        rejected = 0
        for event in self.as_list():
            event_type = event.get("type")
            if event_type == "start_run":
                start = {key: value for key, value in event.items() if key not in {"t", "type"}}
            elif event_type == "edit_applied":
                phases[str(event.get("phase"))] += 1
            elif event_type == "edit_rejected":
                rejected += 1
            elif event_type in {"end_run", "rejected"}:
                end = {key: value for key, value in event.items() if key not in {"t", "type"}}

        return {
            "run_id": self.run_id,
            "inputs": start,
            "edits_by_phase": dict(phases),
            "edits_rejected": rejected,
            "outcome": end,
        }


__all__ = ["RealignTracer", "TraceEvent"]
