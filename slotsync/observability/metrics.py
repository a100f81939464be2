"""Request and realignment metrics collection utilities."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from threading import Lock
from time import perf_counter
from typing import Dict, Iterable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp


@dataclass
class RouteStats:
    """Mutable statistics for a single route."""

    count: int = 0
    total_duration_ms: float = 0.0
    max_duration_ms: float | None = None


class MetricsRegistry:
    """In-memory collector for request and realignment counters."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._requests_total = 0
        self._status_families: Counter[str] = Counter()
        self._routes: Dict[str, RouteStats] = {}
        self._realign_outcomes: Counter[str] = Counter()
        self._edits_by_phase: Counter[str] = Counter()
        self._failure_codes: Counter[str] = Counter()

    def reset(self) -> None:
        """Reset all counters (useful for tests)."""

        with self._lock:
            self._requests_total = 0
            self._status_families = Counter()
            self._routes = {}
            self._realign_outcomes = Counter()
            self._edits_by_phase = Counter()
            self._failure_codes = Counter()

    def request_finished(
        self,
        method: str,
        path: str,
        status_code: int,
        duration_seconds: float,
    ) -> None:
        """Record request completion statistics."""

        duration_ms = max(duration_seconds * 1000.0, 0.0)
        route_key = f"{method.upper()} {path}"
        status_family = f"{status_code // 100}xx"

        with self._lock:
            self._requests_total += 1
            self._status_families[status_family] += 1

            stats = self._routes.setdefault(route_key, RouteStats())
            stats.count += 1
            stats.total_duration_ms += duration_ms
            stats.max_duration_ms = (
                duration_ms
                if stats.max_duration_ms is None
                else max(stats.max_duration_ms, duration_ms)
            )

    def realignment_finished(
        self, status: str, phases: Iterable[str], failure_code: str | None = None
    ) -> None:
        """Record the outcome of a realignment and the phase of each applied edit."""

        with self._lock:
            self._realign_outcomes[status] += 1
            self._edits_by_phase.update(phases)
            if failure_code:
                self._failure_codes[failure_code] += 1

    def snapshot(self) -> Dict[str, object]:
        """Return an immutable view of the current metrics."""

        with self._lock:
            routes: Dict[str, Dict[str, float | int | None]] = {}
            for key, stats in self._routes.items():
                count = stats.count or 1
                routes[key] = {
                    "count": stats.count,
                    "avg_duration_ms": stats.total_duration_ms / count,
                    "max_duration_ms": stats.max_duration_ms,
                }

            return {
                "requests_total": self._requests_total,
                "status_codes": dict(self._status_families),
                "routes": routes,
                "realignments": {
                    "total": sum(self._realign_outcomes.values()),
                    "by_status": dict(self._realign_outcomes),
                    "edits_by_phase": dict(self._edits_by_phase),
                    "failures_by_code": dict(self._failure_codes),
                },
            }


class RequestMetricsMiddleware(BaseHTTPMiddleware):
    """ASGI middleware that records request metrics."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        registry: MetricsRegistry | None = None,
    ) -> None:
        super().__init__(app)
        self._registry = registry or metrics_registry

    async def dispatch(self, request: Request, call_next):
        start = perf_counter()
        try:
            response = await call_next(request)
        except Exception:  # pragma: no cover - re-raise after recording metrics
            self._registry.request_finished(
                request.method, request.url.path, 500, perf_counter() - start
            )
            raise
        self._registry.request_finished(
            request.method,
            request.url.path,
            getattr(response, "status_code", 200),
            perf_counter() - start,
        )
        return response


metrics_registry = MetricsRegistry()

__all__ = [
    "MetricsRegistry",
    "RequestMetricsMiddleware",
    "metrics_registry",
]
