# astrowheel/utils/metrics.py
from __future__ import annotations

"""
Prometheus metrics shared by the app factory and the API blueprint.

The layout engine never touches these: it returns a LayoutReport and the HTTP
layer turns its outcome counts into counter increments.
"""

from typing import Final

from prometheus_client import Counter, Gauge, Histogram

from astrowheel.core.layout import OUTCOMES, LayoutReport

MET_REQUESTS: Final = Counter("astrowheel_api_requests_total", "API requests", ["route"])
REQ_LATENCY: Final = Histogram("astrowheel_request_seconds", "API request latency", ["route"])
MET_PAIRS: Final = Counter(
    "astrowheel_layout_pairs_total", "Adjacent glyph pairs by resolution outcome", ["outcome"]
)
MET_VALIDATION: Final = Counter("astrowheel_validation_errors_total", "Rejected payloads", ["route"])
GAUGE_APP_UP: Final = Gauge("astrowheel_app_up", "1 if app is running")

TRACKED_ROUTES = (
    "/", "/health", "/healthz", "/api/health-check",
    "/api/layout", "/api/houses", "/api/wheel", "/api/config",
)


def seed() -> None:
    """Create every labelled series up front so dashboards see zeros, not gaps."""
    for route in TRACKED_ROUTES:
        MET_REQUESTS.labels(route=route).inc(0)
        REQ_LATENCY.labels(route=route)
    for outcome in OUTCOMES:
        MET_PAIRS.labels(outcome=outcome).inc(0)
    GAUGE_APP_UP.set(1.0)


def record_layout(report: LayoutReport) -> None:
    for outcome, n in report.outcome_counts().items():
        MET_PAIRS.labels(outcome=outcome).inc(n)
