# tests/conftest.py
from __future__ import annotations

"""
Pytest configuration for the chart wheel suite.

- Registers Hypothesis profiles for local dev and CI.
- Freezes the process TZ to UTC.
- Flask app + test client fixtures.
"""

import os
import pytest
from hypothesis import settings, HealthCheck


# ──────────────────────────────────────────────────────────────────────────────
# Hypothesis profiles
# ──────────────────────────────────────────────────────────────────────────────
settings.register_profile(
    "dev",
    settings(
        deadline=None,           # avoid flaky timeouts on slower runners
        max_examples=150,        # the engine is cheap; explore more
        suppress_health_check=[HealthCheck.too_slow],
    ),
)
settings.register_profile(
    "ci",
    settings(
        deadline=None,
        max_examples=400,
        suppress_health_check=[HealthCheck.too_slow],
    ),
)

_profile = (
    "ci"
    if (os.getenv("CI") or os.getenv("GITHUB_ACTIONS"))
    else os.getenv("HYPOTHESIS_PROFILE", "dev")
)
settings.load_profile(_profile)


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "slow: mark test as slow")


def pytest_report_header(config: pytest.Config) -> str:
    return f"Hypothesis profile: '{_profile}'"


# ──────────────────────────────────────────────────────────────────────────────
# Global fixtures
# ──────────────────────────────────────────────────────────────────────────────

@pytest.fixture(scope="session", autouse=True)
def freeze_tz_env():
    prev = os.environ.get("TZ")
    os.environ["TZ"] = "UTC"
    try:
        yield
    finally:
        if prev is None:
            os.environ.pop("TZ", None)
        else:
            os.environ["TZ"] = prev


@pytest.fixture
def app(tmp_path, monkeypatch):
    cfg = tmp_path / "wheel.yaml"
    cfg.write_text(
        "layout:\n  gap: 3.5\n  min_distance: 4.0\nservice:\n  allow_request_settings: true\n",
        encoding="utf-8",
    )
    monkeypatch.delenv("ASTRO_WHEEL_ALLOW_SETTINGS", raising=False)
    from astrowheel.main import create_app
    application = create_app(str(cfg))
    application.testing = True
    return application


@pytest.fixture
def client(app):
    return app.test_client()
