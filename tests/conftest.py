# tests/conftest.py
from __future__ import annotations

"""
Pytest configuration for the gate wheel suite.

- Registers Hypothesis profiles for local dev and CI.
- Provides the canonical wheel document and a Flask test client.
"""

import os
import pytest
from hypothesis import settings, HealthCheck

from gatewheel.core.constants import CANONICAL_SEQUENCE


# ──────────────────────────────────────────────────────────────────────────────
# Hypothesis profiles
# ──────────────────────────────────────────────────────────────────────────────
settings.register_profile(
    "dev",
    settings(
        deadline=None,           # avoid flaky timeouts on slower runners
        max_examples=60,         # fast local runs
        suppress_health_check=[HealthCheck.too_slow],
    ),
)
settings.register_profile(
    "ci",
    settings(
        deadline=None,
        max_examples=200,        # a bit more coverage in CI
        suppress_health_check=[HealthCheck.too_slow],
    ),
)

_profile = (
    "ci"
    if (os.getenv("CI") or os.getenv("GITHUB_ACTIONS"))
    else os.getenv("HYPOTHESIS_PROFILE", "dev")
)
settings.load_profile(_profile)


def pytest_report_header(config: pytest.Config) -> str:
    return f"Hypothesis profile: '{_profile}'"


# ──────────────────────────────────────────────────────────────────────────────
# Shared documents
# ──────────────────────────────────────────────────────────────────────────────

def make_document(**overrides):
    doc = {
        "sequence": list(CANONICAL_SEQUENCE),
        "cardinalProgression": "NWSE",
        "northPosition": "11|10",
    }
    doc.update(overrides)
    return {k: v for k, v in doc.items() if v is not None}


@pytest.fixture
def canonical_doc():
    """Canonical NWSE document with all four anchors."""
    return make_document(eastPosition="36|25", southPosition="12|15", westPosition="6|46")


@pytest.fixture
def client(monkeypatch):
    for var in ("WHEEL_CONFIG", "WHEEL_SEQUENCE_FILE", "WHEEL_PROGRESSION", "WHEEL_NORTH"):
        monkeypatch.delenv(var, raising=False)
    from gatewheel.main import create_app
    app = create_app()
    app.testing = True
    return app.test_client()
