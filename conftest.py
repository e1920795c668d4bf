"""
Repository-level pytest configuration.

Why this exists:
  - Provide safe defaults for local runs (public demo site, no credentials)
  - Keep behavior explicit and discoverable

Every value below can be overridden from the shell or CI, e.g.
`UI_BROWSER=firefox pytest -m e2e`.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator

import pytest


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent


@pytest.fixture(scope="session", autouse=True)
def _demo_safe_env_defaults() -> Generator[None, None, None]:
    """Set environment defaults if not already provided by the user/CI."""
    defaults = {
        "UI_BASE_URL": "https://sweetshop.netlify.app",
        "UI_EMAIL": "test@example.com",
        "UI_PASSWORD": "password123",
    }

    for k, v in defaults.items():
        os.environ.setdefault(k, v)

    yield
