"""
================================================================================
Root Pytest Configuration
================================================================================

Registers project-wide markers and tags collected tests by directory.

================================================================================
"""

import os

import pytest


def pytest_configure(config):
    """Configure pytest with project-wide custom markers."""

    # Priority markers
    config.addinivalue_line(
        "markers", "P0: Critical priority tests - must pass for deployment"
    )
    config.addinivalue_line(
        "markers", "P1: High priority tests - important functionality"
    )
    config.addinivalue_line(
        "markers", "P2: Medium priority tests - edge cases and minor features"
    )
    config.addinivalue_line(
        "markers", "P3: Low priority tests - extensive validation"
    )

    # Test type markers
    config.addinivalue_line(
        "markers", "smoke: Quick verification tests"
    )
    config.addinivalue_line(
        "markers", "regression: Full regression test suite"
    )
    config.addinivalue_line(
        "markers", "unit: Framework tests with stubbed pages, no browser"
    )
    config.addinivalue_line(
        "markers", "e2e: Browser tests against the live Sweet Shop site"
    )
    config.addinivalue_line(
        "markers", "ui: UI-specific tests"
    )

    # Feature markers
    config.addinivalue_line(
        "markers", "auth: Tests related to the login form"
    )
    config.addinivalue_line(
        "markers", "product: Tests related to product pages and quantities"
    )
    config.addinivalue_line(
        "markers", "navigation: Tests related to site navigation"
    )
    config.addinivalue_line(
        "markers", "basket: Tests related to the basket"
    )
    config.addinivalue_line(
        "markers", "checkout: Tests related to checkout forms"
    )
    config.addinivalue_line(
        "markers", "resilience: Tests of the resilient action runner"
    )


@pytest.hookimpl(tryfirst=True)
def pytest_collection_modifyitems(config, items):
    """Auto-tag tests by the directory they live in (before -m deselection)."""
    for item in items:
        path = str(item.fspath)

        if "ui_testing" in path:
            item.add_marker(pytest.mark.ui)
            item.add_marker(pytest.mark.e2e)

        if f"{os.sep}unit{os.sep}" in path:
            item.add_marker(pytest.mark.unit)


def pytest_report_header(config):
    """Add custom header to pytest output."""
    return [
        "",
        "=" * 60,
        "Sweet Shop UI Automation Suite",
        "=" * 60,
        "",
    ]
