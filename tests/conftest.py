"""Pytest configuration and shared fixtures for all tests."""

import pytest


@pytest.fixture(autouse=True)
def disable_sentry_for_tests(monkeypatch):
    """Disable Sentry telemetry for all tests.

    This fixture runs automatically for every test so no Sentry events are
    sent during test runs. Tests that exercise telemetry (test_cli.py and
    test_sentry_filtering.py) set TELEMETRY themselves.
    """
    monkeypatch.setenv("TELEMETRY", "false")
