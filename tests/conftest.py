"""Pytest fixtures for adminkit tests."""

import logging
from typing import Generator

import pytest
import structlog

from adminkit.core.config import ReporterConfig, reset_config
from adminkit.notifications import MockNotifier
from adminkit.reporting import (
    ErrorReporter,
    GlobalLoadingState,
    LoadingBar,
    MockTelemetrySink,
    get_registration,
    reset_reporter,
    set_reporter,
)


@pytest.fixture(autouse=True)
def reset_global_state() -> Generator[None, None, None]:
    """Reset logging, the process-wide reporter and installed hooks.

    This ensures test isolation for module-level state.
    """
    structlog.reset_defaults()
    reset_reporter()
    reset_config()

    root_logger = logging.getLogger()
    original_handlers = root_logger.handlers[:]
    for handler in original_handlers:
        root_logger.removeHandler(handler)

    yield

    registration = get_registration()
    if registration is not None:
        registration.uninstall()
    reset_reporter()
    reset_config()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in original_handlers:
        root_logger.addHandler(handler)


@pytest.fixture
def notifier() -> MockNotifier:
    return MockNotifier()


@pytest.fixture
def telemetry() -> MockTelemetrySink:
    return MockTelemetrySink()


@pytest.fixture
def loading_state() -> GlobalLoadingState:
    return GlobalLoadingState()


@pytest.fixture
def loading_bar() -> LoadingBar:
    return LoadingBar()


@pytest.fixture
def reporter(
    notifier: MockNotifier,
    telemetry: MockTelemetrySink,
    loading_state: GlobalLoadingState,
    loading_bar: LoadingBar,
) -> ErrorReporter:
    """Fully bound reporter installed as the process-wide instance."""
    return set_reporter(
        ErrorReporter(
            ReporterConfig(environment="test"),
            notifier=notifier,
            loading_indicator=loading_bar,
            loading_state=loading_state,
            telemetry=telemetry,
        )
    )


@pytest.fixture
def production_reporter(
    notifier: MockNotifier,
    telemetry: MockTelemetrySink,
) -> ErrorReporter:
    """Bound reporter in production mode, so telemetry is forwarded."""
    return set_reporter(
        ErrorReporter(
            ReporterConfig(environment="production"),
            notifier=notifier,
            telemetry=telemetry,
        )
    )
