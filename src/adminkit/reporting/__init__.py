"""Error reporting pipeline.

Usage:
    from adminkit.reporting import ErrorReporter, set_reporter, install_global_hooks

    reporter = set_reporter(ErrorReporter(config.reporter))
    registration = install_global_hooks(reporter)
"""

from adminkit.reporting.hooks import (
    HookRegistration,
    get_registration,
    install_global_hooks,
)
from adminkit.reporting.loading import (
    GlobalLoadingState,
    LoadingBar,
    LoadingBarStatus,
    LoadingIndicator,
)
from adminkit.reporting.reporter import (
    Capabilities,
    CapabilityResolver,
    ErrorReporter,
    get_reporter,
    reset_reporter,
    set_reporter,
    with_reporting,
)
from adminkit.reporting.telemetry import (
    LogTelemetrySink,
    MockTelemetrySink,
    TelemetrySink,
    WebhookTelemetrySink,
    build_payload,
    create_telemetry_sink,
)

__all__ = [
    # Reporter
    "Capabilities",
    "CapabilityResolver",
    "ErrorReporter",
    "get_reporter",
    "reset_reporter",
    "set_reporter",
    "with_reporting",
    # Hooks
    "HookRegistration",
    "get_registration",
    "install_global_hooks",
    # Loading
    "GlobalLoadingState",
    "LoadingBar",
    "LoadingBarStatus",
    "LoadingIndicator",
    # Telemetry
    "LogTelemetrySink",
    "MockTelemetrySink",
    "TelemetrySink",
    "WebhookTelemetrySink",
    "build_payload",
    "create_telemetry_sink",
]
