"""Process-start wiring.

``configure`` applies an ``AdminKitConfig`` in one call: logging, the
process-wide reporter, the default page size and, optionally, the global
error hooks.

Example usage:
    from adminkit.bootstrap import configure
    from adminkit.core.config import AdminKitConfig
    from adminkit.notifications import RichConsoleNotifier

    reporter = configure(
        AdminKitConfig.from_yaml(Path("adminkit.yaml")),
        notifier=RichConsoleNotifier(),
        install_hooks=True,
    )
"""

from __future__ import annotations

from adminkit.core.config import AdminKitConfig, set_config
from adminkit.core.logging import configure_logging_from, get_logger
from adminkit.notifications.base import Notifier
from adminkit.reporting.hooks import install_global_hooks
from adminkit.reporting.loading import GlobalLoadingState, LoadingIndicator
from adminkit.reporting.reporter import ErrorReporter, set_reporter

_logger = get_logger("bootstrap")


def configure(
    config: AdminKitConfig | None = None,
    *,
    notifier: Notifier | None = None,
    loading_indicator: LoadingIndicator | None = None,
    loading_state: GlobalLoadingState | None = None,
    install_hooks: bool = False,
) -> ErrorReporter:
    """Apply ``config`` to the process and return the new reporter.

    Args:
        config: Configuration to apply; defaults to ``AdminKitConfig.from_env()``.
        notifier: Presentation capability. Without one the reporter logs only
            until ``bind`` is called.
        loading_indicator: Progress indicator to bind.
        loading_state: Global loading flag to bind.
        install_hooks: Route uncaught errors to the reporter.
    """
    config = config or AdminKitConfig.from_env()
    configure_logging_from(config.log)
    set_config(config)

    reporter = set_reporter(
        ErrorReporter(
            config.reporter,
            notifier=notifier,
            loading_indicator=loading_indicator,
            loading_state=loading_state,
        )
    )
    if install_hooks:
        # Hooks installed earlier keep their registration but follow the new reporter.
        install_global_hooks(reporter).reporter = reporter

    _logger.info(
        "adminkit_configured",
        environment=config.reporter.environment,
        telemetry=config.reporter.telemetry.type,
        default_page_size=config.default_page_size,
    )
    return reporter


__all__ = ["configure"]
