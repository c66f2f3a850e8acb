"""Telemetry sinks for reported errors.

Sinks receive every reported error in production deployments. Reporting is
fire-and-forget: a sink never raises into the reporter and never delays
the caller beyond scheduling its work.

Provided sinks:
- LogTelemetrySink: structured ``error_reported`` log entry
- WebhookTelemetrySink: JSON POST with httpx
- MockTelemetrySink: records reports for tests
"""

from __future__ import annotations

import asyncio
import os
import re
from typing import Any, Protocol, runtime_checkable

import httpx

from adminkit.core.config import TelemetryConfig
from adminkit.core.constants import TELEMETRY_TIMEOUT_SECONDS, TRUNCATE_STACK_CHARS
from adminkit.core.errors.models import NormalizedError, Severity
from adminkit.core.logging import get_logger
from adminkit.utils.task_utils import spawn_background

_logger = get_logger("reporting.telemetry")

# ${VAR} expansion in header values
_ENV_VAR_PATTERN = re.compile(r"\$\{(\w+)\}")


@runtime_checkable
class TelemetrySink(Protocol):
    """Protocol for external error-monitoring sinks."""

    def report(self, error: NormalizedError, level: Severity) -> None:
        """Forward ``error``. Must not raise."""
        ...


def build_payload(error: NormalizedError, level: Severity) -> dict[str, Any]:
    """Build the JSON-compatible payload describing one reported error."""
    data = error.to_dict()
    if error.stack is not None and len(error.stack) > TRUNCATE_STACK_CHARS:
        data["stack"] = error.stack[-TRUNCATE_STACK_CHARS:]
    if "details" in data:
        details = data["details"]
        if not isinstance(details, (dict, list, str, int, float, bool)):
            data["details"] = repr(details)
    return {"severity": level.label, "error": data}


class LogTelemetrySink:
    """Sink that records reports as structured log entries."""

    def report(self, error: NormalizedError, level: Severity) -> None:
        _logger.info("error_reported", **build_payload(error, level))


class WebhookTelemetrySink:
    """Sink that POSTs each report to an HTTP endpoint.

    Example usage:
        sink = WebhookTelemetrySink(
            url_env="ADMINKIT_TELEMETRY_URL",
            headers={"Authorization": "Bearer ${TELEMETRY_TOKEN}"},
        )
    """

    def __init__(
        self,
        url: str | None = None,
        url_env: str | None = None,
        headers: dict[str, str] | None = None,
        timeout: float = TELEMETRY_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
        sync_transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the webhook sink.

        Args:
            url: Direct endpoint URL.
            url_env: Environment variable containing the endpoint URL.
            headers: HTTP headers; ``${VAR}`` references are expanded.
            timeout: HTTP timeout in seconds.
            transport: Optional async transport (tests use httpx.MockTransport).
            sync_transport: Optional sync transport for loop-less sends.
        """
        self._url = url
        if not self._url and url_env:
            self._url = os.environ.get(url_env, "")
        self._headers = self._expand_env_headers(headers or {})
        self._timeout = timeout
        self._transport = transport
        self._sync_transport = sync_transport
        self._warned_no_url = False
        self._pending: set[asyncio.Task[Any]] = set()

    @staticmethod
    def _expand_env_headers(headers: dict[str, str]) -> dict[str, str]:
        expanded: dict[str, str] = {}
        for key, value in headers.items():
            if "${" in value:
                for var_name in _ENV_VAR_PATTERN.findall(value):
                    env_value = os.environ.get(var_name)
                    if env_value is None:
                        _logger.warning(
                            "telemetry_env_var_missing",
                            header=key,
                            var_name=var_name,
                        )
                        env_value = ""
                    value = value.replace(f"${{{var_name}}}", env_value)
            expanded[key] = value
        return expanded

    @classmethod
    def from_config(cls, config: TelemetryConfig) -> WebhookTelemetrySink:
        return cls(
            url=config.url,
            url_env=config.url_env,
            headers=config.headers,
            timeout=config.timeout_seconds,
        )

    @property
    def pending(self) -> int:
        """Number of posts still in flight."""
        return len(self._pending)

    def report(self, error: NormalizedError, level: Severity) -> None:
        if not self._url:
            if not self._warned_no_url:
                _logger.warning("telemetry_url_not_configured")
                self._warned_no_url = True
            return

        payload = build_payload(error, level)
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            self._post_sync(self._url, payload)
            return

        task = spawn_background(
            self._post_async(self._url, payload),
            _logger,
            "telemetry_post_failed",
            name="adminkit-telemetry",
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _post_async(self, url: str, payload: dict[str, Any]) -> None:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self._timeout),
            headers=self._headers,
            transport=self._transport,
        ) as client:
            response = await client.post(url, json=payload)
        if not response.is_success:
            _logger.warning("telemetry_rejected", status_code=response.status_code)

    def _post_sync(self, url: str, payload: dict[str, Any]) -> None:
        try:
            with httpx.Client(
                timeout=httpx.Timeout(self._timeout),
                headers=self._headers,
                transport=self._sync_transport,
            ) as client:
                response = client.post(url, json=payload)
            if not response.is_success:
                _logger.warning("telemetry_rejected", status_code=response.status_code)
        except httpx.HTTPError as e:
            _logger.warning("telemetry_post_failed", error=str(e))

    async def drain(self) -> None:
        """Wait for in-flight posts; used at shutdown and in tests."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)


class MockTelemetrySink:
    """Records reports without sending them anywhere."""

    def __init__(self) -> None:
        self.reports: list[tuple[NormalizedError, Severity]] = []
        self._fail_next = False

    def set_fail_next(self, should_fail: bool = True) -> None:
        self._fail_next = should_fail

    def report(self, error: NormalizedError, level: Severity) -> None:
        if self._fail_next:
            self._fail_next = False
            raise RuntimeError("telemetry failure")
        self.reports.append((error, level))


def create_telemetry_sink(config: TelemetryConfig) -> TelemetrySink | None:
    """Build the sink described by ``config``; None when disabled."""
    if config.type == "none":
        return None
    if config.type == "webhook":
        return WebhookTelemetrySink.from_config(config)
    return LogTelemetrySink()
