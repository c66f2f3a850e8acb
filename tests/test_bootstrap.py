"""Tests for adminkit.bootstrap.configure."""

import json
import logging
from pathlib import Path

import pytest

from adminkit.bootstrap import configure
from adminkit.core.config import ENVIRONMENT_VARIABLE, AdminKitConfig, get_config
from adminkit.notifications import MockNotifier
from adminkit.operations import PaginatedAsyncOperation
from adminkit.reporting import LoadingBar, get_registration, get_reporter, install_global_hooks

CONFIG_YAML = """
log:
  level: WARNING
  format: json
reporter:
  environment: production
  telemetry:
    type: none
default_page_size: 25
"""


def _config(tmp_path: Path) -> AdminKitConfig:
    config = AdminKitConfig.from_yaml_string(CONFIG_YAML)
    return config.model_copy(
        update={"log": config.log.model_copy(update={"file_path": tmp_path / "adminkit.log"})}
    )


class TestConfigure:
    def test_installs_reporter_from_config(self, tmp_path: Path):
        notifier = MockNotifier()
        bar = LoadingBar()
        reporter = configure(_config(tmp_path), notifier=notifier, loading_indicator=bar)

        assert get_reporter() is reporter
        assert reporter.config.is_production
        assert reporter.notifier is notifier
        assert reporter.loading_indicator is bar
        assert reporter.telemetry is None

    def test_applies_logging(self, tmp_path: Path):
        config = _config(tmp_path)
        configure(config)

        assert logging.getLogger().level == logging.WARNING
        get_reporter().report(ValueError("disk full"))
        entries = [
            json.loads(line)
            for line in config.log.file_path.read_text().splitlines()
            if line.strip()
        ]
        assert "error_handled" in [e["event"] for e in entries]

    def test_default_page_size_reaches_paginated_operations(self, tmp_path: Path):
        configure(_config(tmp_path))

        async def source(cursor):
            return {"list": [], "total": 0}

        assert get_config().default_page_size == 25
        assert PaginatedAsyncOperation(source).cursor.page_size == 25
        assert PaginatedAsyncOperation(source, page_size=5).cursor.page_size == 5

    def test_page_size_defaults_without_configure(self):
        async def source(cursor):
            return {"list": [], "total": 0}

        assert PaginatedAsyncOperation(source).cursor.page_size == 10

    def test_defaults_from_environment(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv(ENVIRONMENT_VARIABLE, "production")
        assert configure().config.is_production

    def test_install_hooks(self, tmp_path: Path):
        reporter = configure(_config(tmp_path), install_hooks=True)
        registration = get_registration()
        assert registration is not None
        assert registration.reporter is reporter
        assert registration.installed

    def test_reconfigure_moves_existing_hooks_to_new_reporter(self, tmp_path: Path):
        install_global_hooks()
        reporter = configure(_config(tmp_path), install_hooks=True)
        assert get_registration().reporter is reporter
