"""Tests for ErrorClassifier and Severity."""

import pytest

from adminkit.core.constants import (
    DATA_FORMAT_MESSAGE,
    GENERIC_FAILURE_MESSAGE,
    NETWORK_FAILURE_MESSAGE,
    TIMEOUT_MESSAGE,
    USER_MESSAGES,
)
from adminkit.core.errors import ErrorClassifier, NormalizedError, Severity


def _err(message: str = "", code: str | int | None = None) -> NormalizedError:
    return NormalizedError(message=message, timestamp=0, code=code)


@pytest.fixture
def classifier() -> ErrorClassifier:
    return ErrorClassifier()


class TestCodeLookup:
    """Tests for the static code table."""

    @pytest.mark.parametrize(
        "code, expected",
        [
            (400, "invalid request parameters"),
            (401, "unauthorized, please sign in again"),
            (403, "access denied"),
            (404, "resource not found"),
            (500, "internal server error"),
            (502, "gateway error"),
            (503, "service unavailable"),
            (504, "request timed out"),
        ],
    )
    def test_http_codes(self, classifier: ErrorClassifier, code: int, expected: str) -> None:
        assert classifier.user_message(_err("whatever", code)) == expected

    @pytest.mark.parametrize("code", sorted(USER_MESSAGES))
    def test_table_wins_over_message_keywords(
        self, classifier: ErrorClassifier, code: str
    ) -> None:
        """A tabled code resolves to its entry even if the text mentions a keyword."""
        err = _err("network timeout while parsing json", code)
        assert classifier.user_message(err) == USER_MESSAGES[code]

    def test_string_and_int_codes_match(self, classifier: ErrorClassifier) -> None:
        assert classifier.user_message(_err(code="404")) == classifier.user_message(_err(code=404))

    def test_unknown_code_falls_through(self, classifier: ErrorClassifier) -> None:
        assert classifier.user_message(_err("teapot", 418)) == "teapot"

    def test_overrides_merge_over_table(self) -> None:
        classifier = ErrorClassifier(messages={404: "no such user", 418: "I'm a teapot"})
        assert classifier.user_message(_err(code=404)) == "no such user"
        assert classifier.user_message(_err(code=418)) == "I'm a teapot"
        assert classifier.user_message(_err(code=500)) == "internal server error"
        assert "418" in classifier.messages


class TestKeywordRules:
    """Tests for the heuristic message match."""

    @pytest.mark.parametrize(
        "message, expected",
        [
            ("Network unreachable", NETWORK_FAILURE_MESSAGE),
            ("Failed to FETCH", NETWORK_FAILURE_MESSAGE),
            ("upstream Timeout", TIMEOUT_MESSAGE),
            ("could not parse body", DATA_FORMAT_MESSAGE),
            ("Invalid JSON", DATA_FORMAT_MESSAGE),
        ],
    )
    def test_keywords(self, classifier: ErrorClassifier, message: str, expected: str) -> None:
        assert classifier.user_message(_err(message)) == expected

    def test_network_rule_checked_before_timeout(self, classifier: ErrorClassifier) -> None:
        assert classifier.user_message(_err("network timeout")) == NETWORK_FAILURE_MESSAGE

    def test_fallback_to_message(self, classifier: ErrorClassifier) -> None:
        assert classifier.user_message(_err("disk quota exceeded")) == "disk quota exceeded"

    def test_fallback_to_generic(self, classifier: ErrorClassifier) -> None:
        assert classifier.user_message(_err("")) == GENERIC_FAILURE_MESSAGE


class TestClassify:
    """Tests for classify() and severity handling."""

    def test_default_level_is_error(self, classifier: ErrorClassifier) -> None:
        result = classifier.classify(_err(code=404))
        assert result.level is Severity.ERROR
        assert result.user_message == "resource not found"

    @pytest.mark.parametrize("level", list(Severity))
    def test_level_passes_through(self, classifier: ErrorClassifier, level: Severity) -> None:
        assert classifier.classify(_err(code=500), level).level is level

    def test_level_by_name(self, classifier: ErrorClassifier) -> None:
        assert classifier.classify(_err("x"), "Critical").level is Severity.CRITICAL

    def test_unknown_level_name_rejected(self, classifier: ErrorClassifier) -> None:
        with pytest.raises(ValueError, match="unknown severity"):
            classifier.classify(_err("x"), "fatal")


class TestSeverity:
    def test_total_order(self) -> None:
        assert Severity.INFO < Severity.WARNING < Severity.ERROR < Severity.CRITICAL

    def test_error_channel(self) -> None:
        assert not Severity.INFO.is_error_channel
        assert not Severity.WARNING.is_error_channel
        assert Severity.ERROR.is_error_channel
        assert Severity.CRITICAL.is_error_channel

    def test_label(self) -> None:
        assert Severity.WARNING.label == "warning"
