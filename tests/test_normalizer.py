"""Tests for ErrorNormalizer.

Tests cover:
- Exceptions: message, stack, code extraction and sentinel codes
- Plain text and structured payloads (mappings and attribute objects)
- Totality: hostile and shapeless inputs never raise
"""

import asyncio
import json

import httpx
import pytest

from adminkit.core.constants import NETWORK_ERROR, PARSE_ERROR, TIMEOUT
from adminkit.core.errors import ApiError, ErrorNormalizer, NormalizedError, normalize


@pytest.fixture
def normalizer() -> ErrorNormalizer:
    return ErrorNormalizer(clock=lambda: 1_700_000_000_000)


def _raised(exc: BaseException) -> BaseException:
    try:
        raise exc
    except BaseException as caught:
        return caught


class TestExceptions:
    """Tests for exception inputs."""

    def test_preserves_message_and_stamps_timestamp(self, normalizer: ErrorNormalizer) -> None:
        result = normalizer.normalize(ValueError("bad value"))
        assert result.message == "bad value"
        assert result.timestamp == 1_700_000_000_000
        assert result.code is None

    def test_raised_exception_keeps_stack(self, normalizer: ErrorNormalizer) -> None:
        result = normalizer.normalize(_raised(RuntimeError("boom")))
        assert result.stack is not None
        assert "RuntimeError: boom" in result.stack

    def test_unraised_exception_has_no_stack(self, normalizer: ErrorNormalizer) -> None:
        assert normalizer.normalize(RuntimeError("boom")).stack is None

    def test_empty_message_falls_back_to_type_name(self, normalizer: ErrorNormalizer) -> None:
        assert normalizer.normalize(KeyError()).message == "KeyError"

    def test_api_error_code_and_data(self, normalizer: ErrorNormalizer) -> None:
        err = ApiError("quota exceeded", code=429, data={"retry_after": 30})
        result = normalizer.normalize(err)
        assert result.code == 429
        assert result.message == "quota exceeded"
        assert result.details == {"retry_after": 30}

    def test_status_used_when_code_absent(self, normalizer: ErrorNormalizer) -> None:
        result = normalizer.normalize(ApiError(status=404))
        assert result.code == 404

    def test_code_from_nested_response(self, normalizer: ErrorNormalizer) -> None:
        request = httpx.Request("GET", "https://api.example.com/users")
        response = httpx.Response(503, request=request)
        err = httpx.HTTPStatusError("server error", request=request, response=response)
        result = normalizer.normalize(err)
        assert result.code == 503
        assert result.message == "server error"

    @pytest.mark.parametrize(
        "exc, expected",
        [
            (TimeoutError("slow"), TIMEOUT),
            (asyncio.TimeoutError(), TIMEOUT),
            (httpx.ReadTimeout("read timed out"), TIMEOUT),
            (ConnectionRefusedError("refused"), NETWORK_ERROR),
            (httpx.ConnectError("unreachable"), NETWORK_ERROR),
            (json.JSONDecodeError("Expecting value", "", 0), PARSE_ERROR),
        ],
        ids=["timeout", "asyncio-timeout", "httpx-timeout", "refused", "connect", "json"],
    )
    def test_sentinel_codes(
        self, normalizer: ErrorNormalizer, exc: BaseException, expected: str
    ) -> None:
        assert normalizer.normalize(exc).code == expected


class TestPlainAndStructured:
    """Tests for text, mapping and attribute-object inputs."""

    def test_plain_text(self, normalizer: ErrorNormalizer) -> None:
        result = normalizer.normalize("disk full")
        assert result == NormalizedError(message="disk full", timestamp=1_700_000_000_000)

    def test_blank_text_becomes_unknown(self, normalizer: ErrorNormalizer) -> None:
        assert normalizer.normalize("   ").message == "unknown error"

    def test_status_only_mapping(self, normalizer: ErrorNormalizer) -> None:
        result = normalizer.normalize({"status": 404})
        assert result.code == 404
        assert result.message == "unknown error"

    def test_mapping_fields_first_present_wins(self, normalizer: ErrorNormalizer) -> None:
        result = normalizer.normalize(
            {"code": "E42", "status": 500, "msg": "broken", "data": [1, 2]}
        )
        assert result.code == "E42"
        assert result.message == "broken"
        assert result.details == [1, 2]

    def test_nested_response_payload(self, normalizer: ErrorNormalizer) -> None:
        result = normalizer.normalize(
            {"message": "denied", "response": {"status": 403, "data": {"reason": "role"}}}
        )
        assert result.code == 403
        assert result.details == {"reason": "role"}

    def test_attribute_object(self, normalizer: ErrorNormalizer) -> None:
        class Failure:
            code = 401
            message = "token expired"
            stack = "at login()"

        result = normalizer.normalize(Failure())
        assert result.code == 401
        assert result.message == "token expired"
        assert result.stack == "at login()"

    def test_normalized_error_is_restamped(self, normalizer: ErrorNormalizer) -> None:
        original = NormalizedError(message="old", timestamp=1, code=500)
        result = normalizer.normalize(original)
        assert result.timestamp == 1_700_000_000_000
        assert result.code == 500
        assert result.message == "old"


class TestTotality:
    """normalize never raises and always yields a message and timestamp."""

    @pytest.mark.parametrize(
        "value",
        [None, 0, 3.5, [], (), object(), b"bytes", {"unrelated": True}],
        ids=["none", "zero", "float", "list", "tuple", "object", "bytes", "unrelated-dict"],
    )
    def test_shapeless_inputs(self, normalizer: ErrorNormalizer, value: object) -> None:
        result = normalizer.normalize(value)
        assert result.message
        assert result.timestamp == 1_700_000_000_000

    def test_hostile_attribute_access(self, normalizer: ErrorNormalizer) -> None:
        class Hostile:
            @property
            def code(self) -> int:
                raise RuntimeError("no")

        result = normalizer.normalize(Hostile())
        assert result.message == "unknown error"

    def test_hostile_str(self, normalizer: ErrorNormalizer) -> None:
        class Unprintable(Exception):
            def __str__(self) -> str:
                raise RuntimeError("no")

        result = normalizer.normalize(Unprintable())
        assert result.message == "unknown error"

    def test_failing_clock_falls_back(self) -> None:
        def broken_clock() -> int:
            raise RuntimeError("clock")

        result = ErrorNormalizer(clock=broken_clock).normalize("x")
        assert result.timestamp > 0

    def test_module_level_normalize(self) -> None:
        result = normalize("boom")
        assert result.message == "boom"
        assert result.timestamp > 0

    def test_to_dict_omits_absent_fields(self) -> None:
        assert NormalizedError(message="m", timestamp=5).to_dict() == {
            "message": "m",
            "timestamp": 5,
        }
