"""Unit tests for header utilities."""

import pytest

from idempotency_kit.utils.headers import (
    get_header_value,
    header_env_key,
    headers_from_environ,
)


class TestHeaderEnvKey:
    @pytest.mark.parametrize(
        ("header", "expected"),
        [
            ("Idempotency-Key", "HTTP_IDEMPOTENCY_KEY"),
            ("idempotency-key", "HTTP_IDEMPOTENCY_KEY"),
            ("X-Request-Key", "HTTP_X_REQUEST_KEY"),
            ("Token", "HTTP_TOKEN"),
        ],
    )
    def test_maps_to_environ_key(self, header: str, expected: str) -> None:
        assert header_env_key(header) == expected


class TestGetHeaderValue:
    def test_case_insensitive_lookup(self) -> None:
        headers = {"idempotency-key": "abc"}

        assert get_header_value(headers, "Idempotency-Key") == "abc"
        assert get_header_value(headers, "IDEMPOTENCY-KEY") == "abc"

    def test_missing_returns_default(self) -> None:
        assert get_header_value({}, "Idempotency-Key") is None
        assert get_header_value({}, "Idempotency-Key", "fallback") == "fallback"

    def test_empty_value_is_returned(self) -> None:
        assert get_header_value({"Idempotency-Key": ""}, "idempotency-key") == ""


class TestHeadersFromEnviron:
    def test_http_prefixed_keys(self) -> None:
        environ = {
            "REQUEST_METHOD": "POST",
            "HTTP_IDEMPOTENCY_KEY": "abc",
            "HTTP_X_TRACE_ID": "trace-1",
        }

        assert headers_from_environ(environ) == {
            "Idempotency-Key": "abc",
            "X-Trace-Id": "trace-1",
        }

    def test_content_headers_without_prefix(self) -> None:
        environ = {"CONTENT_TYPE": "application/json", "CONTENT_LENGTH": "12"}

        assert headers_from_environ(environ) == {
            "Content-Type": "application/json",
            "Content-Length": "12",
        }

    def test_empty_content_length_skipped(self) -> None:
        assert headers_from_environ({"CONTENT_LENGTH": ""}) == {}

    def test_round_trip_with_env_key(self) -> None:
        environ = {header_env_key("Idempotency-Key"): "k-1"}

        assert get_header_value(headers_from_environ(environ), "Idempotency-Key") == "k-1"
