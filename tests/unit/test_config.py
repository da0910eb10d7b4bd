"""Unit tests for configuration module.

Tests the IdempotencyConfig class including validation, factory methods,
and immutability.
"""

import pytest
from pydantic import ValidationError

from idempotency_kit.config import VALID_HTTP_METHODS, IdempotencyConfig


class TestIdempotencyConfigDefaults:
    """Tests for default configuration values."""

    def test_default_values(self) -> None:
        config = IdempotencyConfig()

        assert config.ttl == 86400
        assert config.header == "Idempotency-Key"
        assert config.methods == ["POST", "PUT", "PATCH"]
        assert config.wait_timeout == 2.0
        assert config.lock_ttl == 10
        assert config.max_body_bytes == 1_000_000
        assert config.poll_interval == 0.05

    def test_config_is_immutable(self) -> None:
        config = IdempotencyConfig()

        with pytest.raises(ValidationError):
            config.ttl = 10  # type: ignore[misc]


class TestMethodsValidation:
    """Tests for methods field validation."""

    def test_methods_uppercase_conversion(self) -> None:
        config = IdempotencyConfig(methods=["post", "put", "patch"])
        assert config.methods == ["POST", "PUT", "PATCH"]

    def test_methods_mixed_case(self) -> None:
        config = IdempotencyConfig(methods=["PoSt", "DeLeTe"])
        assert config.methods == ["POST", "DELETE"]

    def test_methods_all_valid_methods(self) -> None:
        config = IdempotencyConfig(methods=list(VALID_HTTP_METHODS))
        assert set(config.methods) == VALID_HTTP_METHODS

    def test_methods_invalid_method(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            IdempotencyConfig(methods=["POST", "INVALID"])

        assert "Invalid HTTP methods: INVALID" in str(exc_info.value)

    def test_methods_comma_separated_string(self) -> None:
        config = IdempotencyConfig(methods="post, put ,patch")
        assert config.methods == ["POST", "PUT", "PATCH"]

    def test_methods_accepts_set(self) -> None:
        config = IdempotencyConfig(methods={"post"})
        assert config.methods == ["POST"]

    def test_applies_to_is_case_insensitive(self) -> None:
        config = IdempotencyConfig(methods=["POST"])

        assert config.applies_to("post")
        assert config.applies_to("POST")
        assert not config.applies_to("GET")


class TestNumericValidation:
    """Tests for TTLs, timeouts and size limits."""

    @pytest.mark.parametrize("field", ["ttl", "lock_ttl"])
    @pytest.mark.parametrize("value", [0, -1])
    def test_ttls_must_be_positive(self, field: str, value: int) -> None:
        with pytest.raises(ValidationError, match="positive"):
            IdempotencyConfig(**{field: value})

    def test_wait_timeout_zero_allowed(self) -> None:
        assert IdempotencyConfig(wait_timeout=0).wait_timeout == 0

    def test_wait_timeout_negative_rejected(self) -> None:
        with pytest.raises(ValidationError, match="wait_timeout"):
            IdempotencyConfig(wait_timeout=-0.5)

    def test_poll_interval_must_be_positive(self) -> None:
        with pytest.raises(ValidationError, match="poll_interval"):
            IdempotencyConfig(poll_interval=0)

    def test_max_body_bytes_zero_allowed(self) -> None:
        assert IdempotencyConfig(max_body_bytes=0).max_body_bytes == 0

    def test_max_body_bytes_negative_rejected(self) -> None:
        with pytest.raises(ValidationError, match="max_body_bytes"):
            IdempotencyConfig(max_body_bytes=-1)


class TestHeaderValidation:
    def test_header_is_stripped(self) -> None:
        assert IdempotencyConfig(header="  X-Request-Key ").header == "X-Request-Key"

    def test_blank_header_rejected(self) -> None:
        with pytest.raises(ValidationError, match="header"):
            IdempotencyConfig(header="   ")


class TestFactories:
    """Tests for from_env and from_dict."""

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("IDEMPOTENCY_METHODS", "POST,DELETE")
        monkeypatch.setenv("IDEMPOTENCY_TTL", "3600")
        monkeypatch.setenv("IDEMPOTENCY_WAIT_TIMEOUT", "0.5")
        monkeypatch.setenv("IDEMPOTENCY_HEADER", "X-Idempotency-Key")

        config = IdempotencyConfig.from_env()

        assert config.methods == ["POST", "DELETE"]
        assert config.ttl == 3600
        assert config.wait_timeout == 0.5
        assert config.header == "X-Idempotency-Key"
        assert config.lock_ttl == 10

    def test_from_env_custom_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APP_IDEM_LOCK_TTL", "30")

        config = IdempotencyConfig.from_env(prefix="APP_IDEM_")

        assert config.lock_ttl == 30

    def test_from_env_invalid_int(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("IDEMPOTENCY_MAX_BODY_BYTES", "lots")

        with pytest.raises(ValueError):
            IdempotencyConfig.from_env()

    def test_from_dict(self) -> None:
        config = IdempotencyConfig.from_dict({"methods": ["put"], "max_body_bytes": 512})

        assert config.methods == ["PUT"]
        assert config.max_body_bytes == 512

    def test_from_dict_invalid(self) -> None:
        with pytest.raises(ValidationError):
            IdempotencyConfig.from_dict({"ttl": 0})
