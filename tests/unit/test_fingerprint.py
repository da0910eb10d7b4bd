"""Unit tests for request fingerprinting."""

import hashlib

import pytest

from idempotency_kit.fingerprint import compute_fingerprint

BASE = {
    "method": "POST",
    "path": "/api/payments",
    "query_string": "expand=customer",
    "body": b'{"amount": 100}',
}


def test_fingerprint_is_sha256_hex() -> None:
    fingerprint = compute_fingerprint(**BASE)

    assert len(fingerprint) == 64
    assert all(c in "0123456789abcdef" for c in fingerprint)


def test_fingerprint_matches_newline_joined_digest() -> None:
    expected = hashlib.sha256(
        b'POST\n/api/payments\nexpand=customer\n{"amount": 100}'
    ).hexdigest()

    assert compute_fingerprint(**BASE) == expected


def test_fingerprint_is_deterministic() -> None:
    assert compute_fingerprint(**BASE) == compute_fingerprint(**BASE)


@pytest.mark.parametrize(
    ("field", "value"),
    [
        ("method", "PUT"),
        ("path", "/api/refunds"),
        ("query_string", "expand=invoice"),
        ("body", b'{"amount": 101}'),
    ],
)
def test_fingerprint_changes_with_each_component(field: str, value: object) -> None:
    changed = {**BASE, field: value}

    assert compute_fingerprint(**changed) != compute_fingerprint(**BASE)


def test_query_parameter_order_matters() -> None:
    first = compute_fingerprint("POST", "/x", "a=1&b=2", b"")
    second = compute_fingerprint("POST", "/x", "b=2&a=1", b"")

    assert first != second


def test_trailing_slash_matters() -> None:
    assert compute_fingerprint("POST", "/x", "", b"") != compute_fingerprint("POST", "/x/", "", b"")


def test_binary_body() -> None:
    body = bytes(range(256))

    assert len(compute_fingerprint("POST", "/upload", "", body)) == 64


def test_empty_query_string_none_equivalent() -> None:
    assert compute_fingerprint("POST", "/x", "", b"") == compute_fingerprint(
        "POST", "/x", None, b""  # type: ignore[arg-type]
    )
