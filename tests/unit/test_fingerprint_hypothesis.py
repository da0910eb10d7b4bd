"""Property-based tests for request fingerprinting."""

from hypothesis import assume, given
from hypothesis import strategies as st

from idempotency_kit.fingerprint import compute_fingerprint

methods = st.sampled_from(["POST", "PUT", "PATCH", "DELETE"])
paths = st.text(min_size=1, max_size=50).map(lambda s: "/" + s.replace("\n", ""))
queries = st.text(max_size=50).map(lambda s: s.replace("\n", ""))
bodies = st.binary(max_size=500)


@given(method=methods, path=paths, query=queries, body=bodies)
def test_same_request_same_fingerprint(method: str, path: str, query: str, body: bytes) -> None:
    assert compute_fingerprint(method, path, query, body) == compute_fingerprint(
        method, path, query, body
    )


@given(method=methods, path=paths, query=queries, body=bodies, other=bodies)
def test_different_body_different_fingerprint(
    method: str, path: str, query: str, body: bytes, other: bytes
) -> None:
    assume(body != other)

    assert compute_fingerprint(method, path, query, body) != compute_fingerprint(
        method, path, query, other
    )


@given(method=methods, path=paths, other_path=paths, body=bodies)
def test_different_path_different_fingerprint(
    method: str, path: str, other_path: str, body: bytes
) -> None:
    assume(path != other_path)

    assert compute_fingerprint(method, path, "", body) != compute_fingerprint(
        method, other_path, "", body
    )
