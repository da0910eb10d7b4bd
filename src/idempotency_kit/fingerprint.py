"""Request fingerprinting for idempotency.

The fingerprint identifies the request that first claimed an idempotency key.
A later request under the same key is only replayed when its fingerprint is
identical; otherwise the client reused the key for a different payload.

The digest covers the method, path, raw query string and raw body, in that
order, joined by newlines. No canonicalization is applied: ``?a=1&b=2`` and
``?b=2&a=1`` are different requests.
"""

import hashlib


def compute_fingerprint(
    method: str,
    path: str,
    query_string: str,
    body: bytes,
) -> str:
    """Compute a deterministic fingerprint for a request.

    Args:
        method: HTTP method (e.g., "POST", "PUT")
        path: URL path component
        query_string: Raw query string (without leading '?')
        body: Raw request body

    Returns:
        Hexadecimal SHA-256 hash string (64 characters)

    Examples:
        >>> fp = compute_fingerprint("POST", "/payments", "", b'{"amount": 100}')
        >>> len(fp)
        64
        >>> fp == compute_fingerprint("POST", "/payments", "", b'{"amount": 100}')
        True
    """
    fingerprint_input = b"\n".join(
        [
            method.encode("utf-8"),
            path.encode("utf-8"),
            (query_string or "").encode("utf-8"),
            body,
        ]
    )
    return hashlib.sha256(fingerprint_input).hexdigest()
