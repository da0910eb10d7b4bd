"""Header lookup utilities for idempotency middleware.

This module provides functions for:
- Mapping a header name to its WSGI/CGI environ key
- Case-insensitive header lookup
- Rebuilding a header dict from environ-style request metadata
"""

from collections.abc import Mapping
from typing import Any

# CGI variables that carry headers without the HTTP_ prefix
_UNPREFIXED_HEADERS = {
    "CONTENT_TYPE": "Content-Type",
    "CONTENT_LENGTH": "Content-Length",
}


def header_env_key(header_name: str) -> str:
    """Return the environ key under which a request header is exposed.

    Example:
        >>> header_env_key("Idempotency-Key")
        'HTTP_IDEMPOTENCY_KEY'
    """
    return "HTTP_" + header_name.upper().replace("-", "_")


def get_header_value(
    headers: Mapping[str, str],
    header_name: str,
    default: str | None = None,
) -> str | None:
    """Get header value with case-insensitive lookup.

    Args:
        headers: Headers mapping
        header_name: Name of header to find (case-insensitive)
        default: Default value if header not found

    Returns:
        Header value or default

    Example:
        >>> headers = {"idempotency-key": "abc"}
        >>> get_header_value(headers, "Idempotency-Key")
        'abc'
        >>> get_header_value(headers, "missing", "default")
        'default'
    """
    header_name_lower = header_name.lower()

    for key, value in headers.items():
        if key.lower() == header_name_lower:
            return value

    return default


def headers_from_environ(environ: Mapping[str, Any]) -> dict[str, str]:
    """Rebuild request headers from environ-style metadata.

    ``HTTP_IDEMPOTENCY_KEY`` becomes ``Idempotency-Key``; ``CONTENT_TYPE`` and
    ``CONTENT_LENGTH`` are included as well.

    Example:
        >>> headers_from_environ({"HTTP_IDEMPOTENCY_KEY": "abc", "PATH_INFO": "/"})
        {'Idempotency-Key': 'abc'}
    """
    headers: dict[str, str] = {}

    for key, value in environ.items():
        if key.startswith("HTTP_"):
            name = "-".join(part.capitalize() for part in key[5:].split("_"))
            headers[name] = str(value)
        elif key in _UNPREFIXED_HEADERS and value not in (None, ""):
            headers[_UNPREFIXED_HEADERS[key]] = str(value)

    return headers
