"""Utility modules for idempotency middleware."""

from .headers import get_header_value, header_env_key, headers_from_environ

__all__ = [
    "get_header_value",
    "header_env_key",
    "headers_from_environ",
]
