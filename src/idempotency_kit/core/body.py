"""Downstream response body handling.

A handler may return its body as a single value (bytes, str, None) or as a
lazily produced sequence of chunks, synchronous or asynchronous. The
coordinator needs the whole body in memory to measure and store it, and
must release the original body object afterwards if it offers a way to.
"""

from typing import Any


def _to_bytes(chunk: Any) -> bytes:
    if isinstance(chunk, str):
        return chunk.encode("utf-8")
    return bytes(chunk)


async def capture_body(body: Any) -> bytes:
    """Read a response body fully into bytes.

    Args:
        body: bytes-like, str, None, an iterable of chunks or an async
            iterable of chunks.

    Returns:
        The concatenated body.

    Examples:
        >>> await capture_body([b"hello, ", "world"])
        b'hello, world'
    """
    if body is None:
        return b""
    if isinstance(body, (bytes, bytearray, memoryview, str)):
        return _to_bytes(body)

    chunks: list[bytes] = []
    if hasattr(body, "__aiter__"):
        async for chunk in body:
            chunks.append(_to_bytes(chunk))
    else:
        for chunk in body:
            chunks.append(_to_bytes(chunk))
    return b"".join(chunks)


async def close_body(body: Any) -> None:
    """Release a response body if it exposes ``aclose()`` or ``close()``."""
    aclose = getattr(body, "aclose", None)
    if callable(aclose):
        await aclose()
        return

    close = getattr(body, "close", None)
    if callable(close):
        close()
