"""Bounded line reading for the GroupHug text protocol.

The backend is an untrusted peer: a greeting or reply line is read up to a
fixed number of bytes and never more, whatever the peer sends. Reading
stops at the first newline, at the byte cap, or at EOF, whichever comes
first. Time bounds are the caller's concern (wrap in
``asyncio.wait_for``).

See Also:
    [BackendConnection.read_line()][grouphug.core.connection.BackendConnection.read_line]:
        Adds the read timeout and error mapping on top of this module.
"""

from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    import asyncio


async def read_bounded_line(reader: asyncio.StreamReader, limit: int) -> bytes | None:
    """Read one ``\\n``-terminated line of at most *limit* bytes.

    Accumulates chunks until a newline appears, *limit* bytes have been
    read, or the peer closes. Bytes after the newline in the same chunk
    are discarded: the protocol never sends more than one line per turn.

    Args:
        reader: Stream to read from.
        limit: Maximum number of bytes to consume.

    Returns:
        The line without its terminating newline (possibly empty), the
        first *limit* bytes if no newline arrived in time, or ``None`` if
        the peer closed before sending a single byte.

    Raises:
        ValueError: If *limit* is not positive.
    """
    if limit <= 0:
        raise ValueError(f"limit must be positive, got {limit}")

    buffer = bytearray()
    while len(buffer) < limit:
        chunk = await reader.read(limit - len(buffer))
        if not chunk:
            break
        buffer += chunk
        newline = buffer.find(b"\n")
        if newline != -1:
            return bytes(buffer[:newline])

    if not buffer:
        return None
    return bytes(buffer)


def decode_line(raw: bytes) -> str:
    """Decode a protocol line for display, dropping a trailing ``\\r``.

    Undecodable bytes are replaced rather than rejected; reply text is
    opaque and only ever shown to the user.
    """
    if raw.endswith(b"\r"):
        raw = raw[:-1]
    return raw.decode("utf-8", errors="replace")
