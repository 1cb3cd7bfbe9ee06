"""Address parsing and bounded line I/O helpers.

The utils layer sits above [grouphug.models][grouphug.models] and below
[grouphug.core][grouphug.core]. It has no imports from ``core``.

Attributes:
    address: ``tcp://host:port`` parsing into a ``RelayAddress``.
    lines: Byte-capped ``\\n``-terminated line reads from an
        ``asyncio.StreamReader`` and lenient decoding for display.
"""

from .address import RelayAddress, parse_address
from .lines import decode_line, read_bounded_line


__all__ = [
    "RelayAddress",
    "decode_line",
    "parse_address",
    "read_bounded_line",
]
