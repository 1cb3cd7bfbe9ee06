"""Relay address parsing.

The backend address is configured as a ``tcp://host:port`` URL (the format
the frontend settings have always used) or as a bare ``host:port``. IPv6
hosts must be bracketed: ``tcp://[::1]:8787``.

Examples:
    ```python
    parse_address("tcp://127.0.0.1:8787")  # RelayAddress(host='127.0.0.1', port=8787)
    parse_address("[::1]:8787")            # RelayAddress(host='::1', port=8787)
    str(parse_address("localhost:8787"))   # 'tcp://localhost:8787'
    ```
"""

from __future__ import annotations

from typing import Final, NamedTuple
from urllib.parse import urlsplit


TCP_SCHEME: Final[str] = "tcp"


class RelayAddress(NamedTuple):
    """Resolved ``(host, port)`` pair of the backend relay."""

    host: str
    port: int

    def __str__(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{TCP_SCHEME}://{host}:{self.port}"


def parse_address(value: str) -> RelayAddress:
    """Parse a relay address string.

    Args:
        value: ``tcp://host:port`` or ``host:port``.

    Returns:
        The parsed [RelayAddress][grouphug.utils.address.RelayAddress].

    Raises:
        ValueError: If the scheme is not ``tcp``, the host or port is
            missing, the port is out of range, or the string carries a
            path, query or credentials.
    """
    raw = value.strip()
    if "://" not in raw:
        raw = f"{TCP_SCHEME}://{raw}"

    parts = urlsplit(raw)
    if parts.scheme != TCP_SCHEME:
        raise ValueError(f"Unsupported scheme '{parts.scheme}' in address '{value}'")
    if parts.path not in ("", "/") or parts.query or parts.fragment:
        raise ValueError(f"Address must not carry a path or query: '{value}'")
    if parts.username is not None or parts.password is not None:
        raise ValueError(f"Address must not carry credentials: '{value}'")
    if not parts.hostname:
        raise ValueError(f"Missing host in address '{value}'")

    # urlsplit raises ValueError itself for non-numeric or out-of-range ports
    port = parts.port
    if port is None or port == 0:
        raise ValueError(f"Missing or zero port in address '{value}'")

    return RelayAddress(host=parts.hostname, port=port)
