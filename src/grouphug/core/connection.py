"""
Single-use TCP session to the GroupHug backend relay.

A [BackendConnection][grouphug.core.connection.BackendConnection] wraps one
``asyncio`` stream pair for exactly one exchange: open, optionally read a
greeting, write one command, read one reply, close. It is owned by the
submission that opened it and can never be reopened or shared, so no state
leaks between submissions through a socket.

Every network step is bounded by its own timeout and every failure is
mapped onto the [ServiceUnavailable][grouphug.exceptions.ServiceUnavailable]
branch of the exception tree. ``asyncio.CancelledError`` is never caught;
the async context manager still closes the socket on the way out.

Examples:
    ```python
    async with BackendConnection("127.0.0.1", 8787) as conn:
        chain = await conn.read_line(16)
        await conn.send(b"add_tx 0200...")
        reply = await conn.read_line(128)
    ```
"""

from __future__ import annotations

import asyncio
import contextlib
from types import TracebackType
from typing import Self

from grouphug.exceptions import BackendTimeoutError, ServiceUnavailable
from grouphug.utils.lines import read_bounded_line

from .logger import Logger
from .metrics import CONNECTIONS_CLOSED, CONNECTIONS_OPENED


class BackendConnection:
    """One ephemeral TCP session to the relay.

    Attributes:
        host: Relay hostname or IP address.
        port: Relay TCP port.

    Note:
        Lifecycle is Idle -> Open -> Closed, terminal on Closed. Calling
        [open()][grouphug.core.connection.BackendConnection.open] twice
        raises ``RuntimeError``, as does a second
        [send()][grouphug.core.connection.BackendConnection.send].
    """

    def __init__(
        self,
        host: str,
        port: int,
        *,
        connect_timeout: float = 5.0,
        read_timeout: float = 10.0,
        write_timeout: float = 10.0,
        close_timeout: float = 2.0,
    ) -> None:
        self.host = host
        self.port = port
        self._connect_timeout = connect_timeout
        self._read_timeout = read_timeout
        self._write_timeout = write_timeout
        self._close_timeout = close_timeout
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._opened = False
        self._sent = False
        self._logger = Logger("connection")

    @property
    def is_open(self) -> bool:
        return self._writer is not None

    def _streams(self) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
        if self._reader is None or self._writer is None:
            raise RuntimeError("BackendConnection is not open")
        return self._reader, self._writer

    async def open(self) -> None:
        """Establish the TCP connection.

        Raises:
            BackendTimeoutError: If the connect does not finish within
                ``connect_timeout``.
            ServiceUnavailable: If the connection is refused, the host
                cannot be resolved, or any other socket error occurs.
            RuntimeError: If this connection was already opened once.
        """
        if self._opened:
            raise RuntimeError("BackendConnection is single-use")
        self._opened = True

        try:
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port),
                timeout=self._connect_timeout,
            )
        except TimeoutError as e:
            raise BackendTimeoutError(
                f"Connect to {self.host}:{self.port} timed out after {self._connect_timeout}s"
            ) from e
        except (OSError, UnicodeError) as e:
            raise ServiceUnavailable(f"Connect to {self.host}:{self.port} failed: {e}") from e

        CONNECTIONS_OPENED.inc()
        self._logger.debug("connection_opened", host=self.host, port=self.port)

    async def read_line(self, limit: int) -> bytes | None:
        """Read one line of at most *limit* bytes within ``read_timeout``.

        Returns:
            The line without its newline, or ``None`` on EOF before any
            byte (see [read_bounded_line()][grouphug.utils.lines.read_bounded_line]).

        Raises:
            BackendTimeoutError: If no complete line arrives in time.
            ServiceUnavailable: If the connection is reset.
        """
        reader, _ = self._streams()
        try:
            return await asyncio.wait_for(
                read_bounded_line(reader, limit), timeout=self._read_timeout
            )
        except TimeoutError as e:
            raise BackendTimeoutError(
                f"No line from {self.host}:{self.port} within {self._read_timeout}s"
            ) from e
        except OSError as e:
            raise ServiceUnavailable(f"Read from {self.host}:{self.port} failed: {e}") from e

    async def send(self, data: bytes) -> None:
        """Write the single command of this session and drain it.

        Raises:
            BackendTimeoutError: If the drain does not finish within
                ``write_timeout``.
            ServiceUnavailable: On broken pipe or reset.
            RuntimeError: If a command was already sent on this connection.
        """
        _, writer = self._streams()
        if self._sent:
            raise RuntimeError("At most one command may be sent per connection")
        self._sent = True

        try:
            writer.write(data)
            await asyncio.wait_for(writer.drain(), timeout=self._write_timeout)
        except TimeoutError as e:
            raise BackendTimeoutError(
                f"Write to {self.host}:{self.port} timed out after {self._write_timeout}s"
            ) from e
        except OSError as e:
            raise ServiceUnavailable(f"Write to {self.host}:{self.port} failed: {e}") from e

    async def close(self) -> None:
        """Shut down both directions and release the socket.

        Idempotent, never raises ``OSError``: a peer that already vanished
        is not an error at this point. The handle is released before the
        first ``await`` so a cancelled task cannot leak it.
        """
        writer = self._writer
        if writer is None:
            return
        self._reader = None
        self._writer = None

        try:
            if writer.can_write_eof():
                with contextlib.suppress(OSError):
                    writer.write_eof()
        finally:
            writer.close()
            CONNECTIONS_CLOSED.inc()

        with contextlib.suppress(OSError, TimeoutError):
            await asyncio.wait_for(writer.wait_closed(), timeout=self._close_timeout)
        self._logger.debug("connection_closed", host=self.host, port=self.port)

    async def __aenter__(self) -> Self:
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()
