"""
Pytest configuration and shared fixtures for GroupHug tests.

Provides:
- ``FakeBackend``: an in-process GroupHug relay on a loopback port that
  records every connection it accepts, every command it receives, and
  every connection it sees closed
- ``backend`` fixture (started and stopped around each test)
- ``make_client`` factory building a client with short timeouts
- ``unused_port`` for "nothing listening" scenarios
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import socket
from collections.abc import AsyncIterator, Callable
from typing import Any

import pytest

from grouphug.core.client import GroupHugClient, GroupHugClientConfig, GroupHugTimeoutsConfig


# ============================================================================
# Logging Configuration
# ============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Configure logging for tests."""
    logging.basicConfig(level=logging.DEBUG)


# ============================================================================
# Fake Backend
# ============================================================================


class FakeBackend:
    """Scriptable stand-in for the GroupHug relay.

    Behaviour is read at accept time, so tests may change it between
    submissions:

    * ``greeting``: bytes sent right after accept, or ``None`` for none.
    * ``reply``: bytes sent after the command, ``None`` to stay silent
      until the client hangs up, or a callable mapping the command to one
      of those.
    * ``hang_up_after_command``: close right after reading the command,
      without replying.
    """

    def __init__(self) -> None:
        self.greeting: bytes | None = b"TESTNET\n"
        self.reply: bytes | None | Callable[[bytes], bytes | None] = b"Ok\n"
        self.hang_up_after_command = False
        self.opened = 0
        self.closed = 0
        self.commands: list[bytes] = []
        self._server: asyncio.Server | None = None
        self._writers: set[asyncio.StreamWriter] = set()

    @property
    def port(self) -> int:
        assert self._server is not None
        return int(self._server.sockets[0].getsockname()[1])

    async def start(self) -> None:
        self._server = await asyncio.start_server(self._handle, "127.0.0.1", 0)

    async def stop(self) -> None:
        if self._server is None:
            return
        self._server.close()
        for writer in list(self._writers):
            writer.close()
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(self._server.wait_closed(), timeout=2.0)

    async def wait_all_closed(self, timeout: float = 2.0) -> None:
        """Wait until every accepted connection has been seen closed."""
        async with asyncio.timeout(timeout):
            while self.closed < self.opened:
                await asyncio.sleep(0.01)

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self.opened += 1
        self._writers.add(writer)
        try:
            if self.greeting is not None:
                writer.write(self.greeting)
                await writer.drain()

            command = await reader.read(256 * 1024)
            if command:
                self.commands.append(command)
            if self.hang_up_after_command:
                return

            reply = self.reply(command) if callable(self.reply) else self.reply
            if reply is not None:
                writer.write(reply)
                await writer.drain()

            # Hold the connection until the client hangs up
            while await reader.read(1024):
                pass
        except ConnectionError:
            pass
        finally:
            self._writers.discard(writer)
            writer.close()
            self.closed += 1
            with contextlib.suppress(ConnectionError):
                await writer.wait_closed()


@pytest.fixture
async def backend() -> AsyncIterator[FakeBackend]:
    """A running FakeBackend that answers ``Ok`` after a ``TESTNET`` greeting."""
    server = FakeBackend()
    await server.start()
    try:
        yield server
    finally:
        await server.stop()


@pytest.fixture
def unused_port() -> int:
    """A loopback port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return int(sock.getsockname()[1])


@pytest.fixture
def make_client() -> Callable[..., GroupHugClient]:
    """Factory for clients pointed at a loopback port with short timeouts."""

    def _make(port: int, **overrides: Any) -> GroupHugClient:
        timeouts = overrides.pop(
            "timeouts",
            GroupHugTimeoutsConfig(connect=1.0, read=0.5, write=1.0, close=0.5),
        )
        config = GroupHugClientConfig(host="127.0.0.1", port=port, timeouts=timeouts, **overrides)
        return GroupHugClient(config)

    return _make
