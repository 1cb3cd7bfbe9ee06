"""
Unit tests for core.connection module.

Tests:
- BackendConnection lifecycle (open, close, context manager)
- Single-use and single-command guards
- Error mapping
  - Connect refused / timed out
  - Read timeout / reset
  - Write failure / timeout
- Close idempotency and tolerance of a vanished peer
- Cancellation releases the socket
- Connection counters
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from prometheus_client import REGISTRY

from grouphug.core.connection import BackendConnection
from grouphug.exceptions import BackendTimeoutError, ServiceUnavailable


if TYPE_CHECKING:
    from tests.conftest import FakeBackend


OPEN_CONNECTION = "grouphug.core.connection.asyncio.open_connection"


def _connection(port: int, **timeouts: float) -> BackendConnection:
    params = {"connect_timeout": 1.0, "read_timeout": 0.2, "write_timeout": 0.2, "close_timeout": 0.5}
    params.update(timeouts)
    return BackendConnection("127.0.0.1", port, **params)


def _mock_writer() -> MagicMock:
    writer = MagicMock()
    writer.can_write_eof.return_value = True
    writer.drain = AsyncMock()
    writer.wait_closed = AsyncMock()
    return writer


def _sample(name: str) -> float:
    return REGISTRY.get_sample_value(name) or 0.0


async def _hang(*args, **kwargs):
    await asyncio.sleep(3600)


# =============================================================================
# Lifecycle
# =============================================================================


class TestLifecycle:
    async def test_open_and_close(self, backend: FakeBackend) -> None:
        conn = _connection(backend.port)
        assert not conn.is_open

        await conn.open()
        assert conn.is_open

        await conn.close()
        assert not conn.is_open
        await backend.wait_all_closed()
        assert backend.opened == backend.closed == 1

    async def test_context_manager(self, backend: FakeBackend) -> None:
        async with _connection(backend.port) as conn:
            assert await conn.read_line(16) == b"TESTNET"
            await conn.send(b"add_tx abcd")
            assert await conn.read_line(128) == b"Ok"
        assert not conn.is_open
        await backend.wait_all_closed()
        assert backend.commands == [b"add_tx abcd"]

    async def test_single_use(self, backend: FakeBackend) -> None:
        conn = _connection(backend.port)
        await conn.open()
        await conn.close()
        with pytest.raises(RuntimeError, match="single-use"):
            await conn.open()

    async def test_open_twice(self, backend: FakeBackend) -> None:
        async with _connection(backend.port) as conn:
            with pytest.raises(RuntimeError, match="single-use"):
                await conn.open()

    async def test_second_send_rejected(self, backend: FakeBackend) -> None:
        backend.reply = None
        async with _connection(backend.port) as conn:
            await conn.send(b"add_tx ab")
            with pytest.raises(RuntimeError, match="At most one command"):
                await conn.send(b"add_tx cd")

    async def test_read_before_open(self) -> None:
        with pytest.raises(RuntimeError, match="not open"):
            await _connection(1).read_line(16)

    async def test_send_before_open(self) -> None:
        with pytest.raises(RuntimeError, match="not open"):
            await _connection(1).send(b"add_tx ab")

    async def test_close_never_opened(self) -> None:
        await _connection(1).close()

    async def test_close_idempotent(self, backend: FakeBackend) -> None:
        conn = _connection(backend.port)
        await conn.open()
        await conn.close()
        await conn.close()
        await backend.wait_all_closed()
        assert backend.closed == 1


# =============================================================================
# Error Mapping
# =============================================================================


class TestConnectErrors:
    async def test_refused(self, unused_port: int) -> None:
        conn = _connection(unused_port)
        with pytest.raises(ServiceUnavailable, match="failed") as exc_info:
            await conn.open()
        assert not isinstance(exc_info.value, BackendTimeoutError)
        assert isinstance(exc_info.value.__cause__, OSError)
        assert not conn.is_open

    async def test_timeout(self) -> None:
        conn = _connection(8787, connect_timeout=0.05)
        with patch(OPEN_CONNECTION, new=_hang):
            with pytest.raises(BackendTimeoutError, match="timed out"):
                await conn.open()
        assert not conn.is_open

    async def test_dns_failure(self) -> None:
        conn = _connection(8787)
        error = OSError("Name or service not known")
        with patch(OPEN_CONNECTION, new=AsyncMock(side_effect=error)):
            with pytest.raises(ServiceUnavailable):
                await conn.open()


class TestReadErrors:
    async def test_timeout(self, backend: FakeBackend) -> None:
        backend.greeting = None
        async with _connection(backend.port, read_timeout=0.05) as conn:
            with pytest.raises(BackendTimeoutError, match="No line"):
                await conn.read_line(16)

    async def test_reset(self) -> None:
        reader = asyncio.StreamReader()
        reader.set_exception(ConnectionResetError("reset by peer"))
        with patch(OPEN_CONNECTION, new=AsyncMock(return_value=(reader, _mock_writer()))):
            async with _connection(8787) as conn:
                with pytest.raises(ServiceUnavailable, match="Read from"):
                    await conn.read_line(128)

    async def test_eof_is_not_an_error(self, backend: FakeBackend) -> None:
        backend.greeting = None
        backend.hang_up_after_command = True
        async with _connection(backend.port) as conn:
            await conn.send(b"add_tx ab")
            assert await conn.read_line(128) is None


class TestWriteErrors:
    async def test_broken_pipe(self) -> None:
        writer = _mock_writer()
        writer.drain = AsyncMock(side_effect=BrokenPipeError())
        reader = asyncio.StreamReader()
        with patch(OPEN_CONNECTION, new=AsyncMock(return_value=(reader, writer))):
            async with _connection(8787) as conn:
                with pytest.raises(ServiceUnavailable, match="Write to"):
                    await conn.send(b"add_tx ab")
        writer.close.assert_called_once()

    async def test_timeout(self) -> None:
        writer = _mock_writer()
        writer.drain = _hang
        reader = asyncio.StreamReader()
        with patch(OPEN_CONNECTION, new=AsyncMock(return_value=(reader, writer))):
            async with _connection(8787, write_timeout=0.05) as conn:
                with pytest.raises(BackendTimeoutError):
                    await conn.send(b"add_tx ab")

    async def test_write_is_the_exact_bytes(self) -> None:
        writer = _mock_writer()
        with patch(OPEN_CONNECTION, new=AsyncMock(return_value=(asyncio.StreamReader(), writer))):
            async with _connection(8787) as conn:
                await conn.send(b"add_tx 0200ab")
        writer.write.assert_called_once_with(b"add_tx 0200ab")


# =============================================================================
# Close Behaviour
# =============================================================================


class TestClose:
    async def test_write_eof_failure_suppressed(self) -> None:
        writer = _mock_writer()
        writer.write_eof.side_effect = ConnectionResetError()
        with patch(OPEN_CONNECTION, new=AsyncMock(return_value=(asyncio.StreamReader(), writer))):
            conn = _connection(8787)
            await conn.open()
            await conn.close()
        writer.close.assert_called_once()

    async def test_wait_closed_failure_suppressed(self) -> None:
        writer = _mock_writer()
        writer.wait_closed = AsyncMock(side_effect=ConnectionResetError())
        with patch(OPEN_CONNECTION, new=AsyncMock(return_value=(asyncio.StreamReader(), writer))):
            conn = _connection(8787)
            await conn.open()
            await conn.close()
        assert not conn.is_open

    async def test_wait_closed_bounded(self) -> None:
        writer = _mock_writer()
        writer.wait_closed = _hang
        with patch(OPEN_CONNECTION, new=AsyncMock(return_value=(asyncio.StreamReader(), writer))):
            conn = _connection(8787, close_timeout=0.05)
            await conn.open()
            await asyncio.wait_for(conn.close(), timeout=1.0)
        writer.close.assert_called_once()

    async def test_no_write_eof_when_unsupported(self) -> None:
        writer = _mock_writer()
        writer.can_write_eof.return_value = False
        with patch(OPEN_CONNECTION, new=AsyncMock(return_value=(asyncio.StreamReader(), writer))):
            conn = _connection(8787)
            await conn.open()
            await conn.close()
        writer.write_eof.assert_not_called()

    async def test_cancellation_releases_socket(self, backend: FakeBackend) -> None:
        backend.greeting = None
        conn = _connection(backend.port, read_timeout=60.0)

        async def exchange() -> None:
            async with conn:
                await conn.read_line(16)

        task = asyncio.create_task(exchange())
        await asyncio.sleep(0.1)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert not conn.is_open
        await backend.wait_all_closed()
        assert backend.opened == backend.closed == 1


# =============================================================================
# Metrics
# =============================================================================


class TestConnectionMetrics:
    async def test_open_and_close_counted(self, backend: FakeBackend) -> None:
        opened = _sample("grouphug_connections_opened_total")
        closed = _sample("grouphug_connections_closed_total")

        async with _connection(backend.port):
            assert _sample("grouphug_connections_opened_total") == opened + 1
            assert _sample("grouphug_connections_closed_total") == closed

        assert _sample("grouphug_connections_closed_total") == closed + 1

    async def test_failed_connect_not_counted(self, unused_port: int) -> None:
        opened = _sample("grouphug_connections_opened_total")
        with pytest.raises(ServiceUnavailable):
            await _connection(unused_port).open()
        assert _sample("grouphug_connections_opened_total") == opened
