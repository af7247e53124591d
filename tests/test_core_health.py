"""Tests for compose_extension._core.health module."""

import socket
from unittest.mock import MagicMock, patch

import pytest

from compose_extension._core.health import (
    PING_REQUEST,
    named_pipe_exists,
    ping_unix_socket,
)


pytestmark = pytest.mark.skipif(
    not hasattr(socket, "AF_UNIX"), reason="Unix sockets not available"
)


@pytest.fixture
def socket_file(tmp_path):
    """An existing path standing in for the engine socket."""
    path = tmp_path / "docker.sock"
    path.touch()
    return str(path)


def mock_socket(response=b"", connect_error=None):
    """Patch socket.socket with a fake answering ``response``."""
    sock = MagicMock()
    sock.recv.return_value = response
    if connect_error is not None:
        sock.connect.side_effect = connect_error
    factory = MagicMock()
    factory.return_value.__enter__.return_value = sock
    return patch("compose_extension._core.health.socket.socket", factory), sock


class TestPingUnixSocket:
    """Tests for ping_unix_socket."""

    def test_engine_answers_ok(self, socket_file):
        """HTTP 200 from /_ping means alive."""
        patcher, sock = mock_socket(b"HTTP/1.1 200 OK\r\nContent-Length: 2\r\n\r\nOK")
        with patcher:
            assert ping_unix_socket(socket_file) is True

        sock.connect.assert_called_once_with(socket_file)
        sock.sendall.assert_called_once_with(PING_REQUEST)

    def test_engine_answers_error(self, socket_file):
        patcher, _ = mock_socket(b"HTTP/1.1 500 Internal Server Error\r\n\r\n")
        with patcher:
            assert ping_unix_socket(socket_file) is False

    def test_garbage_answer(self, socket_file):
        patcher, _ = mock_socket(b"")
        with patcher:
            assert ping_unix_socket(socket_file) is False

    def test_missing_socket(self, tmp_path):
        """A socket path that does not exist is not reachable."""
        assert ping_unix_socket(str(tmp_path / "nope.sock")) is False

    @pytest.mark.parametrize("error", [
        ConnectionRefusedError("refused"),
        PermissionError("permission denied"),
        socket.timeout("timed out"),
    ])
    def test_connect_errors(self, socket_file, error):
        """Connection failures are a False answer."""
        patcher, _ = mock_socket(connect_error=error)
        with patcher:
            assert ping_unix_socket(socket_file) is False

    def test_timeout_applied(self, socket_file):
        patcher, sock = mock_socket(b"HTTP/1.0 200 OK\r\n\r\n")
        with patcher:
            ping_unix_socket(socket_file, timeout=0.5)

        sock.settimeout.assert_called_once_with(0.5)


class TestNamedPipeExists:
    """Tests for named_pipe_exists."""

    def test_exists(self, socket_file):
        assert named_pipe_exists(socket_file) is True

    def test_missing(self, tmp_path):
        assert named_pipe_exists(str(tmp_path / "pipe")) is False
