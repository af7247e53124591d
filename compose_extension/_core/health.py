"""
Liveness check for a container engine socket.

Speaks just enough HTTP over a Unix socket to call the Docker-compatible
``GET /_ping`` endpoint, which both Docker and Podman serve.
"""

from __future__ import annotations

import logging
import os
import socket

logger = logging.getLogger(__name__)


PING_REQUEST = b"GET /_ping HTTP/1.0\r\nHost: localhost\r\n\r\n"


def ping_unix_socket(socket_path: str, timeout: float = 2.0) -> bool:
    """
    Check that a container engine answers on a Unix socket.

    Args:
        socket_path: Filesystem path of the socket
        timeout: Connect/read timeout in seconds

    Returns:
        True if the engine answered ``/_ping`` with HTTP 200
    """
    if not hasattr(socket, "AF_UNIX"):
        return False

    if not os.path.exists(socket_path):
        logger.debug(f"Socket {socket_path} does not exist")
        return False

    try:
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as s:
            s.settimeout(timeout)
            s.connect(socket_path)
            s.sendall(PING_REQUEST)
            response = s.recv(1024)
    except OSError as e:
        # Refused, timed out or permission denied: the socket is not usable as is
        logger.debug(f"Socket {socket_path} is not reachable: {e}")
        return False

    status_line = response.split(b"\r\n", 1)[0].decode("latin-1")
    parts = status_line.split()
    alive = len(parts) >= 2 and parts[1] == "200"
    logger.debug(f"Ping {socket_path}: {status_line!r}")
    return alive


def named_pipe_exists(pipe_path: str) -> bool:
    """Check that a Windows named pipe is present."""
    try:
        return os.path.exists(pipe_path)
    except OSError as e:
        logger.debug(f"Named pipe {pipe_path} is not reachable: {e}")
        return False
