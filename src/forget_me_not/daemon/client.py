# src/forget_me_not/daemon/client.py

from __future__ import annotations

import logging
import socket

from ..errors import ProtocolError
from .protocol import MAX_RESPONSE_BYTES, Request, Response, decode_response, encode_request

logger = logging.getLogger(__name__)


class DaemonUnreachable(ConnectionError):
    """fmn-daemon could not be reached or hung up."""


def send_request(request: Request, host: str, port: int, *, timeout: float = 5.0) -> Response:
    """Open a connection, send one request, read one response."""
    try:
        with socket.create_connection((host, port), timeout=timeout) as sock:
            sock.sendall(encode_request(request))
            with sock.makefile("rb") as reader:
                line = reader.readline(MAX_RESPONSE_BYTES)
    except OSError as e:
        raise DaemonUnreachable(f"fail to talk to fmn-daemon at {host}:{port}: {e}") from e

    if not line:
        raise DaemonUnreachable(f"fmn-daemon at {host}:{port} closed the connection")
    try:
        return decode_response(line)
    except ProtocolError:
        logger.debug("Undecodable response: %r", line[:200])
        raise
