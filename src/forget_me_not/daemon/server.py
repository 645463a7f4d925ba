# src/forget_me_not/daemon/server.py

"""
TCP front end of fmn-daemon.

Each connection carries one JSON request line and gets one JSON response line.
Handlers run in server threads and call the scheduler facade directly; the
facade is thread-safe.
"""

from __future__ import annotations

import logging
import socketserver
import threading

from ..core.state import AppState
from ..errors import ConfigurationError, ProtocolError
from ..tasks.task_api import handle_request
from .protocol import MAX_REQUEST_BYTES, Response, decode_request, encode_response

logger = logging.getLogger(__name__)


class RequestHandler(socketserver.StreamRequestHandler):
    """Read one request line, dispatch it, write one response line."""

    server: "DaemonServer"

    def handle(self) -> None:
        peer = "%s:%s" % self.client_address[:2]
        line = self.rfile.readline(MAX_REQUEST_BYTES)
        if not line.strip():
            logger.debug("Empty request from %s", peer)
            return

        try:
            request = decode_request(line)
        except (ProtocolError, ConfigurationError) as e:
            logger.warning("Bad request from %s: %s", peer, e)
            response = Response.fail(str(e))
        else:
            logger.debug("Request from %s: %s", peer, request.kind.value)
            try:
                response = handle_request(self.server.state, request)
            except Exception:
                logger.exception("Request handler crashed (peer=%s).", peer)
                response = Response.fail("internal error")

        try:
            self.wfile.write(encode_response(response))
        except OSError:
            logger.warning("Failed to send response to %s", peer, exc_info=True)


class DaemonServer(socketserver.ThreadingMixIn, socketserver.TCPServer):
    allow_reuse_address = True
    daemon_threads = True

    def __init__(self, address: tuple[str, int], state: AppState) -> None:
        self.state = state
        super().__init__(address, RequestHandler)


def start_server_in_background(server: DaemonServer) -> threading.Thread:
    t = threading.Thread(target=server.serve_forever, name="fmn-server", daemon=True)
    t.start()
    host, port = server.server_address[:2]
    logger.info("fmn-daemon listening on %s:%s", host, port)
    return t
