"""Minimal liveness and readiness HTTP endpoints for background components."""

from __future__ import annotations

import logging
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Callable
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)


class HealthServer:
    """Serves ``/healthz`` and ``/readyz`` on a background thread.

    ``/healthz`` always answers ``ok``. ``/readyz`` calls ``ping`` and answers
    ``ready`` when it returns, or 503 when it raises.
    """

    def __init__(
        self,
        port: int | str,
        ping: Callable[[], object],
        component: str = "component",
        host: str = "",
    ) -> None:
        self.host = host
        self.port = int(port)
        self.component = component
        self._ping = ping
        self._server: ThreadingHTTPServer | None = None
        self._thread: threading.Thread | None = None

    def start(self) -> HealthServer:
        """Bind the socket and start serving; ``port`` then holds the bound port."""
        if self._server is not None:
            raise RuntimeError(f"{self.component} health server already started")
        self._server = ThreadingHTTPServer((self.host, self.port), self._handler_class())
        self.port = self._server.server_address[1]
        self._thread = threading.Thread(
            target=self._server.serve_forever,
            name=f"{self.component}-health",
            daemon=True,
        )
        self._thread.start()
        logger.info("%s health server listening on %s:%d", self.component, self.host, self.port)
        return self

    def stop(self) -> None:
        """Stop serving and release the socket. Does nothing if not started."""
        if self._server is None:
            return
        self._server.shutdown()
        self._server.server_close()
        if self._thread is not None:
            self._thread.join()
        self._server = None
        self._thread = None

    def __enter__(self) -> HealthServer:
        return self.start()

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def _handler_class(self) -> type[BaseHTTPRequestHandler]:
        health = self

        class _Handler(BaseHTTPRequestHandler):
            def do_GET(self) -> None:
                health._respond(self)

            def log_message(self, format: str, *args: object) -> None:
                logger.debug("%s health: " + format, health.component, *args)

        return _Handler

    def _respond(self, request: BaseHTTPRequestHandler) -> None:
        path = urlsplit(request.path).path
        if path == "/healthz":
            self._write(request, 200, b"ok")
        elif path == "/readyz":
            try:
                self._ping()
            except Exception:
                logger.warning("%s readiness ping failed", self.component, exc_info=True)
                self._write(request, 503, b"db ping failed")
            else:
                self._write(request, 200, b"ready")
        else:
            self._write(request, 404, b"404 page not found\n")

    @staticmethod
    def _write(request: BaseHTTPRequestHandler, status: int, body: bytes) -> None:
        request.send_response(status)
        request.send_header("Content-Type", "text/plain; charset=utf-8")
        request.send_header("Content-Length", str(len(body)))
        request.end_headers()
        request.wfile.write(body)