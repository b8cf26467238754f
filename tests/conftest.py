"""Shared fixtures: a local management endpoint stand-in."""
from __future__ import annotations

import socket
import sys
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))


class _MembersHandler(BaseHTTPRequestHandler):
    def do_GET(self) -> None:
        status, body, delay = self.server.reply
        self.server.hits += 1
        if delay:
            time.sleep(delay)
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format: str, *args: object) -> None:
        pass


class Upstream:
    def __init__(self, server: ThreadingHTTPServer) -> None:
        self._server = server

    @property
    def url(self) -> str:
        host, port = self._server.server_address[:2]
        return f"http://{host}:{port}/members"

    @property
    def hits(self) -> int:
        return self._server.hits

    def reply(self, body: str | bytes, status: int = 200, delay: float = 0.0) -> None:
        if isinstance(body, str):
            body = body.encode("utf-8")
        self._server.reply = (status, body, delay)


@pytest.fixture
def upstream():
    server = ThreadingHTTPServer(("127.0.0.1", 0), _MembersHandler)
    server.daemon_threads = True
    server.reply = (200, b'{"members": []}', 0.0)
    server.hits = 0
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield Upstream(server)
    server.shutdown()
    server.server_close()


@pytest.fixture
def refused_url() -> str:
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return f"http://127.0.0.1:{port}/members"


class _DripServer:
    """Answers 200 with a Content-Length, then sends the body one byte at a time."""

    def __init__(self, body: bytes, interval: float) -> None:
        self.body = body
        self.interval = interval
        self._stop = threading.Event()
        self._listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._listener.bind(("127.0.0.1", 0))
        self._listener.listen(8)
        self._listener.settimeout(0.1)
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    @property
    def url(self) -> str:
        host, port = self._listener.getsockname()
        return f"http://{host}:{port}/members"

    def _serve(self) -> None:
        while not self._stop.is_set():
            try:
                conn, _ = self._listener.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            threading.Thread(target=self._drip, args=(conn,), daemon=True).start()

    def _drip(self, conn: socket.socket) -> None:
        with conn:
            try:
                conn.recv(65536)
                conn.sendall(
                    b"HTTP/1.1 200 OK\r\nContent-Type: application/json\r\n"
                    + f"Content-Length: {len(self.body)}\r\n\r\n".encode()
                )
                for i in range(len(self.body)):
                    if self._stop.wait(self.interval):
                        return
                    conn.sendall(self.body[i:i + 1])
            except OSError:
                return

    def close(self) -> None:
        self._stop.set()
        self._listener.close()


@pytest.fixture
def drip_upstream():
    server = _DripServer(b'{"members":[{"status":"Up"},{"status":"Down"}]}', interval=0.3)
    yield server
    server.close()
