"""
HTTP fetcher for the Akka HTTP Management members endpoint.
One GET per call, bounded by a total deadline; no retries.
"""
from __future__ import annotations

import socket
import threading
import time
from types import TracebackType
from urllib.parse import urlparse

import requests
from requests.adapters import HTTPAdapter

from errors import ConfigurationError, TransportError, UnsupportedSchemeError, UpstreamStatusError

SUPPORTED_SCHEMES = ("http", "https")
CHUNK_SIZE = 8192


class ResponseStream:
    """
    Closeable body of a successful response.

    ``read()`` must finish before ``deadline`` (a ``time.monotonic()`` value).
    A watchdog shuts the socket down when it passes, so a slow upstream
    cannot stretch one read past the configured timeout.
    """

    def __init__(self, response: requests.Response, deadline: float) -> None:
        self._response = response
        self._deadline = deadline
        self._expired = threading.Event()

    def read(self) -> bytes:
        """Read the whole body. Raises TransportError on a broken connection or an expired deadline."""
        remaining = self._deadline - time.monotonic()
        if remaining <= 0:
            raise TransportError("deadline exceeded before reading response body")
        watchdog = threading.Timer(remaining, self._expire)
        watchdog.daemon = True
        watchdog.start()
        try:
            body = b"".join(self._response.iter_content(CHUNK_SIZE))
        except (requests.RequestException, OSError) as e:
            if self._expired.is_set():
                raise TransportError("deadline exceeded while reading response body") from e
            raise TransportError(f"reading response body: {e}") from e
        finally:
            watchdog.cancel()
        if self._expired.is_set():
            raise TransportError("deadline exceeded while reading response body")
        return body

    def _expire(self) -> None:
        self._expired.set()
        conn = getattr(self._response.raw, "connection", None)
        sock = getattr(conn, "sock", None)
        if sock is None:
            return
        try:
            # Wakes a recv blocked in the reading thread.
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass

    def close(self) -> None:
        self._response.close()

    def __enter__(self) -> ResponseStream:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class HttpFetcher:
    """Fetches the configured URI; ``timeout`` (seconds) bounds the whole request."""

    def __init__(self, uri: str, timeout: float = 5.0) -> None:
        try:
            parsed = urlparse(uri)
        except ValueError as e:
            raise ConfigurationError(f"invalid scrape URI {uri!r}: {e}") from e
        if parsed.scheme not in SUPPORTED_SCHEMES:
            raise UnsupportedSchemeError(parsed.scheme)
        if timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {timeout!r}")
        self.uri = uri
        self.timeout = timeout
        self._session = requests.Session()
        adapter = HTTPAdapter(max_retries=0)
        self._session.mount("http://", adapter)
        self._session.mount("https://", adapter)

    def fetch(self) -> ResponseStream:
        """GET the URI. The caller must close the returned stream."""
        deadline = time.monotonic() + self.timeout
        try:
            resp = self._session.get(self.uri, timeout=self.timeout, stream=True)
        except requests.RequestException as e:
            raise TransportError(str(e)) from e
        if not (200 <= resp.status_code < 300):
            resp.close()
            raise UpstreamStatusError(resp.status_code)
        if time.monotonic() >= deadline:
            resp.close()
            raise TransportError("deadline exceeded waiting for response headers")
        return ResponseStream(resp, deadline)

    def close(self) -> None:
        self._session.close()

    def __repr__(self) -> str:
        return f"HttpFetcher(uri={self.uri!r}, timeout={self.timeout!r})"
