from __future__ import annotations

"""Manual HTTP/1.1 server implemented directly over sockets.

One accept loop hands every connection to its own daemon thread; each
connection carries exactly one request and is closed after the response.
"""

import logging
import socket
import threading
from contextlib import suppress
from http import HTTPStatus
from typing import Protocol, Tuple
from urllib.parse import unquote, urlsplit

from .http import HttpRequest, HttpResponse

MAX_HEADER_BYTES = 16 * 1024
MAX_BODY_BYTES = 5 * 1024 * 1024
CONNECTION_TIMEOUT = 30.0
ACCEPT_POLL_INTERVAL = 0.5

logger = logging.getLogger("roster.server")


class RequestHandler(Protocol):
    def handle(self, request: HttpRequest) -> HttpResponse:
        """Process ``request`` and return an HTTP response."""


class HttpServer:
    """Blocking TCP server that delegates every parsed request to ``handler``."""

    def __init__(self, handler: RequestHandler, host: str, port: int) -> None:
        self._handler = handler
        self._stopped = threading.Event()
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self._sock.bind((host, port))
            self._sock.listen(128)
        except OSError:
            self._sock.close()
            raise
        self._sock.settimeout(ACCEPT_POLL_INTERVAL)

    @property
    def address(self) -> Tuple[str, int]:
        host, port = self._sock.getsockname()[:2]
        return host, port

    def serve_forever(self) -> None:
        host, port = self.address
        logger.info("listening on %s:%s", host, port)
        try:
            while not self._stopped.is_set():
                try:
                    conn, addr = self._sock.accept()
                except socket.timeout:
                    continue
                except OSError:
                    if self._stopped.is_set():
                        break
                    raise
                thread = threading.Thread(
                    target=_serve_connection,
                    args=(conn, addr, self._handler),
                    daemon=True,
                )
                thread.start()
        finally:
            self._sock.close()

    def shutdown(self) -> None:
        self._stopped.set()


def run_server(handler: RequestHandler, port: int, host: str = "localhost") -> None:
    """Start a blocking server on ``host:port`` until interrupted."""

    server = HttpServer(handler, host, port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("shutting down")
        server.shutdown()


def _serve_connection(conn: socket.socket, addr: Tuple[str, int], handler: RequestHandler) -> None:
    with conn:
        conn.settimeout(CONNECTION_TIMEOUT)
        try:
            request = _read_request(conn, addr)
            if request is None:
                return
        except ValueError as exc:
            logger.warning("malformed request from %s: %s", addr[0], exc)
            _send_simple_response(conn, HTTPStatus.BAD_REQUEST, "bad request")
            return
        except OSError as exc:
            logger.warning("failed reading request from %s: %s", addr[0], exc)
            return

        try:
            response = handler.handle(request)
        except Exception:  # noqa: BLE001
            logger.exception("unhandled error serving %s %s", request.method, request.path)
            response = HttpResponse(
                int(HTTPStatus.INTERNAL_SERVER_ERROR),
                {"Content-Type": "application/json"},
                b"internal server error",
            )

        try:
            _send_response(conn, request, response)
        except OSError as exc:
            logger.warning("failed sending response to %s: %s", addr[0], exc)


def _read_request(conn: socket.socket, addr: Tuple[str, int]) -> HttpRequest | None:
    buffer = bytearray()
    while b"\r\n\r\n" not in buffer:
        chunk = conn.recv(4096)
        if not chunk:
            return None
        buffer.extend(chunk)
        if len(buffer) > MAX_HEADER_BYTES and b"\r\n\r\n" not in buffer:
            raise ValueError("header section too large")

    header_part, body_part = buffer.split(b"\r\n\r\n", 1)
    lines = header_part.split(b"\r\n")
    request_line = lines[0].decode("iso-8859-1").strip()
    parts = request_line.split()
    if len(parts) != 3:
        raise ValueError("invalid request line")
    method, target, version = parts
    if version not in {"HTTP/1.1", "HTTP/1.0"}:
        raise ValueError("unsupported HTTP version")

    headers: dict[str, str] = {}
    for raw in lines[1:]:
        if not raw:
            continue
        if b":" not in raw:
            raise ValueError("invalid header")
        name, value = raw.split(b":", 1)
        headers[name.decode("ascii", "ignore").strip().lower()] = value.decode("iso-8859-1").strip()

    content_length = 0
    if "content-length" in headers:
        with suppress(ValueError):
            content_length = int(headers["content-length"]) if headers["content-length"] else 0
    content_length = max(0, min(content_length, MAX_BODY_BYTES))

    body = bytearray(body_part[:content_length])
    while len(body) < content_length:
        chunk = conn.recv(min(65536, content_length - len(body)))
        if not chunk:
            break
        body.extend(chunk)

    path = unquote(urlsplit(target).path) or "/"

    return HttpRequest(
        method=method,
        path=path,
        headers=headers,
        body=bytes(body),
        client=addr,
    )


def _send_response(conn: socket.socket, request: HttpRequest, response: HttpResponse) -> None:
    response.headers["Connection"] = "close"
    response.ensure_content_length()
    try:
        reason = HTTPStatus(response.status).phrase
    except ValueError:
        reason = "OK"
    status_line = f"HTTP/1.1 {int(response.status)} {reason}\r\n"
    header_lines = "".join(f"{name}: {value}\r\n" for name, value in response.headers.items())
    conn.sendall(status_line.encode("iso-8859-1"))
    conn.sendall(header_lines.encode("iso-8859-1"))
    conn.sendall(b"\r\n")
    if request.method != "HEAD" and response.body:
        conn.sendall(response.body)


def _send_simple_response(conn: socket.socket, status: HTTPStatus, message: str) -> None:
    payload = message.encode()
    status_line = f"HTTP/1.1 {int(status)} {status.phrase}\r\n"
    headers = (
        "Content-Type: application/json\r\n"
        f"Content-Length: {len(payload)}\r\n"
        "Connection: close\r\n"
    )
    with suppress(OSError):
        conn.sendall(status_line.encode("iso-8859-1"))
        conn.sendall(headers.encode("iso-8859-1"))
        conn.sendall(b"\r\n")
        conn.sendall(payload)


__all__ = ["HttpServer", "RequestHandler", "run_server"]
