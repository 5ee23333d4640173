from __future__ import annotations

import json
import logging
import re
import time
from http import HTTPStatus
from typing import Iterable, List, Optional

from ..config import normalize_prefix
from ..domain.errors import DecodeError, EncodeError, NotFoundError
from ..domain.models import decode_student, encode_student, encode_students
from ..ports.repositories import StudentRepository
from .http import Handler, HttpRequest, HttpResponse, RequestContext, Route


CONTENT_TYPE = "application/json"

access_logger = logging.getLogger("roster.access")
logger = logging.getLogger("roster.app")


def make_json_response(status: HTTPStatus | int, body: bytes) -> HttpResponse:
    headers = {
        "Content-Type": CONTENT_TYPE,
        "Content-Length": str(len(body)),
    }
    return HttpResponse(int(status), headers, body)


def text_error(status: HTTPStatus | int, message: str) -> HttpResponse:
    # Error bodies are plain text but still advertised as JSON.
    return make_json_response(status, message.encode())


def not_found() -> HttpResponse:
    return text_error(HTTPStatus.NOT_FOUND, "not found")


def user_not_found() -> HttpResponse:
    return text_error(HTTPStatus.NOT_FOUND, "user not found")


def internal_server_error() -> HttpResponse:
    return text_error(HTTPStatus.INTERNAL_SERVER_ERROR, "internal server error")


class AbstractHandler(Handler):
    def __init__(self) -> None:
        self._next: Optional[Handler] = None

    def set_next(self, handler: Handler) -> Handler:
        self._next = handler
        return handler

    def _handle_next(self, ctx: RequestContext) -> HttpResponse:
        if self._next is None:
            if ctx.response is None:
                ctx.response = internal_server_error()
            return ctx.response
        return self._next.handle(ctx)


class ErrorHandler(AbstractHandler):
    def handle(self, ctx: RequestContext) -> HttpResponse:  # noqa: D401
        try:
            return self._handle_next(ctx)
        except Exception:  # noqa: BLE001
            logger.exception("unhandled error for %s %s", ctx.request.method, ctx.request.path)
            ctx.response = internal_server_error()
            return ctx.response


class LoggingHandler(AbstractHandler):
    def handle(self, ctx: RequestContext) -> HttpResponse:  # noqa: D401
        start = time.time()
        response = self._handle_next(ctx)
        duration_ms = round((time.time() - start) * 1000, 1)
        entry = {
            "ts": int(time.time() * 1000),
            "method": ctx.request.method,
            "path": ctx.request.path,
            "status": int(response.status),
            "ms": duration_ms,
            "remote": ctx.request.client[0] if ctx.request.client else None,
        }
        access_logger.info(json.dumps(entry, separators=(",", ":")))
        return response


class RoutingHandler(AbstractHandler):
    """Selects the first route whose method and pattern both match."""

    def __init__(self, routes: Iterable[Route]) -> None:
        super().__init__()
        self._routes = list(routes)

    def handle(self, ctx: RequestContext) -> HttpResponse:  # noqa: D401
        for route in self._routes:
            if ctx.request.method not in route.methods:
                continue
            match = route.pattern.fullmatch(ctx.request.path)
            if match is None:
                continue
            ctx.route = route
            ctx.params = match.groupdict()
            return self._handle_next(ctx)
        ctx.response = not_found()
        return ctx.response


class DispatchHandler(AbstractHandler):
    def handle(self, ctx: RequestContext) -> HttpResponse:  # noqa: D401
        if ctx.route is None:
            ctx.response = not_found()
            return ctx.response
        try:
            response = ctx.route.handler(ctx)
        except NotFoundError:
            response = user_not_found()
        except DecodeError as exc:
            logger.info("rejected body for %s %s: %s", ctx.request.method, ctx.request.path, exc)
            response = internal_server_error()
        except EncodeError as exc:
            logger.error("could not encode response for %s: %s", ctx.request.path, exc)
            response = internal_server_error()
        ctx.response = response
        return response


class StudentHandlers:
    """Create, Get and List operations over a shared student repository.

    The repository lock is held only inside the repository calls, so encoding
    and writing the response never block other requests.
    """

    def __init__(self, repository: StudentRepository) -> None:
        self._repository = repository

    def get(self, ctx: RequestContext) -> HttpResponse:
        student = self._repository.get(ctx.params["id"])
        if student is None:
            raise NotFoundError("user not found")
        return make_json_response(HTTPStatus.OK, encode_student(student))

    def create(self, ctx: RequestContext) -> HttpResponse:
        student = decode_student(ctx.request.body)
        self._repository.put(student)
        return make_json_response(HTTPStatus.OK, encode_student(student))

    def list(self, ctx: RequestContext) -> HttpResponse:
        students = self._repository.list()
        return make_json_response(HTTPStatus.OK, encode_students(students))


class RequestProcessor:
    """Facade executed by the manual HTTP server."""

    def __init__(self, entry: Handler) -> None:
        self._entry = entry

    def handle(self, request: HttpRequest) -> HttpResponse:
        ctx = RequestContext(request=request)
        response = self._entry.handle(ctx)
        response.headers["Content-Type"] = CONTENT_TYPE
        response.ensure_content_length()
        return response


def build_routes(handlers: StudentHandlers, prefix: str = "/users") -> List[Route]:
    base = re.escape(normalize_prefix(prefix))
    # StudentHandlers.list has no route.
    return [
        Route("get_student", re.compile(rf"^{base}/(?P<id>\d+)$", re.ASCII), {"GET"}, handlers.get),
        Route("create_student", re.compile(rf"^{base}/*$"), {"POST"}, handlers.create),
    ]


def build_handler(repository: StudentRepository, prefix: str = "/users") -> RequestProcessor:
    handlers = StudentHandlers(repository)
    routes = build_routes(handlers, prefix)

    logging_handler = LoggingHandler()
    error_handler = ErrorHandler()
    routing_handler = RoutingHandler(routes)
    dispatch_handler = DispatchHandler()

    logging_handler.set_next(error_handler)
    error_handler.set_next(routing_handler)
    routing_handler.set_next(dispatch_handler)

    return RequestProcessor(logging_handler)


__all__ = [
    "build_handler",
    "build_routes",
    "RequestProcessor",
    "StudentHandlers",
]
