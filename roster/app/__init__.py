from .handlers import RequestProcessor, StudentHandlers, build_handler
from .http import HttpRequest, HttpResponse, RequestContext, Route
from .server import HttpServer, run_server

__all__ = [
    "HttpRequest",
    "HttpResponse",
    "HttpServer",
    "RequestContext",
    "RequestProcessor",
    "Route",
    "StudentHandlers",
    "build_handler",
    "run_server",
]
