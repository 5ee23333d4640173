from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Pattern, Tuple


@dataclass(slots=True)
class HttpRequest:
    method: str
    path: str  # percent-decoded, query string removed
    headers: Dict[str, str]
    body: bytes
    client: Optional[Tuple[str, int]] = None


@dataclass(slots=True)
class HttpResponse:
    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    def ensure_content_length(self) -> None:
        self.headers.setdefault("Content-Length", str(len(self.body)))


class Handler:
    """One stage of the request pipeline."""

    def set_next(self, handler: "Handler") -> "Handler":
        raise NotImplementedError

    def handle(self, ctx: "RequestContext") -> HttpResponse:
        raise NotImplementedError


@dataclass(slots=True)
class RequestContext:
    request: HttpRequest
    response: Optional[HttpResponse] = None
    route: Optional["Route"] = None
    params: Dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class Route:
    name: str
    pattern: Pattern[str]
    methods: set[str]
    handler: Callable[[RequestContext], HttpResponse]
