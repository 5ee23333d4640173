from __future__ import annotations

"""Exercise a running roster instance over HTTP and report each exchange."""

import json
import os
import sys
import urllib.error
import urllib.request
from typing import Any, List, Optional, Tuple

Exchange = Tuple[str, str, Optional[int], str]


def _request(method: str, url: str, payload: Any = None, timeout: float = 5) -> Tuple[Optional[int], str]:
    body_bytes = None
    headers = {}
    if payload is not None:
        body_bytes = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
        headers["Content-Type"] = "application/json"
    request = urllib.request.Request(url, data=body_bytes, method=method, headers=headers)
    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            return response.status, response.read().decode()
    except urllib.error.HTTPError as err:
        return err.code, err.read().decode()
    except urllib.error.URLError as err:
        return None, str(err.reason)


def run(base_url: str, prefix: str = "/users") -> List[Exchange]:
    """Create, fetch and miss a record; return ``(method, url, status, body)`` tuples."""

    collection = base_url.rstrip("/") + prefix
    student = {"id": 42, "name": "alice", "age": 30}
    steps = [
        ("POST", collection, student),
        ("GET", f"{collection}/{student['id']}", None),
        ("GET", f"{collection}/999999", None),
        ("POST", collection, b"not-json"),
    ]
    results: List[Exchange] = []
    for method, url, payload in steps:
        status, body = _request(method, url, payload)
        results.append((method, url, status, body))
    return results


def main() -> None:
    base_url = os.environ.get("ROSTER_URL", "http://localhost:8080")
    prefix = os.environ.get("ROUTE_PREFIX", "/users")
    failed = False
    for method, url, status, body in run(base_url, prefix):
        print(f"[{method}] {url} -> {status} | {body}")
        if status is None:
            failed = True
    if failed:
        raise SystemExit("roster instance unreachable")


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        sys.exit(130)
