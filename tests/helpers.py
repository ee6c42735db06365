"""
Shared fakes for StackExchange API tests.
"""

import gzip
import json
from typing import Any, Callable, List, Optional

import httpx


def gzip_json(payload: Any) -> bytes:
    return gzip.compress(json.dumps(payload).encode("utf-8"))


class FakeAPI:
    """Records requests and answers them from a handler."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []
        self._handler = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._handler(request)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))


def envelope_api(items: List[dict], status_code: int = 200, header_encoding: bool = False) -> FakeAPI:
    """API that always answers with a gzip-compressed {"items": [...]} envelope."""
    headers = {"Content-Encoding": "gzip"} if header_encoding else None

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, content=gzip_json({"items": items}), headers=headers)

    return FakeAPI(handler)


def raw_api(content: bytes, status_code: int = 200, headers: Optional[dict] = None) -> FakeAPI:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, content=content, headers=headers)

    return FakeAPI(handler)


SITES = [
    {"api_site_parameter": "stackoverflow", "site_url": "https://stackoverflow.com"},
    {"api_site_parameter": "superuser", "site_url": "https://superuser.com"},
    {"api_site_parameter": "unix", "site_url": "https://unix.stackexchange.com"},
]
