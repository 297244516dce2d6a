"""Test helper functions."""

import json
from io import BytesIO
from typing import Any, Optional
from unittest.mock import Mock

import httpx


class MockSocket:
    """Socket whose request stream is empty, so constructing a handler does not dispatch."""

    def makefile(self, *args, **kwargs):
        return BytesIO(b"")

    def sendall(self, data):
        pass

    def close(self):
        pass


def make_handler(handler_cls, path: str, body: Any = None, headers: Optional[dict] = None):
    """Build a serverless handler ready for ``do_GET``/``do_POST`` with mocked response methods."""
    raw = b""
    if body is not None:
        raw = (body if isinstance(body, str) else json.dumps(body)).encode("utf-8")

    h = handler_cls(MockSocket(), ("127.0.0.1", 8000), None)
    h.path = path
    h.headers = {"Content-Length": str(len(raw)), **(headers or {})}
    h.rfile = BytesIO(raw)
    h.wfile = BytesIO()
    h.send_response = Mock()
    h.send_header = Mock()
    h.end_headers = Mock()
    return h


def response_of(h) -> tuple[int, dict]:
    """Status code and decoded JSON body written by a handler."""
    h.wfile.seek(0)
    return h.send_response.call_args[0][0], json.loads(h.wfile.read().decode("utf-8"))


def content_response(content: Any, status_code: int = 200) -> httpx.Response:
    """Leasing-style ``{"content": ...}`` reply."""
    return httpx.Response(status_code, json={"content": content})
