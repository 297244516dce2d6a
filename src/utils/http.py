"""Helpers shared by the serverless HTTP handlers."""

import asyncio
import json
import re
from http.server import BaseHTTPRequestHandler
from typing import Any, Awaitable, Callable, Optional
from urllib.parse import parse_qs, urlsplit

from src.models.results import ProcessFailure, ProcessResult
from src.utils.logging import correlation_context, get_structured_logger
from src.utils.logging_config import LoggingConfig

logger = get_structured_logger(__name__)


def send_json(request: BaseHTTPRequestHandler, status: int, body: dict) -> None:
    request.send_response(status)
    request.send_header('Content-Type', 'application/json')
    request.end_headers()
    request.wfile.write(json.dumps(body, default=str).encode('utf-8'))


def read_json_body(request: BaseHTTPRequestHandler) -> Any:
    """Parse the request body. Raises ValueError on malformed JSON."""
    content_length = int(request.headers.get('Content-Length', 0) or 0)
    raw_body = request.rfile.read(content_length).decode('utf-8') if content_length > 0 else ""
    return json.loads(raw_body) if raw_body else {}


def path_param(path: str, pattern: str, query_key: str) -> Optional[str]:
    """
    Extract an id from the request path, e.g. ``/api/offers/(?P<id>[^/]+)/accept``.

    Falls back to the ``query_key`` query parameter for rewritten routes.
    """
    parts = urlsplit(path or "")
    match = re.search(pattern, parts.path)
    if match:
        return match.group("id")
    values = parse_qs(parts.query).get(query_key)
    return values[0] if values else None


def parse_int_id(value: Optional[str]) -> Optional[int]:
    if value is None or not value.isdigit():
        return None
    return int(value)


def result_body(result: ProcessResult, correlation_id: str) -> dict:
    if isinstance(result, ProcessFailure):
        return {
            "error": result.error.value,
            "message": result.message,
            "correlation_id": correlation_id,
        }
    body = {
        "message": result.message,
        "data": result.data,
        "correlation_id": correlation_id,
    }
    if result.advisories:
        body["advisories"] = [a.model_dump() for a in result.advisories]
    return body


def respond_with_process(
    request: BaseHTTPRequestHandler,
    process: Callable[[], Awaitable[ProcessResult]],
) -> None:
    """Run a process in a fresh correlation context and write its result."""
    incoming = request.headers.get(LoggingConfig.LOG_CORRELATION_ID_HEADER) if request.headers else None
    with correlation_context(incoming) as correlation_id:
        try:
            result = asyncio.run(process())
        except Exception as e:
            logger.error("Unhandled error running process", exc_info=True, error=str(e))
            send_json(request, 500, {"error": "internal server error", "correlation_id": correlation_id})
            return
        send_json(request, result.http_status, result_body(result, correlation_id))


def bad_request(request: BaseHTTPRequestHandler, message: str) -> None:
    send_json(request, 400, {"error": "bad request", "message": message})
