"""httpx client wrapper with async context manager support."""

from typing import Any, Optional

import httpx

from src.utils.config import ServiceConfig
from src.utils.logging import get_correlation_id, get_structured_logger

logger = get_structured_logger(__name__)


class ServiceClient:
    """Async context manager around ``httpx.AsyncClient`` for one backing service.

    Non-2xx responses are returned, not raised; callers branch on status codes.
    Transport errors (timeouts, refused connections) propagate as ``httpx.HTTPError``.
    """

    # Replaced in tests with an httpx.MockTransport
    transport: Optional[httpx.AsyncBaseTransport] = None

    def __init__(self, base_url: str, timeout: Optional[float] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else ServiceConfig.HTTP_TIMEOUT_SECONDS
        self.client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> httpx.AsyncClient:
        headers = {"Content-Type": "application/json"}
        correlation_id = get_correlation_id()
        if correlation_id:
            headers["X-Correlation-ID"] = correlation_id

        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=headers,
            transport=self.transport,
        )
        return self.client

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            logger.error(
                "Service request error",
                base_url=self.base_url,
                error=str(exc_val),
                type=exc_type.__name__
            )
        if self.client is not None:
            await self.client.aclose()
            self.client = None
        return False


def leasing_service() -> ServiceClient:
    return ServiceClient(ServiceConfig.require("LEASING_SERVICE_URL"))


def economy_service() -> ServiceClient:
    return ServiceClient(ServiceConfig.require("ECONOMY_SERVICE_URL"))


def communication_service() -> ServiceClient:
    return ServiceClient(ServiceConfig.require("COMMUNICATION_SERVICE_URL"))


def content(response: httpx.Response) -> Any:
    """Unwrap the ``{"content": ...}`` envelope; None when absent or not JSON."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("content")
    return None
