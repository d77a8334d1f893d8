"""Asynchronous HTTP transport built on a pooled httpx client."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)

from ..config import (
    REQUEST_TIMEOUT,
    MAX_RETRIES,
    BACKOFF_FACTOR,
    RETRY_METHODS,
    RETRY_STATUS_CODES,
    USER_AGENT,
)
from .errors import TransportError, TransportTimeoutError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawResponse:
    """Status and undecoded body of a completed exchange."""

    status: int
    content: bytes
    reason: str = ''

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


def _last_outcome(retry_state):
    # Exhausted retries hand back the last response, or re-raise the last error.
    return retry_state.outcome.result()


class Transport:
    """Executes one HTTP exchange per call on the event loop.

    The whole exchange, including any opt-in retries, is bounded by
    ``timeout``. On expiry the pending socket I/O is cancelled.
    """

    def __init__(self, timeout: float = REQUEST_TIMEOUT, max_retries: int = MAX_RETRIES,
                 backoff_factor: float = BACKOFF_FACTOR,
                 client: Optional[httpx.AsyncClient] = None):
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self.client = client or self._create_client(timeout)

    @staticmethod
    def _create_client(timeout: float) -> httpx.AsyncClient:
        """Create an httpx client with the default headers and timeout."""
        return httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers={
                'Accept': 'application/json',
                'User-Agent': USER_AGENT,
            },
        )

    def _retrying(self, method: str) -> AsyncRetrying:
        attempts = self.max_retries + 1 if method.upper() in RETRY_METHODS else 1
        return AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=self.backoff_factor),
            retry=(retry_if_exception_type(TransportError)
                   | retry_if_result(lambda r: r.status in RETRY_STATUS_CODES)),
            retry_error_callback=_last_outcome,
        )

    async def _send_once(self, method: str, url: str, headers: dict,
                         body: Optional[bytes]) -> RawResponse:
        try:
            response = await self.client.request(
                method, url, headers=headers, content=body, timeout=self.timeout
            )
        except httpx.TimeoutException as e:
            raise TransportTimeoutError(
                f"{method} {url} timed out after {self.timeout}s", url=url, timeout=self.timeout
            ) from e
        except httpx.NetworkError as e:
            raise TransportError(f"Connection to {url} failed: {e}", url=url) from e
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {url} failed: {e}", url=url) from e

        return RawResponse(
            status=response.status_code,
            content=response.content,
            reason=response.reason_phrase or '',
        )

    async def send(self, method: str, url: str, headers: dict,
                   body: Optional[bytes] = None) -> RawResponse:
        """Send a request and wait for the complete response.

        Args:
            method: HTTP method (GET, POST, etc.)
            url: Fully qualified URL
            headers: Request headers, including Authorization
            body: Serialized request body

        Returns:
            The response status, reason and raw body

        Raises:
            TransportTimeoutError: If no full response arrived within the timeout
            TransportError: On connection, DNS or TLS failure
        """
        logger.debug(">> %s %s", method, url)
        if body:
            logger.debug("   Body: %s", body[:200].decode('utf-8', 'replace'))

        retrying = self._retrying(method)
        try:
            response = await asyncio.wait_for(
                retrying(self._send_once, method, url, headers, body),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise TransportTimeoutError(
                f"{method} {url} timed out after {self.timeout}s", url=url, timeout=self.timeout
            ) from e

        logger.debug("<< %s %s", response.status, response.reason)
        return response

    async def close(self):
        """Release pooled connections."""
        await self.client.aclose()
