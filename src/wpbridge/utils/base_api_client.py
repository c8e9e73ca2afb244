"""
Base API Client - Shared request handling with deduplication, rate limiting and retry logic.
All REST services should inherit from this and call _core_async_request.
"""

import asyncio
import json
import os
import random
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import aiohttp

from wpbridge.utils.get_logger import get_logger
from wpbridge.utils.rate_limiter import get_rate_limiter, origin_of

logger = get_logger(__name__)

# Rate limiting is disabled for unit tests (mocked API calls)
_SKIP_RATE_LIMITING = os.getenv("ENVIRONMENT", "").lower() == "test"

SUPPORTED_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")


@dataclass
class APIResponse:
    """Decoded upstream response. Header names are lower-cased."""

    data: Any
    status: int
    reason: str = ""
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def header(self, name: str, default: str | None = None) -> str | None:
        return self.headers.get(name.lower(), default)


class NoOpRateLimiter:
    async def __aenter__(self) -> Any:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        return None


async def _read_body(response: aiohttp.ClientResponse) -> Any:
    """Parse a JSON body; empty or non-JSON bodies decode to None."""
    try:
        return await response.json(content_type=None)
    except (aiohttp.ContentTypeError, ValueError):
        return None


def _normalize_headers(headers: Mapping[str, str] | None) -> dict[str, str]:
    if not headers:
        return {}
    return {str(k).lower(): str(v) for k, v in headers.items()}


class BaseAPIClient:
    """
    Base class for API clients with shared request handling.
    Provides deduplication of concurrent GETs, rate limiting and bounded retries.
    """

    # Request deduplication: pending GETs keyed by loop + request signature
    _pending_requests: dict[str, asyncio.Task] = {}

    def _get_rate_limiter(self, url: str, rate_limit_max: int | None, rate_limit_period: float) -> Any:
        if _SKIP_RATE_LIMITING or not rate_limit_max:
            return NoOpRateLimiter()
        return get_rate_limiter(rate_limit_max, rate_limit_period, origin=origin_of(url))

    async def _core_async_request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, Any] | None = None,
        json_body: Any = None,
        timeout: int = 30,
        max_retries: int = 1,
        rate_limit_max: int | None = None,
        rate_limit_period: float = 1.0,
    ) -> APIResponse:
        """
        Core async HTTP request.

        This method handles:
        - Request deduplication: concurrent identical GETs share one upstream call
        - Rate limiting: coordinates requests to stay within limits
        - Retry logic: exponential backoff with jitter for 429, 5xx and network errors,
          bounded by max_retries (1 means a single attempt)

        Args:
            method: HTTP method
            url: Full URL to request
            params: Optional query parameters
            headers: Optional HTTP headers
            json_body: Optional JSON body (POST/PUT/PATCH)
            timeout: Request timeout in seconds (default: 30)
            max_retries: Maximum attempts (default: 1)
            rate_limit_max: Maximum requests per period, None disables limiting
            rate_limit_period: Time period in seconds (default: 1.0)

        Returns:
            APIResponse. Non-2xx statuses are returned, not raised.

        Raises:
            aiohttp.ClientError / TimeoutError once attempts are exhausted.
        """
        method = method.upper()
        if method not in SUPPORTED_METHODS:
            raise ValueError(f"Unsupported HTTP method: {method}")

        if method != "GET":
            return await self._send_with_retries(
                method, url, params, headers, json_body, timeout, max_retries,
                rate_limit_max, rate_limit_period,
            )

        params_str = json.dumps(params, sort_keys=True) if params else "{}"
        headers_str = json.dumps(headers, sort_keys=True) if headers else "{}"
        loop_id = id(asyncio.get_running_loop())
        request_key = f"{loop_id}|GET|{url}|{params_str}|{headers_str}"

        pending_task = self._pending_requests.get(request_key)
        if pending_task is None:
            pending_task = asyncio.create_task(
                self._send_with_retries(
                    method, url, params, headers, None, timeout, max_retries,
                    rate_limit_max, rate_limit_period,
                )
            )
            self._pending_requests[request_key] = pending_task
            pending_task.add_done_callback(
                lambda _task: self._pending_requests.pop(request_key, None)
            )

        return await asyncio.shield(pending_task)

    async def _send_with_retries(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None,
        headers: dict[str, Any] | None,
        json_body: Any,
        timeout: int,
        max_retries: int,
        rate_limit_max: int | None,
        rate_limit_period: float,
    ) -> APIResponse:
        request_timeout = aiohttp.ClientTimeout(total=timeout)
        rate_limiter = self._get_rate_limiter(url, rate_limit_max, rate_limit_period)
        attempts = max(1, max_retries)
        attempt = 0

        while True:
            attempt += 1
            is_last_attempt = attempt >= attempts
            try:
                async with (
                    rate_limiter,
                    aiohttp.ClientSession() as session,
                    session.request(
                        method,
                        url,
                        params=params,
                        headers=headers,
                        json=json_body,
                        timeout=request_timeout,
                    ) as response,
                ):
                    status = response.status
                    result = APIResponse(
                        data=await _read_body(response),
                        status=status,
                        reason=response.reason or "",
                        headers=_normalize_headers(response.headers),
                    )
            except asyncio.CancelledError:
                raise
            except (TimeoutError, aiohttp.ClientError) as e:
                if is_last_attempt:
                    logger.error(f"Error making {method} request to {url} after {attempt} attempt(s): {e}")
                    raise
                backoff_time = 2 ** (attempt - 1)
                logger.warning(
                    f"{method} request to {url} failed (attempt {attempt}/{attempts}): {e}. "
                    f"Retrying in {backoff_time}s..."
                )
                await asyncio.sleep(backoff_time)
                continue

            if result.ok:
                return result

            if status == 404:
                logger.debug(f"API returned status {status} for {url} (resource not found)")
            else:
                logger.warning(f"API returned status {status} for {url}")

            retryable = status == 429 or status >= 500
            if not retryable or is_last_attempt:
                return result

            if status == 429:
                retry_after = result.header("Retry-After", "2") or "2"
                wait_time = (int(retry_after) if retry_after.isdigit() else 2) + random.uniform(0.1, 0.5)
            else:
                wait_time = 2 ** (attempt - 1)
            await asyncio.sleep(wait_time)
