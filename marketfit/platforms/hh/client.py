"""Resilient JSON fetch client: hard timeout, retry with backoff, cache-aside reads.

Retry policy:
  - 429 and 5xx responses are retried while attempts remain; a Retry-After
    header (seconds) wins over the computed backoff.
  - Backoff is ``min(cap, base * 2**attempt)`` (400ms, 800ms, ... capped at 3s).
  - Network errors and timeouts are retried the same way, then re-raised.
  - Any other status is returned unchanged; the caller decides.
"""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
)

from marketfit.core.cache import TTLCache
from marketfit.core.config import HttpConfig
from marketfit.core.errors import UpstreamError

logger = logging.getLogger(__name__)

RETRYABLE_EXCEPTIONS: tuple[type[BaseException], ...] = (httpx.TransportError, TimeoutError)


class FetchResult(BaseModel):
    """Outcome of one HTTP exchange (after retries)."""

    model_config = ConfigDict(frozen=True)

    ok: bool
    status: int
    data: Any = None
    retry_after_s: float = 0.0
    attempts: int = 1

    @property
    def is_retryable(self) -> bool:
        return self.status == 429 or 500 <= self.status < 600


class JsonFetcher:
    """Async JSON client over an injected ``httpx.AsyncClient``.

    Usage::

        async with httpx.AsyncClient() as http:
            fetcher = JsonFetcher(http, cache, HttpConfig())
            page = await fetcher.get_json_cached("https://api.hh.ru/vacancies?text=qa")
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        cache: TTLCache | None,
        config: HttpConfig,
        *,
        headers: dict[str, str] | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self._cache = cache
        self._config = config
        self._headers = dict(headers or {})
        self._sleep = sleep

    @property
    def timeout_s(self) -> float:
        return self._config.fetch_timeout_ms / 1000

    async def fetch_json(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: dict[str, str] | None = None,
        body: Any = None,
        retries: int | None = None,
    ) -> FetchResult:
        """Perform a request under the timeout/retry policy.

        Raises the last network exception once retries are exhausted.
        """
        budget = self._config.retries if retries is None else max(0, retries)
        merged = {**self._headers, **(headers or {})}

        retrying = AsyncRetrying(
            stop=stop_after_attempt(budget + 1),
            wait=self._wait,
            retry=(
                retry_if_result(lambda r: r.is_retryable)
                | retry_if_exception_type(RETRYABLE_EXCEPTIONS)
            ),
            sleep=self._sleep,
            before_sleep=_log_retry,
            retry_error_callback=_last_outcome,
        )
        result: FetchResult = await retrying(self._attempt, method, url, merged, body)
        return result.model_copy(update={"attempts": retrying.statistics.get("attempt_number", 1)})

    async def get_json_cached(self, url: str) -> Any:
        """Cache-aside GET. Non-2xx raises UpstreamError and is never cached.

        Only decoded JSON objects and arrays are stored; anything else is
        returned once and fetched again next time.
        """
        if self._cache is not None:
            hit = self._cache.get(url)
            if hit is not None:
                logger.debug("Cache hit: %s", url)
                return hit

        result = await self.fetch_json(url)
        if not result.ok:
            raise UpstreamError(result.status, url)

        if self._cache is not None and isinstance(result.data, dict | list):
            self._cache.set(url, result.data)
        return result.data

    async def _attempt(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: Any,
    ) -> FetchResult:
        request = self._client.request(
            method,
            url,
            headers=headers,
            content=_encode_body(body),
            timeout=self.timeout_s,
        )
        # wait_for cancels the in-flight request when the deadline passes
        response = await asyncio.wait_for(request, timeout=self.timeout_s)
        return FetchResult(
            ok=response.is_success,
            status=response.status_code,
            data=_decode(response),
            retry_after_s=_retry_after(response),
        )

    def _wait(self, state: RetryCallState) -> float:
        outcome = state.outcome
        if outcome is not None and not outcome.failed:
            hinted = outcome.result().retry_after_s
            if hinted > 0:
                return hinted
        attempt = state.attempt_number - 1
        delay_ms = min(self._config.backoff_cap_ms, self._config.backoff_base_ms * 2**attempt)
        return delay_ms / 1000


def _encode_body(body: Any) -> bytes | str | None:
    if body is None or isinstance(body, bytes | str):
        return body
    return json.dumps(body)


def _decode(response: httpx.Response) -> Any:
    text = response.text
    if "application/json" not in response.headers.get("content-type", ""):
        return text
    if not text:
        return None
    try:
        return response.json()
    except ValueError:
        logger.warning("Malformed JSON from %s", response.request.url)
        return None


def _retry_after(response: httpx.Response) -> float:
    raw = response.headers.get("retry-after", "")
    try:
        return max(0.0, float(raw))
    except ValueError:
        return 0.0


def _log_retry(state: RetryCallState) -> None:
    outcome = state.outcome
    if outcome is None:
        return
    if outcome.failed:
        reason = repr(outcome.exception())
    else:
        reason = f"HTTP {outcome.result().status}"
    logger.warning(
        "Retrying %s (attempt %d failed: %s), sleeping %.2fs",
        state.args[1] if len(state.args) > 1 else "request",
        state.attempt_number,
        reason,
        state.next_action.sleep if state.next_action else 0.0,
    )


def _last_outcome(state: RetryCallState) -> FetchResult:
    # Re-raises the final exception, or hands back the last retryable response.
    if state.outcome is None:
        msg = "Retry finished without an outcome"
        raise RuntimeError(msg)
    return state.outcome.result()  # type: ignore[no-any-return]
