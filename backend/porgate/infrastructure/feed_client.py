"""Resilient Reserve Feed Client: reads proof-of-reserves answers over HTTP.

Invariants:
    - Call-only: a single GET per attempt, never a mutating request
    - Rate limits (429): backoff respecting Retry-After
    - Transient errors (5xx, connection, timeout): max N retries with exponential backoff
    - Client errors (4xx except 429): immediate failure, no retry
    - Malformed payloads fail closed: FeedUnavailableError, never a default reading
    - A null/absent answer is passed through as value=None (core treats it as invalid)
    - Non-integer answers (true, 1.5, "abc") are malformed: FeedUnavailableError
    - All failures mapped to FeedUnavailableError (core/errors.py)

Design Decisions:
    - Wrapper over raw httpx client: isolates retry logic from the guard (ADR: single responsibility)
    - ±25% jitter on backoff: prevents thundering herd when many gates share a feed host
    - One shared AsyncClient per process, adapters are cheap per-feed views over it
"""

import asyncio
import logging
import random
import re

import httpx
from pydantic import BaseModel, Field, StrictInt, ValidationError, field_validator

from porgate.core.domain_types import FeedReading, FeedRef
from porgate.core.errors import ErrorContext, FeedUnavailableError

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"-?[0-9]{1,80}")


class FeedPayload(BaseModel):
    """Wire shape of a reserve feed answer.

    Strict integers only: booleans and floats are malformed, never coerced.
    A decimal-digit string is accepted for answer ("1250" -> 1250).
    """
    answer: StrictInt | None = None
    decimals: StrictInt = Field(ge=0, le=77)
    updated_at: StrictInt = Field(ge=0)

    @field_validator("answer", mode="before")
    @classmethod
    def parse_digit_string(cls, v: object) -> object:
        if isinstance(v, str) and _DIGITS.fullmatch(v.strip()):
            return int(v.strip())
        return v


class HttpFeedAdapter:
    """FeedAdapter over an HTTP JSON endpoint, with retry and error mapping."""

    def __init__(
        self,
        feed: FeedRef,
        client: httpx.AsyncClient,
        max_retries: int = 3,
        base_delay_ms: int = 250,
        max_delay_ms: int = 5_000,
    ):
        self.feed = feed
        self.client = client
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms

    async def latest_reading(self) -> FeedReading:
        """Fetch the latest reading with automatic retry on transient failures."""
        context = ErrorContext(feed=self.feed)
        for attempt in range(self.max_retries + 1):
            try:
                response = await self.client.get(self.feed)
                response.raise_for_status()
                reading = self._parse(response, context)
                logger.info(
                    "Reserve feed read",
                    extra={"feed": self.feed, "attempt": attempt + 1},
                )
                return reading

            except httpx.HTTPStatusError as e:
                status_code = e.response.status_code
                if status_code == 429:
                    await self._handle_rate_limit(e, attempt, context)
                elif status_code >= 500:
                    await self._handle_transient_error(e, attempt, context)
                else:
                    raise FeedUnavailableError(
                        f"HTTP {status_code}", "client_error", context=context,
                    )

            except httpx.TransportError as e:
                await self._handle_transient_error(e, attempt, context)

        raise FeedUnavailableError(  # pragma: no cover
            "retries exhausted", "connection_error", context=context,
        )

    def _parse(self, response: httpx.Response, context: ErrorContext) -> FeedReading:
        try:
            payload = FeedPayload.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise FeedUnavailableError(
                f"malformed payload: {e}", "malformed", context=context,
            )
        return FeedReading(
            value=payload.answer,
            decimals=payload.decimals,
            observed_at=payload.updated_at,
        )

    async def _handle_rate_limit(
        self, e: httpx.HTTPStatusError, attempt: int, context: ErrorContext,
    ) -> None:
        """Handle rate limit error with retry or raise."""
        retry_after_ms = self._extract_retry_after(e.response)
        if attempt >= self.max_retries:
            raise FeedUnavailableError(
                "Rate limit exceeded after retries",
                "rate_limit",
                retry_after_ms=retry_after_ms,
                context=context,
            )
        delay = retry_after_ms or self._backoff(attempt)
        logger.warning(
            f"Feed rate limit hit, retry after {delay}ms (attempt {attempt + 1})",
            extra={"feed": self.feed, "attempt": attempt + 1},
        )
        await asyncio.sleep(delay / 1000)

    async def _handle_transient_error(
        self, e: Exception, attempt: int, context: ErrorContext,
    ) -> None:
        """Handle transient errors with retry or raise."""
        if attempt >= self.max_retries:
            raise FeedUnavailableError(
                f"Transient failure after {self.max_retries} retries: {e}",
                "connection_error",
                context=context,
            )
        delay = self._backoff(attempt)
        logger.warning(
            f"Transient feed error, retry after {delay}ms: {e}",
            extra={"feed": self.feed, "attempt": attempt + 1},
        )
        await asyncio.sleep(delay / 1000)

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter."""
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311

    def _extract_retry_after(self, response: httpx.Response) -> int | None:
        """Extract Retry-After header (returns milliseconds)."""
        val = response.headers.get("retry-after")
        if val and val.isdigit():
            return int(val) * 1000
        return None


class HttpFeedAdapterFactory:
    """Builds HttpFeedAdapter instances sharing one AsyncClient."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        max_retries: int = 3,
        base_delay_ms: int = 250,
        max_delay_ms: int = 5_000,
    ):
        self.client = client
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms

    def __call__(self, feed: FeedRef) -> HttpFeedAdapter:
        return HttpFeedAdapter(
            feed, self.client,
            max_retries=self.max_retries,
            base_delay_ms=self.base_delay_ms,
            max_delay_ms=self.max_delay_ms,
        )
