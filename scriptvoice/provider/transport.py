"""Retry/backoff transport for provider HTTP calls.

Responsibilities:
- Absorb HTTP 429 rate limiting with `Retry-After`-aware, jittered backoff.
- Retry network-level failures with exponential backoff.
- Return every other response untouched; 4xx/5xx handling belongs to callers.
"""

from __future__ import annotations

import math
import random
import time
from typing import Any, Callable

import requests
from loguru import logger

from ..errors import RateLimitedError, TransportError

RATE_LIMIT_STATUS = 429
BACKOFF_MULTIPLIER = 1.5


def retry_after_seconds(response: requests.Response) -> float | None:
    """Return a positive `Retry-After` delay in seconds, or `None` when absent/unusable."""

    raw = response.headers.get("Retry-After")
    if raw is None:
        return None
    try:
        seconds = float(raw.strip())
    except ValueError:
        return None
    if not math.isfinite(seconds) or seconds <= 0:
        return None
    return seconds


class ResilientTransport:
    """Issue HTTP requests with bounded retries for rate limits and network faults."""

    def __init__(
        self,
        *,
        max_retries: int = 5,
        initial_backoff_seconds: float = 0.5,
        max_jitter_seconds: float = 0.25,
        session: requests.Session | None = None,
        sleeper: Callable[[float], None] = time.sleep,
        jitter: Callable[[float, float], float] = random.uniform,
    ) -> None:
        """Initialize retry budget, backoff schedule, and injectable side effects."""

        if max_retries <= 0:
            raise ValueError("`max_retries` must be a positive integer.")
        self.max_retries = max_retries
        self.initial_backoff_seconds = initial_backoff_seconds
        self.max_jitter_seconds = max_jitter_seconds
        self.session = session if session is not None else requests.Session()
        self.sleeper = sleeper
        self.jitter = jitter
        self.retry_attempt_count = 0

    def request_with_retry(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """Send one request, retrying 429 responses and transport failures.

        Returns:
            The first non-429 response, or the last 429 response once the retry
            budget is spent.

        Raises:
            TransportError: When the final attempt fails at the network level.
        """

        backoff = self.initial_backoff_seconds
        attempt = 0
        while True:
            attempt += 1
            is_last_attempt = attempt >= self.max_retries
            try:
                return self._send(method, url, **kwargs)
            except RateLimitedError as exc:
                if is_last_attempt:
                    logger.warning("Rate limit persisted after {} attempts.", self.max_retries)
                    return exc.response
                server_delay = retry_after_seconds(exc.response)
                base_delay = server_delay if server_delay is not None else backoff
                wait_seconds = base_delay + self.jitter(0.0, self.max_jitter_seconds)
                logger.warning(
                    "Rate limit hit. Retrying after {}ms...",
                    round(wait_seconds * 1000),
                )
                self._wait(wait_seconds)
            except requests.RequestException as exc:
                if is_last_attempt:
                    raise TransportError(
                        f"Request to {url} failed after {self.max_retries} attempts: {exc}",
                        hint="Check network connectivity and retry.",
                    ) from exc
                logger.warning(
                    "Network error on attempt {}/{} ({}). Retrying after {}ms...",
                    attempt,
                    self.max_retries,
                    type(exc).__name__,
                    round(backoff * 1000),
                )
                self._wait(backoff)
            backoff *= BACKOFF_MULTIPLIER

    def _send(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        response = self.session.request(method, url, **kwargs)
        if response.status_code == RATE_LIMIT_STATUS:
            raise RateLimitedError(f"Rate limited by {url}.", response)
        return response

    def _wait(self, seconds: float) -> None:
        self.retry_attempt_count += 1
        self.sleeper(seconds)
