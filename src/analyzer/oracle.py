"""AnalysisOracle: cached, rate-limited access to the LLM."""

import json
import logging
import threading
import time
from concurrent.futures import CancelledError, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .adapter import LLMAdapter
from .cache import AnalysisCache, make_cache_key
from .exceptions import LLMResponseError, OracleError, OracleTimeoutError, RateLimitExceeded
from .models import Message, MessageRole
from .prompts import SYSTEM_PROMPT
from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

_QUEUE_POLL_INTERVAL = 0.05


@dataclass
class ServiceStats:
    """Operational counters exposed to monitoring endpoints."""

    cache_size: int
    recent_request_count: int
    rate_limit_status: str
    total_requests: int = 0
    cache_hits: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "cacheSize": self.cache_size,
            "recentRequestCount": self.recent_request_count,
            "rateLimitStatus": self.rate_limit_status,
            "totalRequests": self.total_requests,
            "cacheHits": self.cache_hits,
        }


def parse_json_object(response: str) -> dict[str, Any]:
    """Parse model output that must be exactly one JSON object.

    No fence stripping or prose recovery is attempted.

    Raises:
        LLMResponseError: If the text is not a JSON object.
    """
    try:
        data = json.loads(response)
    except (json.JSONDecodeError, TypeError) as e:
        raise LLMResponseError(
            f"Failed to parse LLM response as JSON: {e}",
            raw_response=response,
        ) from e
    if not isinstance(data, dict):
        raise LLMResponseError(
            f"Expected a JSON object, got {type(data).__name__}",
            raw_response=response,
        )
    return data


class AnalysisOracle:
    """Wraps single prompt-in/text-out model calls.

    Order of operations for generate():
        1. Cache lookup; a live hit is returned without touching the limiter.
        2. Rate-limiter admission; denial raises RateLimitExceeded.
        3. Model call bounded by a per-request timeout; the raw text is cached.

    The per-request timeout starts when a worker picks the call up, so
    calls queued behind a full pool are delayed, not failed. It abandons
    the waiting caller, not the worker thread; a late response from an
    abandoned call is discarded.

    Example usage:
        oracle = AnalysisOracle(OpenAIAdapter())
        text = oracle.generate(prompt, "summary")
        data = parse_json_object(text)
    """

    def __init__(
        self,
        adapter: LLMAdapter,
        cache: Optional[AnalysisCache] = None,
        rate_limiter: Optional[RateLimiter] = None,
        timeout: float = 15.0,
        cleanup_interval: float = 600.0,
        max_workers: int = 16,
        temperature: float = 0.0,
        max_tokens: int = 1024,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the oracle.

        Args:
            adapter: LLM adapter used for real model calls.
            cache: Response cache. None disables caching.
            rate_limiter: Admission controller. Defaults to 60 calls/minute.
            timeout: Per-request deadline in seconds.
            cleanup_interval: Seconds between periodic cache cleanups.
            max_workers: Threads available for in-flight model calls.
            temperature: Sampling temperature passed to the adapter.
            max_tokens: Response token cap passed to the adapter.
            clock: Monotonic time source (injectable for tests).
        """
        self._adapter = adapter
        self._cache = cache
        self._rate_limiter = rate_limiter or RateLimiter()
        self._timeout = timeout
        self._cleanup_interval = cleanup_interval
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._clock = clock
        self._max_workers = max_workers
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="oracle")
        self._last_cleanup = clock()
        self._counter_lock = threading.Lock()
        self._total_requests = 0
        self._cache_hits = 0
        logger.debug("AnalysisOracle using %r, timeout %.1fs", adapter, timeout)

    def _maybe_cleanup(self) -> None:
        if self._cache is None:
            return
        now = self._clock()
        with self._counter_lock:
            if now - self._last_cleanup < self._cleanup_interval:
                return
            self._last_cleanup = now
        self._cache.cleanup()

    def _build_messages(self, prompt: str) -> list[Message]:
        return [
            Message(role=MessageRole.SYSTEM, content=SYSTEM_PROMPT),
            Message(role=MessageRole.USER, content=prompt),
        ]

    def _invoke(self, prompt: str) -> str:
        messages = self._build_messages(prompt)
        started = threading.Event()

        def call() -> str:
            started.set()
            return self._adapter.complete(
                messages=messages,
                temperature=self._temperature,
                max_tokens=self._max_tokens,
                json_mode=True,
            )

        future = self._executor.submit(call)
        # Time spent queued behind other calls does not count against the deadline.
        while not started.wait(_QUEUE_POLL_INTERVAL):
            if future.done():
                break
        try:
            return future.result(timeout=self._timeout)
        except FutureTimeoutError as e:
            future.cancel()
            raise OracleTimeoutError(
                f"Model call exceeded {self._timeout:.1f}s deadline"
            ) from e
        except CancelledError as e:
            raise OracleError("Model call cancelled: oracle is closed") from e

    def generate(self, prompt: str, kind: str = "general") -> str:
        """Return the model's raw text for prompt.

        Args:
            prompt: Full user prompt.
            kind: Analysis kind, part of the cache key.

        Returns:
            Raw response text (from cache or a fresh model call).

        Raises:
            RateLimitExceeded: The limiter denied a cache-miss call.
            OracleError: The model call failed, timed out or returned nothing.
        """
        self._maybe_cleanup()

        key = make_cache_key(kind, prompt)
        if self._cache is not None:
            cached = self._cache.get(key)
            if cached is not None:
                with self._counter_lock:
                    self._cache_hits += 1
                logger.debug("Cache hit for kind=%s", kind)
                return cached

        if not self._rate_limiter.try_admit():
            retry_after = self._rate_limiter.retry_after()
            logger.warning("Rate limit exceeded for kind=%s (retry in %.1fs)", kind, retry_after)
            raise RateLimitExceeded(
                f"Rate limit of {self._rate_limiter.max_requests} calls per "
                f"{self._rate_limiter.window:g}s exceeded",
                retry_after=retry_after,
            )

        with self._counter_lock:
            self._total_requests += 1

        try:
            text = self._invoke(prompt)
        except OracleError:
            logger.exception("Model call failed for kind=%s", kind)
            raise
        except Exception as e:
            logger.exception("Unexpected error from model adapter for kind=%s", kind)
            raise OracleError(f"AI analysis failed: {e}") from e

        if not isinstance(text, str) or not text.strip():
            raise LLMResponseError("Empty response from model", raw_response=text)

        if self._cache is not None:
            self._cache.set(key, text)
        return text

    def generate_json(self, prompt: str, kind: str = "general") -> dict[str, Any]:
        """generate() followed by parse_json_object()."""
        return parse_json_object(self.generate(prompt, kind))

    def stats(self) -> ServiceStats:
        """Snapshot of cache and rate-limit state. Records no call."""
        with self._counter_lock:
            total, hits = self._total_requests, self._cache_hits
        return ServiceStats(
            cache_size=len(self._cache) if self._cache is not None else 0,
            recent_request_count=self._rate_limiter.recent_count(),
            rate_limit_status="limited" if self._rate_limiter.is_limited() else "available",
            total_requests=total,
            cache_hits=hits,
        )

    def close(self) -> None:
        """Release worker threads without waiting for abandoned calls."""
        self._executor.shutdown(wait=False, cancel_futures=True)

    def __enter__(self) -> "AnalysisOracle":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def cache(self) -> Optional[AnalysisCache]:
        return self._cache

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._rate_limiter

    @property
    def adapter(self) -> LLMAdapter:
        return self._adapter

    @property
    def max_workers(self) -> int:
        return self._max_workers
