"""Runtime configuration for the triage pipeline.

Options are grouped per component. ``TriageConfig.from_env()`` picks an
environment profile from TRIAGE_ENV and then applies individual TRIAGE_*
overrides. Durations are configured in milliseconds.
"""

import logging
import os
from dataclasses import dataclass, field, replace
from typing import Callable, Optional, TypeVar

from src.analyzer import (
    AnalysisCache,
    AnalysisKind,
    AnalysisOracle,
    EmailAnalyzer,
    LLMAdapter,
    RateLimiter,
)
from src.batch import BatchProcessor
from src.filtering import SmartFilter
from src.scoring import AttentionThresholds, InsightAggregator, PriorityScorer, ScoringWeights

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_ENVIRONMENT = "development"


@dataclass(frozen=True)
class OracleSettings:
    model: str = "gpt-4o-mini"
    timeout_ms: int = 15000
    max_workers: int = 16


@dataclass(frozen=True)
class CacheSettings:
    enabled: bool = True
    ttl_ms: int = 5 * 60 * 1000
    max_entries: int = 1000
    cleanup_interval_ms: int = 10 * 60 * 1000


@dataclass(frozen=True)
class RateLimitSettings:
    window_ms: int = 60000
    max_requests: int = 60


@dataclass(frozen=True)
class BatchSettings:
    concurrent_processing: int = 3
    inter_group_delay_ms: int = 1000


@dataclass(frozen=True)
class ContentSettings:
    max_content_length: int = 4000
    max_prompt_length: int = 10000


@dataclass(frozen=True)
class TriageConfig:
    """All options of the analysis pipeline."""

    environment: str = DEFAULT_ENVIRONMENT
    oracle: OracleSettings = field(default_factory=OracleSettings)
    cache: CacheSettings = field(default_factory=CacheSettings)
    rate_limit: RateLimitSettings = field(default_factory=RateLimitSettings)
    batch: BatchSettings = field(default_factory=BatchSettings)
    content: ContentSettings = field(default_factory=ContentSettings)
    weights: ScoringWeights = field(default_factory=ScoringWeights)
    thresholds: AttentionThresholds = field(default_factory=AttentionThresholds)

    @classmethod
    def for_environment(cls, name: Optional[str]) -> "TriageConfig":
        """Return the named deployment profile (development by default)."""
        name = (name or DEFAULT_ENVIRONMENT).lower()
        base = cls()
        if name == "production":
            return replace(
                base,
                environment=name,
                rate_limit=replace(base.rate_limit, max_requests=100),
                cache=replace(base.cache, ttl_ms=15 * 60 * 1000, max_entries=5000),
            )
        if name == "test":
            return replace(
                base,
                environment=name,
                rate_limit=replace(base.rate_limit, max_requests=10),
                cache=replace(base.cache, enabled=False),
            )
        if name != DEFAULT_ENVIRONMENT:
            logger.warning("Unknown environment %r, using %s profile", name, DEFAULT_ENVIRONMENT)
        return replace(
            base,
            environment=DEFAULT_ENVIRONMENT,
            rate_limit=replace(base.rate_limit, max_requests=30),
        )

    @classmethod
    def from_env(cls) -> "TriageConfig":
        """Build config from TRIAGE_ENV plus TRIAGE_* overrides.

        Raises:
            ValueError: If an override cannot be parsed or the result is invalid.
        """
        config = cls.for_environment(os.getenv("TRIAGE_ENV"))
        config = replace(
            config,
            oracle=replace(
                config.oracle,
                model=os.getenv("TRIAGE_MODEL") or config.oracle.model,
                timeout_ms=_env("TRIAGE_TIMEOUT_MS", int, config.oracle.timeout_ms),
            ),
            cache=replace(
                config.cache,
                enabled=_env("TRIAGE_CACHE_ENABLED", _parse_bool, config.cache.enabled),
                ttl_ms=_env("TRIAGE_CACHE_TTL_MS", int, config.cache.ttl_ms),
                max_entries=_env("TRIAGE_CACHE_MAX_ENTRIES", int, config.cache.max_entries),
            ),
            rate_limit=replace(
                config.rate_limit,
                window_ms=_env("TRIAGE_RATE_LIMIT_WINDOW_MS", int, config.rate_limit.window_ms),
                max_requests=_env(
                    "TRIAGE_RATE_LIMIT_MAX_REQUESTS", int, config.rate_limit.max_requests
                ),
            ),
            batch=replace(
                config.batch,
                concurrent_processing=_env(
                    "TRIAGE_BATCH_CONCURRENCY", int, config.batch.concurrent_processing
                ),
                inter_group_delay_ms=_env(
                    "TRIAGE_BATCH_DELAY_MS", int, config.batch.inter_group_delay_ms
                ),
            ),
            content=replace(
                config.content,
                max_content_length=_env(
                    "TRIAGE_MAX_CONTENT_LENGTH", int, config.content.max_content_length
                ),
            ),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Raise ValueError if any bound is non-positive."""
        checks = {
            "oracle.timeout_ms": self.oracle.timeout_ms,
            "oracle.max_workers": self.oracle.max_workers,
            "cache.ttl_ms": self.cache.ttl_ms,
            "cache.max_entries": self.cache.max_entries,
            "rate_limit.window_ms": self.rate_limit.window_ms,
            "rate_limit.max_requests": self.rate_limit.max_requests,
            "batch.concurrent_processing": self.batch.concurrent_processing,
            "content.max_content_length": self.content.max_content_length,
        }
        for name, value in checks.items():
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
        if self.batch.inter_group_delay_ms < 0:
            raise ValueError("batch.inter_group_delay_ms must not be negative")

    # -- Component factories -------------------------------------------------

    def oracle_pool_size(self) -> int:
        """Worker threads needed to run one batch group's calls at once."""
        return max(self.oracle.max_workers, self.batch.concurrent_processing * len(AnalysisKind))

    def build_oracle(self, adapter: LLMAdapter) -> AnalysisOracle:
        cache = None
        if self.cache.enabled:
            cache = AnalysisCache(ttl=self.cache.ttl_ms / 1000, max_entries=self.cache.max_entries)
        return AnalysisOracle(
            adapter,
            cache=cache,
            rate_limiter=RateLimiter(
                max_requests=self.rate_limit.max_requests,
                window=self.rate_limit.window_ms / 1000,
            ),
            timeout=self.oracle.timeout_ms / 1000,
            cleanup_interval=self.cache.cleanup_interval_ms / 1000,
            max_workers=self.oracle_pool_size(),
        )

    def build_analyzer(self, oracle: AnalysisOracle) -> EmailAnalyzer:
        return EmailAnalyzer(
            oracle,
            max_content_length=self.content.max_content_length,
            max_prompt_length=self.content.max_prompt_length,
        )

    def build_processor(self, analyzer: EmailAnalyzer) -> BatchProcessor:
        return BatchProcessor(
            analyzer,
            scorer=PriorityScorer(self.weights, self.thresholds),
            concurrency=self.batch.concurrent_processing,
            delay=self.batch.inter_group_delay_ms / 1000,
        )

    def build_aggregator(self) -> InsightAggregator:
        return InsightAggregator(self.thresholds)

    def build_smart_filter(self, oracle: AnalysisOracle) -> SmartFilter:
        return SmartFilter(oracle, max_content_length=self.content.max_content_length)


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"not a boolean: {value!r}")


def _env(name: str, parse: Callable[[str], T], default: T) -> T:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return parse(raw)
    except ValueError as e:
        raise ValueError(f"Invalid value for {name}: {raw!r}") from e
