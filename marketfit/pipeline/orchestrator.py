"""Recommendation engine: owns the shared resources and the tier chain.

Wiring (built in ``__init__``, resources opened in ``start``):
  1. TTL cache (periodic sweep while started)
  2. httpx.AsyncClient → JsonFetcher (timeout, retry, cache-aside)
  3. HHAdapter vacancy source, optional Stepik course lookup
  4. Tiers: optional LLM recommender → market aggregator → static fallback

Tests inject ``source`` and/or ``tiers`` to run without the network.
"""

import logging
from collections.abc import Sequence
from types import TracebackType

import httpx

from marketfit.core.cache import TTLCache
from marketfit.core.config import Settings
from marketfit.core.schemas import CacheStats, HealthReport, RecommendationResult, RecommendOptions
from marketfit.pipeline.aggregator import MarketAggregator
from marketfit.pipeline.courses import CourseLookup, StepikCourseLookup
from marketfit.pipeline.fallback import FallbackChain, Recommender, StaticRecommender
from marketfit.pipeline.llm_recommender import LLMRecommender
from marketfit.platforms.base import VacancySource
from marketfit.platforms.hh.adapter import HHAdapter, api_headers
from marketfit.platforms.hh.client import JsonFetcher
from marketfit.profile.llm import get_provider
from marketfit.profile.schema import Profile

logger = logging.getLogger(__name__)


class RecommendationEngine:
    """Entry point for ``generate`` and ``health``.

    Usage::

        async with RecommendationEngine(Settings.from_env()) as engine:
            result = await engine.generate(profile, RecommendOptions(area_id="160"))
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        source: VacancySource | None = None,
        tiers: Sequence[Recommender] | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings or Settings()
        s = self.settings

        self.cache = TTLCache(s.cache.ttl_ms / 1000, sweep_interval_s=s.cache.sweep_interval_s)
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            follow_redirects=True, timeout=s.http.fetch_timeout_ms / 1000,
        )
        self.fetcher = JsonFetcher(
            self._http, self.cache, s.http, headers=api_headers(s.market),
        )
        self.source = source or HHAdapter(self.fetcher, s.market)
        self.course_lookup = self._build_course_lookup()

        if tiers is None:
            tiers = self._build_tiers()
        self.chain = FallbackChain(tiers, tier_timeout_s=s.server.request_timeout_s)

    def _build_course_lookup(self) -> CourseLookup | None:
        cfg = self.settings.courses
        if cfg.provider == "stepik":
            return StepikCourseLookup(self.fetcher, max_results=cfg.max_results)
        return None

    def _build_tiers(self) -> list[Recommender]:
        s = self.settings
        tiers: list[Recommender] = []
        if s.external.provider:
            ext = s.external
            try:
                provider = get_provider(
                    ext.provider,
                    max_tokens=ext.max_tokens,
                    temperature=ext.temperature,
                    timeout_s=ext.timeout_s,
                )
                tiers.append(LLMRecommender(provider, ext.model, host=s.market.host))
            except ValueError:
                logger.warning(
                    "External provider '%s' is not available - skipping that tier",
                    s.external.provider, exc_info=True,
                )
        tiers.append(MarketAggregator(self.source, s.market, self.course_lookup))
        tiers.append(StaticRecommender(max_roles=s.market.max_roles, host=s.market.host))
        return tiers

    async def start(self) -> None:
        self.cache.start()
        logger.info(
            "Engine started: tiers %s, host %s",
            [t.source_id for t in self.chain.tiers], self.settings.market.host,
        )

    async def stop(self) -> None:
        await self.cache.stop()
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> "RecommendationEngine":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.stop()

    async def generate(
        self,
        profile: Profile,
        options: RecommendOptions | None = None,
    ) -> RecommendationResult:
        """Run the tier chain; the static tier guarantees a result."""
        return await self.chain.run(profile, options or RecommendOptions())

    def health(self) -> HealthReport:
        s = self.settings
        return HealthReport(
            cache=CacheStats(
                size=len(self.cache),
                hits=self.cache.hits,
                misses=self.cache.misses,
                ttl_ms=s.cache.ttl_ms,
                sweeping=self.cache.running,
            ),
            pool_size=s.market.detail_concurrency,
            sample_pages=s.market.sample_pages,
            per_page=s.market.per_page,
            vacancy_sample_per_role=s.market.vacancy_sample_per_role,
            fetch_timeout_ms=s.http.fetch_timeout_ms,
            retries=s.http.retries,
            external_provider=s.external.provider,
            course_provider=s.courses.provider,
        )
