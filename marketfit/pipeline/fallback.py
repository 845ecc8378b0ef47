"""Degradation chain: ordered recommender tiers, first success wins.

Tiers (in the default wiring):
  1. external: optional LLM-backed recommender
  2. smart   : live market aggregator
  3. fallback: static heuristics, no network, never raises

A tier that raises or exceeds the per-tier deadline hands over to the next.
Caller cancellation (asyncio.CancelledError) is not an Exception and
propagates untouched.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence

from marketfit.core.errors import RecommendationError
from marketfit.core.schemas import (
    DebugInfo,
    RecommendationResult,
    RecommendOptions,
    RoleSummary,
    SkillGap,
    Source,
)
from marketfit.pipeline.courses import GENERIC_COURSES
from marketfit.platforms.hh.searcher import build_public_search_url
from marketfit.profile.experience import experience_bucket, years_of_experience
from marketfit.profile.roles import guess_roles
from marketfit.profile.schema import Profile
from marketfit.profile.skills import normalize_profile_skills

logger = logging.getLogger(__name__)

FALLBACK_SCORE = 65

COMMON_GROWTH_SKILLS: tuple[str, ...] = ("communication", "presentation", "critical thinking")
STARTER_GROWTH_SKILLS: tuple[str, ...] = ("agile", "data analysis", "digital marketing")


class Recommender(ABC):
    """One degradation tier."""

    @property
    @abstractmethod
    def source_id(self) -> Source:
        """Provenance tag written to ``debug.source``."""

    @abstractmethod
    async def recommend(self, profile: Profile, options: RecommendOptions) -> RecommendationResult:
        """Produce a full result or raise."""


class StaticRecommender(Recommender):
    """Last tier: profile-only heuristics with a fixed score."""

    def __init__(self, max_roles: int = 3, host: str = "hh.kz") -> None:
        self._max_roles = max_roles
        self._host = host

    @property
    def source_id(self) -> Source:
        return "fallback"

    async def recommend(self, profile: Profile, options: RecommendOptions) -> RecommendationResult:
        return self.build(profile, options)

    def build(self, profile: Profile, options: RecommendOptions) -> RecommendationResult:
        """Synchronous core, safe to call from anywhere."""
        try:
            skills = normalize_profile_skills(profile)
            roles = guess_roles(profile, skills, max_roles=self._max_roles)
            years = years_of_experience(profile)
        except Exception:
            logger.exception("Static fallback could not read profile - using defaults")
            skills, roles, years = [], guess_roles(Profile(), [], max_roles=self._max_roles), 0.0

        growth = COMMON_GROWTH_SKILLS if skills else STARTER_GROWTH_SKILLS
        return RecommendationResult(
            market_fit_score=FALLBACK_SCORE,
            roles=[
                RoleSummary(title=r, query=r, url=build_public_search_url(self._host, r, options.area_id))
                for r in roles
            ],
            grow_skills=[SkillGap(name=s, demand=1) for s in growth],
            courses=list(GENERIC_COURSES),
            debug=DebugInfo(
                source="fallback",
                fallback=True,
                skills_detected=skills,
                roles_guessed=roles,
                area_used=options.area_id,
                language=options.language,
                user_years=years,
                experience_bucket=experience_bucket(years),
            ),
        )


class FallbackChain:
    """Runs tiers in order and returns the first result.

    Usage::

        chain = FallbackChain([llm, aggregator, StaticRecommender()], tier_timeout_s=60)
        result = await chain.run(profile, options)
    """

    def __init__(self, tiers: Sequence[Recommender], tier_timeout_s: float | None = None) -> None:
        if not tiers:
            msg = "FallbackChain needs at least one tier"
            raise ValueError(msg)
        self._tiers = list(tiers)
        self._timeout = tier_timeout_s

    @property
    def tiers(self) -> list[Recommender]:
        return list(self._tiers)

    async def run(self, profile: Profile, options: RecommendOptions) -> RecommendationResult:
        errors: dict[str, str] = {}
        for tier in self._tiers:
            try:
                result = await asyncio.wait_for(
                    tier.recommend(profile, options), timeout=self._timeout,
                )
            except TimeoutError:
                errors[tier.source_id] = f"timed out after {self._timeout}s"
                logger.warning("Tier '%s' timed out - degrading", tier.source_id)
                continue
            except Exception as e:
                errors[tier.source_id] = f"{type(e).__name__}: {e}"
                logger.warning("Tier '%s' failed - degrading: %s", tier.source_id, e)
                continue

            logger.info("Recommendations produced by tier '%s'", tier.source_id)
            if errors:
                debug = result.debug.model_copy(update={"tier_errors": errors})
                result = result.model_copy(update={"debug": debug})
            return result

        msg = f"All recommendation tiers failed: {errors}"
        raise RecommendationError(msg)
