"""LLM-backed recommendation tier.

Sends the candidate profile to an LLM provider, parses the
``{professions, skillsToLearn, courses, matchScore}`` JSON it returns, and maps
it onto the common result contract. Any provider or parse error propagates so
the fallback chain moves on to the market aggregator.
"""

import asyncio
import json
import logging
import time
from typing import Any

from marketfit.core.schemas import (
    Course,
    DebugInfo,
    RecommendationResult,
    RecommendOptions,
    RoleSummary,
    SkillGap,
    Source,
)
from marketfit.pipeline.courses import dedupe_courses
from marketfit.pipeline.fallback import Recommender
from marketfit.pipeline.scorer import MAX_GAPS, clamp_score
from marketfit.platforms.hh.searcher import build_public_search_url
from marketfit.profile.experience import experience_bucket, years_of_experience
from marketfit.profile.llm import get_provider
from marketfit.profile.llm.base import RECOMMENDER_PROMPT, LLMProvider, language_hint, parse_response
from marketfit.profile.schema import Profile
from marketfit.profile.skills import normalize_profile_skills

logger = logging.getLogger(__name__)

MAX_PROFESSIONS = 5
_DEFAULT_SCORE = 50


def build_user_prompt(profile: Profile, options: RecommendOptions) -> str:
    """Assemble the user prompt from the profile and request options."""
    body = profile.model_dump(mode="json", exclude_none=True, exclude_defaults=True)
    prompt = (
        "CANDIDATE PROFILE\n"
        f"{json.dumps(body, ensure_ascii=False, indent=2)}\n"
    )
    if options.focus_role:
        prompt += f"\nFocus role: {options.focus_role}\n"
    if options.seed_skills:
        prompt += f"Extra skills: {', '.join(options.seed_skills)}\n"
    return f"{prompt}\n{language_hint(options.language)}"


def _strings(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v).strip() for v in value if isinstance(v, (str, int, float)) and str(v).strip()]


def _courses(value: Any) -> list[Course]:
    if not isinstance(value, list):
        return []
    courses = []
    for item in value:
        if isinstance(item, str) and item.strip():
            courses.append(Course(provider="AI", title=item.strip()))
        elif isinstance(item, dict):
            title = str(item.get("name") or item.get("title") or "").strip()
            if not title:
                continue
            courses.append(Course(
                provider=str(item.get("provider") or "AI"),
                title=title,
                url=str(item.get("url") or ""),
                duration=str(item.get("duration") or ""),
            ))
    return courses


def _score(value: Any) -> int:
    try:
        return clamp_score(float(value))
    except (TypeError, ValueError):
        return clamp_score(_DEFAULT_SCORE)


class LLMRecommender(Recommender):
    """First tier: delegate the whole computation to an LLM."""

    def __init__(self, provider: LLMProvider | str, model: str | None = None, host: str = "hh.kz") -> None:
        self._provider = get_provider(provider) if isinstance(provider, str) else provider
        self._model = model
        self._host = host

    @property
    def source_id(self) -> Source:
        return "external"

    @property
    def provider_id(self) -> str:
        return self._provider.provider_id

    async def recommend(self, profile: Profile, options: RecommendOptions) -> RecommendationResult:
        started = time.perf_counter()
        prompt = build_user_prompt(profile, options)
        raw = await asyncio.to_thread(
            self._provider.complete, prompt, self._model, system=RECOMMENDER_PROMPT,
        )
        data = parse_response(raw)

        professions = _strings(data.get("professions"))[:MAX_PROFESSIONS]
        if not professions:
            msg = "LLM response has no professions"
            raise ValueError(msg)
        grow = _strings(data.get("skillsToLearn"))[:MAX_GAPS]
        years = years_of_experience(profile)
        logger.info(
            "LLM '%s' suggested %d roles, %d skills", self.provider_id, len(professions), len(grow),
        )

        return RecommendationResult(
            market_fit_score=_score(data.get("matchScore")),
            roles=[
                RoleSummary(title=p, query=p, url=build_public_search_url(self._host, p, options.area_id))
                for p in professions
            ],
            grow_skills=[SkillGap(name=s) for s in grow],
            courses=dedupe_courses(_courses(data.get("courses"))),
            debug=DebugInfo(
                source="external",
                skills_detected=normalize_profile_skills(profile),
                roles_guessed=professions,
                area_used=options.area_id,
                language=options.language,
                user_years=years,
                experience_bucket=experience_bucket(years),
                host=self._host,
                timings_ms={"total": int((time.perf_counter() - started) * 1000)},
            ),
        )
