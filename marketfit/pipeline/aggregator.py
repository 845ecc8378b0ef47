"""Local market aggregator: live vacancy sampling → skill demand → market fit.

Data flow per request (roles are processed one after another):
  1. Profile signals: canonical skills, experience bucket, role guesses
  2. Per-role search: page through results, dedupe ids, cap the sample
  3. Per-role detail fetch through the bounded worker pool
  4. Tally skill demand (global + per role) and experience match
  5. Demand ranking → skill gaps → courses → composite score

A role whose search fails contributes nothing; if every role fails the
aggregator raises MarketUnavailableError so the fallback chain can degrade.
"""

import logging
import time
from collections import Counter

from marketfit.core.config import MarketConfig
from marketfit.core.errors import MarketUnavailableError, UpstreamError
from marketfit.core.schemas import (
    DebugInfo,
    RecommendationResult,
    RecommendOptions,
    RoleStat,
    RoleSummary,
    VacancySignals,
)
from marketfit.pipeline.courses import CourseLookup, suggest_courses
from marketfit.pipeline.fallback import Recommender
from marketfit.pipeline.pool import run_bounded
from marketfit.pipeline.scorer import (
    TOP_DEMAND,
    TOP_LOCAL,
    compute_market_fit,
    compute_skill_gaps,
    experience_match_score,
    top_skills,
)
from marketfit.platforms.base import VacancySource
from marketfit.platforms.hh.parser import parse_vacancy
from marketfit.platforms.hh.searcher import should_stop_pagination
from marketfit.profile.experience import experience_bucket, years_of_experience
from marketfit.profile.roles import guess_roles
from marketfit.profile.schema import Profile
from marketfit.profile.skills import extract_skill_names, normalize_profile_skills

logger = logging.getLogger(__name__)


class MarketAggregator(Recommender):
    """Builds recommendations from a live sample of vacancies."""

    def __init__(
        self,
        source: VacancySource,
        config: MarketConfig,
        course_lookup: CourseLookup | None = None,
    ) -> None:
        self._source = source
        self._config = config
        self._course_lookup = course_lookup

    @property
    def source_id(self) -> str:
        return "smart"

    async def recommend(self, profile: Profile, options: RecommendOptions) -> RecommendationResult:
        started = time.perf_counter()
        area = options.area_id

        skills = extract_skill_names([*normalize_profile_skills(profile), *options.seed_skills])
        years = years_of_experience(profile)
        bucket = experience_bucket(years)
        if options.focus_role:
            roles = [options.focus_role]
        else:
            roles = guess_roles(profile, skills, max_roles=self._config.max_roles)
        logger.info("Roles %s, %d skills, experience %s", roles, len(skills), bucket.value)

        # Steps 2-4, one role at a time
        stats: list[RoleStat] = []
        summaries: list[RoleSummary] = []
        demand: Counter[str] = Counter()
        exp_scores: list[float] = []
        search_ms = detail_ms = 0.0

        for role in roles:
            t = time.perf_counter()
            stat = await self._search_role(role, area)
            search_ms += time.perf_counter() - t
            stats.append(stat)

            t = time.perf_counter()
            signals = await self._fetch_details(stat)
            detail_ms += time.perf_counter() - t

            local: Counter[str] = Counter()
            for vacancy in signals:
                demand.update(vacancy.skills)
                local.update(vacancy.skills)
                exp_scores.append(experience_match_score(bucket, vacancy.experience))

            summaries.append(RoleSummary(
                title=role,
                vacancies=stat.count,
                query=role,
                top_skills=top_skills(local, TOP_LOCAL),
                url=self._source.public_search_url(role, area),
                sampled_ids=stat.ids,
            ))

        if stats and all(s.search_failed for s in stats):
            msg = f"Vacancy search failed for every role: {roles}"
            raise MarketUnavailableError(msg)

        # Step 5
        top_demand = top_skills(demand, TOP_DEMAND)
        gaps = compute_skill_gaps(skills, top_demand, roles[0] if roles else None)
        courses = await suggest_courses(gaps, self._course_lookup)
        score = compute_market_fit(skills, top_demand, exp_scores, [s.count for s in stats])

        sampled = len({vid for s in stats for vid in s.ids})
        logger.info(
            "Market fit %d from %d sampled vacancies, %d gaps", score, sampled, len(gaps),
        )
        return RecommendationResult(
            market_fit_score=score,
            roles=summaries,
            grow_skills=gaps,
            courses=courses,
            debug=DebugInfo(
                source="smart",
                skills_detected=skills,
                roles_guessed=roles,
                area_used=area,
                language=options.language,
                sample_vacancies=sampled,
                top_demand=top_demand,
                user_years=years,
                experience_bucket=bucket,
                host=self._source.host,
                timings_ms={
                    "search": _ms(search_ms),
                    "details": _ms(detail_ms),
                    "total": _ms(time.perf_counter() - started),
                },
            ),
        )

    async def _search_role(self, role: str, area: str | None) -> RoleStat:
        """Collect deduplicated vacancy ids for a role, capped to the sample size.

        A failing page ends paging for this role; ids from earlier pages are kept.
        """
        ids: dict[str, None] = {}
        pages_ok = 0
        reported: int | None = None
        for page_no in range(self._config.sample_pages):
            try:
                page = await self._source.search_page(role, area_id=area, page=page_no)
            except UpstreamError as e:
                kind = "transient" if e.is_transient else "permanent"
                logger.warning("Search failed for '%s' page %d (%s): %s", role, page_no, kind, e)
                break
            except Exception as e:
                logger.warning("Search failed for '%s' page %d: %s", role, page_no, e)
                break
            pages_ok += 1
            if reported is None:
                reported = page.found
            ids.update(dict.fromkeys(page.ids))
            if should_stop_pagination(page_no, page.pages, len(page.ids)):
                break

        unique = list(ids)
        logger.info(
            "Role '%s': %d vacancies collected (%s reported)",
            role, len(unique), "?" if reported is None else reported,
        )
        return RoleStat(
            role=role,
            count=len(unique),
            ids=unique[: self._config.vacancy_sample_per_role],
            search_failed=pages_ok == 0,
        )

    async def _fetch_details(self, stat: RoleStat) -> list[VacancySignals]:
        if not stat.ids:
            return []
        signals, report = await run_bounded(
            stat.ids, self._fetch_signals, self._config.detail_concurrency,
        )
        if report.failed:
            logger.info(
                "Role '%s': %d/%d vacancy details dropped", stat.role, report.failed, report.submitted,
            )
        return signals

    async def _fetch_signals(self, vacancy_id: str) -> VacancySignals:
        payload = await self._source.get_vacancy(vacancy_id)
        return parse_vacancy(payload)


def _ms(seconds: float) -> int:
    return int(seconds * 1000)
