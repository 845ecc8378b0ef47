"""Course suggestions for skill gaps.

Static search-link templates are always available. A course-lookup
collaborator (Stepik's public search API) can replace them; its failure or
empty answer keeps the static list.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from urllib.parse import quote, urlencode

from marketfit.core.schemas import Course, SkillGap
from marketfit.platforms.hh.client import JsonFetcher

logger = logging.getLogger(__name__)

MAX_COURSES = 12
GAPS_FOR_COURSES = 3
GAPS_FOR_KEYWORDS = 6

STEPIK_SEARCH_URL = "https://stepik.org/api/search-results"

# Shown when the engine runs without any market data.
GENERIC_COURSES: tuple[Course, ...] = (
    Course(provider="Coursera", title="Career Essentials", duration="1-3 months",
           url="https://www.coursera.org/"),
    Course(provider="Udemy", title="Complete Web Development", duration="2 months",
           url="https://www.udemy.com/"),
    Course(provider="Stepik", title="Python for Beginners", duration="1 month",
           url="https://stepik.org/"),
)


def _capitalize(s: str) -> str:
    return s[:1].upper() + s[1:]


def course_links(skill: str) -> list[Course]:
    """Search links on three providers for one skill."""
    q = quote(skill, safe="")
    title = _capitalize(skill)
    return [
        Course(provider="Coursera", title=f"{title}: specializations", duration="1-3 months",
               url=f"https://www.coursera.org/search?query={q}"),
        Course(provider="Udemy", title=f"{title}: hands-on courses", duration="1-2 months",
               url=f"https://www.udemy.com/courses/search/?q={q}"),
        Course(provider="Stepik", title=f"{title}: courses", duration="2-8 weeks",
               url=f"https://stepik.org/search?query={q}"),
    ]


def static_courses(gaps: Sequence[SkillGap]) -> list[Course]:
    """Course links for the top three gaps."""
    courses: list[Course] = []
    for gap in gaps[:GAPS_FOR_COURSES]:
        courses.extend(course_links(gap.name))
    return dedupe_courses(courses)


def dedupe_courses(courses: Sequence[Course], limit: int = MAX_COURSES) -> list[Course]:
    """Drop repeats by (provider, title, url), case-insensitive; cap at ``limit``."""
    seen: set[tuple[str, str, str]] = set()
    result: list[Course] = []
    for c in courses:
        key = (c.provider.lower(), c.title.lower(), c.url)
        if key in seen:
            continue
        seen.add(key)
        result.append(c)
    return result[:limit]


def gap_keywords(gaps: Sequence[SkillGap]) -> str:
    return ", ".join(g.name for g in gaps[:GAPS_FOR_KEYWORDS])


class CourseLookup(ABC):
    """External course catalogue."""

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """Unique identifier for this lookup (e.g. 'stepik')."""

    @abstractmethod
    async def lookup(self, gaps: Sequence[SkillGap], keywords: str) -> list[Course]:
        """Return courses for the gaps (may be empty)."""


class StepikCourseLookup(CourseLookup):
    """Course search against Stepik's public API, through the cached fetcher."""

    def __init__(self, fetcher: JsonFetcher, per_skill: int = 3, max_results: int = MAX_COURSES) -> None:
        self._fetcher = fetcher
        self._per_skill = per_skill
        self._max_results = max_results

    @property
    def provider_id(self) -> str:
        return "stepik"

    async def lookup(self, gaps: Sequence[SkillGap], keywords: str) -> list[Course]:
        skills = [g.name for g in gaps[:GAPS_FOR_COURSES]]
        if not skills and keywords:
            skills = [k.strip() for k in keywords.split(",") if k.strip()][:GAPS_FOR_COURSES]

        courses: list[Course] = []
        for skill in skills:
            try:
                courses.extend(await self._search(skill))
            except Exception:
                logger.warning("Stepik lookup failed for '%s'", skill, exc_info=True)
        return dedupe_courses(courses, self._max_results)

    async def _search(self, skill: str) -> list[Course]:
        params = {"query": skill, "type": "course", "page": "1", "page_size": str(self._per_skill)}
        payload = await self._fetcher.get_json_cached(f"{STEPIK_SEARCH_URL}?{urlencode(params)}")
        if not isinstance(payload, dict):
            return []
        results: list[Course] = []
        for item in (payload.get("search-results") or [])[: self._per_skill]:
            course_id = item.get("course") or item.get("target_id")
            if not course_id:
                continue
            results.append(Course(
                provider="Stepik",
                title=item.get("course_title") or _capitalize(skill),
                url=f"https://stepik.org/course/{course_id}",
            ))
        return results


async def suggest_courses(gaps: Sequence[SkillGap], lookup: CourseLookup | None) -> list[Course]:
    """Courses for the gaps: the lookup's answer if non-empty, else static links."""
    fallback = static_courses(gaps)
    if lookup is None or not gaps:
        return fallback
    try:
        found = await lookup.lookup(gaps, gap_keywords(gaps))
    except Exception:
        logger.warning("Course lookup '%s' failed - using static links", lookup.provider_id, exc_info=True)
        return fallback
    if not found:
        return fallback
    return dedupe_courses(found)
