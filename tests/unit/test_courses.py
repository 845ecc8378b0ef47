"""Tests for course links, de-duplication, and course lookup fallback."""

from collections.abc import Sequence
from unittest.mock import AsyncMock

import httpx

from marketfit.core.cache import TTLCache
from marketfit.core.config import HttpConfig
from marketfit.core.schemas import Course, SkillGap
from marketfit.pipeline.courses import (
    MAX_COURSES,
    CourseLookup,
    StepikCourseLookup,
    course_links,
    dedupe_courses,
    static_courses,
    suggest_courses,
)
from marketfit.platforms.hh.client import JsonFetcher


def _gaps(*names: str) -> list[SkillGap]:
    return [SkillGap(name=n) for n in names]


class StubLookup(CourseLookup):
    def __init__(self, result: list[Course] | Exception) -> None:
        self.result = result
        self.keywords: str | None = None

    @property
    def provider_id(self) -> str:
        return "stub"

    async def lookup(self, gaps: Sequence[SkillGap], keywords: str) -> list[Course]:
        self.keywords = keywords
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


# ---------------------------------------------------------------------------
# Static links
# ---------------------------------------------------------------------------


class TestCourseLinks:
    def test_three_providers(self) -> None:
        links = course_links("power bi")
        assert [c.provider for c in links] == ["Coursera", "Udemy", "Stepik"]
        assert links[0].url == "https://www.coursera.org/search?query=power%20bi"
        assert links[0].title.startswith("Power bi")

    def test_static_courses_use_top_three_gaps(self) -> None:
        courses = static_courses(_gaps("sql", "docker", "git", "css"))
        assert len(courses) == 9
        assert not any("css" in c.url for c in courses)

    def test_no_gaps(self) -> None:
        assert static_courses([]) == []


class TestDedupe:
    def test_case_insensitive(self) -> None:
        courses = [
            Course(provider="Udemy", title="SQL", url="u"),
            Course(provider="udemy", title="sql", url="u"),
            Course(provider="Udemy", title="SQL", url="other"),
        ]
        assert len(dedupe_courses(courses)) == 2

    def test_cap(self) -> None:
        courses = [Course(provider="P", title=f"T{i}", url=str(i)) for i in range(20)]
        assert len(dedupe_courses(courses)) == MAX_COURSES


# ---------------------------------------------------------------------------
# suggest_courses
# ---------------------------------------------------------------------------


class TestSuggestCourses:
    async def test_without_lookup(self) -> None:
        courses = await suggest_courses(_gaps("sql"), None)
        assert [c.provider for c in courses] == ["Coursera", "Udemy", "Stepik"]

    async def test_lookup_result_replaces_static(self) -> None:
        found = [Course(provider="Stepik", title="SQL Basics", url="https://stepik.org/course/1")]
        lookup = StubLookup(found)
        assert await suggest_courses(_gaps("sql", "git"), lookup) == found
        assert lookup.keywords == "sql, git"

    async def test_lookup_failure_keeps_static(self) -> None:
        courses = await suggest_courses(_gaps("sql"), StubLookup(RuntimeError("down")))
        assert len(courses) == 3

    async def test_empty_lookup_keeps_static(self) -> None:
        courses = await suggest_courses(_gaps("sql"), StubLookup([]))
        assert len(courses) == 3


# ---------------------------------------------------------------------------
# Stepik lookup
# ---------------------------------------------------------------------------


class TestStepikLookup:
    async def test_parses_search_results(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"search-results": [
                {"course": 11, "course_title": "SQL for analysts"},
                {"target_id": 12},
                {"course_title": "no id"},
            ]})

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        fetcher = JsonFetcher(client, TTLCache(), HttpConfig(), sleep=AsyncMock())
        courses = await StepikCourseLookup(fetcher).lookup(_gaps("sql"), "sql")

        assert [(c.title, c.url) for c in courses] == [
            ("SQL for analysts", "https://stepik.org/course/11"),
            ("Sql", "https://stepik.org/course/12"),
        ]
        assert seen[0].url.params["query"] == "sql"

    async def test_failed_skill_is_skipped(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.params["query"] == "sql":
                return httpx.Response(500)
            return httpx.Response(200, json={"search-results": [{"course": 5, "course_title": "Git"}]})

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        fetcher = JsonFetcher(client, None, HttpConfig(retries=0), sleep=AsyncMock())
        courses = await StepikCourseLookup(fetcher).lookup(_gaps("sql", "git"), "sql, git")
        assert [c.title for c in courses] == ["Git"]
