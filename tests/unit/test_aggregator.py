"""Tests for the market aggregator tier with an in-memory vacancy source."""

import logging
from collections.abc import Sequence
from typing import Any

import pytest

from marketfit.core.config import MarketConfig
from marketfit.core.errors import MarketUnavailableError, UpstreamError
from marketfit.core.schemas import Course, RecommendOptions, SearchPage, SkillGap
from marketfit.pipeline.aggregator import MarketAggregator
from marketfit.pipeline.courses import CourseLookup
from marketfit.platforms.base import VacancySource
from marketfit.platforms.hh.searcher import build_public_search_url
from marketfit.profile.experience import ExperienceBucket
from marketfit.profile.schema import Profile


class FakeSource(VacancySource):
    """Serves canned search pages (per role) and vacancy payloads (per id)."""

    def __init__(
        self,
        searches: dict[str, list[list[str]]],
        vacancies: dict[str, dict[str, Any]],
        *,
        failing_roles: Sequence[str] = (),
        failing_ids: Sequence[str] = (),
    ) -> None:
        self.searches = searches
        self.vacancies = vacancies
        self.failing_roles = set(failing_roles)
        self.failing_ids = set(failing_ids)
        self.search_calls: list[tuple[str, str | None, int]] = []
        self.detail_calls: list[str] = []

    @property
    def platform_id(self) -> str:
        return "fake"

    @property
    def host(self) -> str:
        return "hh.kz"

    async def search_page(self, text: str, *, area_id: str | None = None, page: int = 0) -> SearchPage:
        self.search_calls.append((text, area_id, page))
        if text in self.failing_roles:
            raise UpstreamError(503, f"search:{text}")
        pages = self.searches.get(text, [])
        ids = pages[page] if page < len(pages) else []
        return SearchPage(ids=ids, pages=len(pages), found=sum(len(p) for p in pages))

    async def get_vacancy(self, vacancy_id: str) -> dict[str, Any]:
        self.detail_calls.append(vacancy_id)
        if vacancy_id in self.failing_ids:
            raise UpstreamError(404, f"vacancy:{vacancy_id}")
        return self.vacancies[vacancy_id]

    def public_search_url(self, text: str, area_id: str | None = None) -> str:
        return build_public_search_url(self.host, text, area_id)


def _vacancy(vid: str, skills: list[str], experience: str | None = None) -> dict[str, Any]:
    payload: dict[str, Any] = {"id": vid, "name": "Vacancy", "key_skills": [{"name": s} for s in skills]}
    if experience:
        payload["experience"] = {"id": experience}
    return payload


def _aggregator(source: VacancySource, lookup: CourseLookup | None = None, **market: Any) -> MarketAggregator:
    return MarketAggregator(source, MarketConfig(**market), lookup)


FRONTEND = Profile(target_title="Frontend Developer")


# ---------------------------------------------------------------------------
# Demand and scoring
# ---------------------------------------------------------------------------


class TestRecommend:
    async def test_profile_with_two_clusters(self) -> None:
        source = FakeSource(
            {"Frontend Developer": [["1"]], "Backend Developer": [["2"]]},
            {
                "1": _vacancy("1", ["React"], "noExperience"),
                "2": _vacancy("2", ["Node.js", "Docker"], "between1And3"),
            },
        )
        result = await _aggregator(source).recommend(
            Profile(skills=["React", "Node.js"]), RecommendOptions(),
        )
        assert result.debug.roles_guessed == ["Frontend Developer", "Backend Developer"]
        assert result.debug.experience_bucket is ExperienceBucket.NO_EXPERIENCE
        assert result.debug.source == "smart"
        assert result.debug.fallback is False
        assert 10 <= result.market_fit_score <= 60
        assert [g.name for g in result.grow_skills] == ["docker"]

    async def test_demand_ranking(self) -> None:
        source = FakeSource(
            {"Frontend Developer": [["1", "2"]]},
            {"1": _vacancy("1", ["React"]), "2": _vacancy("2", ["React, SQL"])},
        )
        result = await _aggregator(source).recommend(FRONTEND, RecommendOptions())
        assert [(s.name, s.freq) for s in result.debug.top_demand] == [("react", 2), ("sql", 1)]
        role = result.roles[0]
        assert role.vacancies == 2
        assert [s.name for s in role.top_skills] == ["react", "sql"]
        assert role.url == "https://hh.kz/search/vacancy?text=Frontend+Developer"
        assert result.debug.sample_vacancies == 2

    async def test_unknown_experience_is_neutral(self) -> None:
        source = FakeSource({"Frontend Developer": [["1"]]}, {"1": _vacancy("1", ["React"])})
        result = await _aggregator(source).recommend(FRONTEND, RecommendOptions())
        # skill 0.6 * 0 + exp 0.25 * 0.5 + role 0.15 * 0.2
        assert 15 <= result.market_fit_score <= 16

    async def test_advanced_gaps_when_demand_covered(self) -> None:
        source = FakeSource({"Frontend Developer": [["1"]]}, {"1": _vacancy("1", ["React"])})
        profile = Profile(target_title="Frontend Developer", skills=["React"])
        result = await _aggregator(source).recommend(profile, RecommendOptions())
        assert result.grow_skills
        assert all(g.advanced for g in result.grow_skills)
        assert result.grow_skills[0].name == "accessibility"

    async def test_courses_from_gaps(self) -> None:
        source = FakeSource({"Frontend Developer": [["1"]]}, {"1": _vacancy("1", ["TypeScript"])})
        result = await _aggregator(source).recommend(FRONTEND, RecommendOptions())
        assert len(result.courses) == 3
        assert "typescript" in result.courses[0].url

    async def test_course_lookup_used(self) -> None:
        class Lookup(CourseLookup):
            @property
            def provider_id(self) -> str:
                return "stub"

            async def lookup(self, gaps: Sequence[SkillGap], keywords: str) -> list[Course]:
                return [Course(provider="Stepik", title=f"{keywords} course")]

        source = FakeSource({"Frontend Developer": [["1"]]}, {"1": _vacancy("1", ["TypeScript"])})
        result = await _aggregator(source, Lookup()).recommend(FRONTEND, RecommendOptions())
        assert [c.title for c in result.courses] == ["typescript course"]


# ---------------------------------------------------------------------------
# Sampling
# ---------------------------------------------------------------------------


class TestSampling:
    async def test_pages_limited_and_ids_deduped(self) -> None:
        source = FakeSource(
            {"Frontend Developer": [["1", "2"], ["2", "3"], ["4"]]},
            {v: _vacancy(v, ["React"]) for v in "1234"},
        )
        result = await _aggregator(source, sample_pages=2).recommend(
            FRONTEND, RecommendOptions(area_id="160"),
        )
        assert [c[2] for c in source.search_calls] == [0, 1]
        assert all(c[1] == "160" for c in source.search_calls)
        assert result.roles[0].vacancies == 3
        assert result.roles[0].sampled_ids == ["1", "2", "3"]

    async def test_stops_on_last_page(self) -> None:
        source = FakeSource({"Frontend Developer": [["1"]]}, {"1": _vacancy("1", ["React"])})
        await _aggregator(source, sample_pages=5).recommend(FRONTEND, RecommendOptions())
        assert len(source.search_calls) == 1

    async def test_sample_cap(self) -> None:
        ids = [str(i) for i in range(10)]
        source = FakeSource(
            {"Frontend Developer": [ids]}, {v: _vacancy(v, ["React"]) for v in ids},
        )
        result = await _aggregator(source, vacancy_sample_per_role=4).recommend(FRONTEND, RecommendOptions())
        assert result.roles[0].vacancies == 10
        assert len(source.detail_calls) == 4
        assert result.debug.sample_vacancies == 4

    async def test_failed_detail_skipped(self) -> None:
        source = FakeSource(
            {"Frontend Developer": [["1", "2"]]},
            {"1": _vacancy("1", ["React"])},
            failing_ids=["2"],
        )
        result = await _aggregator(source).recommend(FRONTEND, RecommendOptions())
        assert [(s.name, s.freq) for s in result.debug.top_demand] == [("react", 1)]

    async def test_one_failed_role_is_skipped(self) -> None:
        source = FakeSource(
            {"Backend Developer": [["1"]]},
            {"1": _vacancy("1", ["Django"])},
            failing_roles=["Frontend Developer"],
        )
        profile = Profile(skills=["React", "Django"])
        result = await _aggregator(source).recommend(profile, RecommendOptions())
        assert [(r.title, r.vacancies) for r in result.roles] == [
            ("Frontend Developer", 0),
            ("Backend Developer", 1),
        ]

    async def test_every_role_failed(self) -> None:
        source = FakeSource({}, {}, failing_roles=["Business Analyst", "Project Manager"])
        with pytest.raises(MarketUnavailableError):
            await _aggregator(source).recommend(Profile(), RecommendOptions())

    async def test_search_log_names_failure_kind_and_reported_total(
        self, caplog: pytest.LogCaptureFixture,
    ) -> None:
        source = FakeSource(
            {"Backend Developer": [["1", "2"], ["3"]]},
            {vid: _vacancy(vid, ["Django"]) for vid in ("1", "2", "3")},
            failing_roles=["Frontend Developer"],
        )
        with caplog.at_level(logging.INFO, logger="marketfit.pipeline.aggregator"):
            await _aggregator(source).recommend(Profile(skills=["React", "Django"]), RecommendOptions())
        assert "Search failed for 'Frontend Developer' page 0 (transient)" in caplog.text
        assert "Role 'Backend Developer': 3 vacancies collected (3 reported)" in caplog.text


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


class TestOptions:
    async def test_focus_role(self) -> None:
        source = FakeSource({"QA Engineer": [["1"]]}, {"1": _vacancy("1", ["Selenium"])})
        result = await _aggregator(source).recommend(FRONTEND, RecommendOptions(focus_role="QA Engineer"))
        assert result.debug.roles_guessed == ["QA Engineer"]
        assert [c[0] for c in source.search_calls] == ["QA Engineer"]

    async def test_seed_skills_merged(self) -> None:
        source = FakeSource({"Frontend Developer": [["1"]]}, {"1": _vacancy("1", ["React", "SQL"])})
        result = await _aggregator(source).recommend(
            Profile(target_title="Frontend Developer", skills=["React"]),
            RecommendOptions(seed_skills=["PostgreSQL", "sql"]),
        )
        assert result.debug.skills_detected == ["react", "postgres", "sql"]
        assert "sql" not in [g.name for g in result.grow_skills]
