"""Core data models for the market-fit engine.

Results are frozen and serialise with camelCase keys (``marketFitScore``,
``growSkills``) for the web client; Python code uses the snake_case names.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from marketfit.profile.experience import ExperienceBucket

Source = Literal["external", "smart", "fallback"]

MIN_SCORE = 10
MAX_SCORE = 95


class _Wire(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class RecommendOptions(_Wire):
    """Per-request options."""

    area_id: str | None = None
    language: str = "ru"
    focus_role: str | None = None
    seed_skills: list[str] = Field(default_factory=list)

    @field_validator("area_id", mode="before")
    @classmethod
    def area_as_text(cls, v: Any) -> str | None:
        if v is None or v == "":
            return None
        return str(v)


class SearchPage(BaseModel):
    """One page of vacancy search results (ids only)."""

    model_config = ConfigDict(frozen=True)

    ids: list[str]
    pages: int | None = None
    found: int | None = None


class VacancySignals(BaseModel):
    """Skills and experience bucket extracted from one vacancy payload."""

    model_config = ConfigDict(frozen=True)

    vacancy_id: str
    title: str = ""
    skills: list[str] = Field(default_factory=list)
    experience: ExperienceBucket | None = None


class RoleStat(BaseModel):
    """Per-role search result accumulated during one run."""

    role: str
    count: int = 0
    ids: list[str] = Field(default_factory=list)
    search_failed: bool = False


class SkillCount(_Wire):
    name: str
    freq: int


class RoleSummary(_Wire):
    """A recommended role with its market numbers."""

    title: str
    vacancies: int = 0
    query: str = ""
    top_skills: list[SkillCount] = Field(default_factory=list)
    url: str = ""
    sampled_ids: list[str] = Field(default_factory=list)


class SkillGap(_Wire):
    """A market-demanded skill the candidate lacks."""

    name: str
    demand: int = 1
    gap: bool = True
    advanced: bool = False


class Course(_Wire):
    provider: str
    title: str
    url: str = ""
    duration: str = ""


class DebugInfo(_Wire):
    """Provenance of a result: which tier produced it and from what."""

    source: Source
    fallback: bool = False
    skills_detected: list[str] = Field(default_factory=list)
    roles_guessed: list[str] = Field(default_factory=list)
    area_used: str | None = None
    language: str = "ru"
    sample_vacancies: int = 0
    top_demand: list[SkillCount] = Field(default_factory=list)
    user_years: float = 0.0
    experience_bucket: ExperienceBucket | None = None
    host: str = ""
    timings_ms: dict[str, int] = Field(default_factory=dict)
    tier_errors: dict[str, str] = Field(default_factory=dict)


class RecommendationResult(_Wire):
    """Final payload returned to the caller."""

    market_fit_score: int = Field(ge=MIN_SCORE, le=MAX_SCORE)
    roles: list[RoleSummary] = Field(default_factory=list)
    grow_skills: list[SkillGap] = Field(default_factory=list)
    courses: list[Course] = Field(default_factory=list)
    debug: DebugInfo

    @property
    def skills_to_grow(self) -> list[str]:
        return [g.name[:1].upper() + g.name[1:] for g in self.grow_skills]

    def to_wire(self) -> dict[str, object]:
        """JSON-ready dict, including the legacy ``skillsToGrow`` list."""
        data = self.model_dump(mode="json", by_alias=True)
        data["skillsToGrow"] = self.skills_to_grow
        return data


class CacheStats(_Wire):
    size: int
    hits: int
    misses: int
    ttl_ms: int
    sweeping: bool


class HealthReport(_Wire):
    """Read-only view of runtime limits and cache state."""

    status: Literal["ok"] = "ok"
    cache: CacheStats
    pool_size: int
    sample_pages: int
    per_page: int
    vacancy_sample_per_role: int
    fetch_timeout_ms: int
    retries: int
    external_provider: str | None = None
    course_provider: str = "static"
