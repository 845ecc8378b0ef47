"""Profile model: the self-reported candidate data the engine reads.

Every field is optional. Validators coerce loose client payloads (nulls,
skill objects, stray non-dict entries) into one shape.
"""

from datetime import date, datetime
from pathlib import Path
from typing import Any

import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

_SKILL_NAME_KEYS = ("name", "title", "label", "value")


def _as_text(v: Any) -> str:
    if v is None:
        return ""
    return v if isinstance(v, str) else str(v)


class ExperienceEntry(BaseModel):
    """One job held by the candidate. Dates stay raw; see profile.experience."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    title: str = ""
    description: str = ""
    company: str = ""
    start: str | datetime | date | None = Field(
        default=None,
        validation_alias=AliasChoices("start", "from", "dateStart", "date_from", "startDate"),
    )
    end: str | datetime | date | None = Field(
        default=None,
        validation_alias=AliasChoices("end", "to", "dateEnd", "date_to", "endDate"),
    )

    @field_validator("title", "description", "company", mode="before")
    @classmethod
    def text_or_empty(cls, v: Any) -> str:
        return _as_text(v)

    @field_validator("start", "end", mode="before")
    @classmethod
    def date_like_or_none(cls, v: Any) -> str | datetime | date | None:
        """Keep strings and dates; a bare year number becomes ``"2019"``; drop the rest."""
        if isinstance(v, str | datetime | date):
            return v
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return None


class EducationEntry(BaseModel):
    """One education record."""

    model_config = ConfigDict(extra="ignore")

    degree: str = ""
    major: str = ""
    specialization: str = ""
    institution: str = ""

    @field_validator("degree", "major", "specialization", "institution", mode="before")
    @classmethod
    def text_or_empty(cls, v: Any) -> str:
        return _as_text(v)


class Profile(BaseModel):
    """Candidate profile as submitted by the client."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    summary: str = ""
    skills: list[str] = Field(default_factory=list)
    experience: list[ExperienceEntry] = Field(default_factory=list)
    education: list[EducationEntry] = Field(default_factory=list)
    target_title: str = Field(
        default="", validation_alias=AliasChoices("target_title", "targetTitle"),
    )
    desired_role: str = Field(
        default="", validation_alias=AliasChoices("desired_role", "desiredRole"),
    )
    position: str = ""

    @field_validator("summary", "target_title", "desired_role", "position", mode="before")
    @classmethod
    def text_or_empty(cls, v: Any) -> str:
        return _as_text(v)

    @field_validator("skills", mode="before")
    @classmethod
    def skill_names(cls, v: Any) -> list[str]:
        """Accept strings or objects like ``{"name": "React"}``."""
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        if not isinstance(v, list | tuple):
            return []
        names: list[str] = []
        for item in v:
            if isinstance(item, dict):
                name = next((item[k] for k in _SKILL_NAME_KEYS if item.get(k)), "")
                names.append(_as_text(name))
            elif item is not None:
                names.append(_as_text(item))
        return [n for n in names if n.strip()]

    @field_validator("experience", "education", mode="before")
    @classmethod
    def dict_entries_only(cls, v: Any) -> list[Any]:
        if not isinstance(v, list | tuple):
            return []
        return [item for item in v if isinstance(item, dict | BaseModel)]

    @property
    def is_empty(self) -> bool:
        return not (
            self.summary.strip()
            or self.skills
            or self.experience
            or self.education
            or self.target_title.strip()
            or self.desired_role.strip()
            or self.position.strip()
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Profile":
        """Load a profile from a YAML (or JSON) file."""
        path = Path(path)
        if not path.exists():
            msg = f"Profile file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
