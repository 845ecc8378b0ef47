"""Vacancy payload parsing: search pages and per-vacancy skill signals.

Missing optional fields never raise; a payload without an id is rejected.
"""

import logging
from typing import Any

from marketfit.core.schemas import SearchPage, VacancySignals
from marketfit.profile.experience import ExperienceBucket
from marketfit.profile.skills import extract_skill_names, find_lexicon_hits

logger = logging.getLogger(__name__)


def parse_search_page(payload: Any) -> SearchPage:
    """Pull vacancy ids and the page count from a search response.

    Raises ValueError if the payload is not a search result object.
    """
    if not isinstance(payload, dict):
        msg = f"Unexpected search payload type: {type(payload).__name__}"
        raise ValueError(msg)
    items = payload.get("items") or []
    ids = [str(item["id"]) for item in items if isinstance(item, dict) and item.get("id") is not None]
    pages = payload.get("pages")
    found = payload.get("found")
    return SearchPage(
        ids=ids,
        pages=pages if isinstance(pages, int) else None,
        found=found if isinstance(found, int) else None,
    )


def parse_vacancy(payload: Any) -> VacancySignals:
    """Extract canonical skills and the experience bucket from one vacancy.

    Skills come from the explicit key-skills list plus lexicon hits in the
    title, snippet, and description. An absent or unknown experience
    classification yields ``experience=None``.
    """
    if not isinstance(payload, dict) or payload.get("id") is None:
        msg = "Vacancy payload has no id"
        raise ValueError(msg)

    key_skills = [
        _text(k.get("name")) if isinstance(k, dict) else _text(k)
        for k in payload.get("key_skills") or []
    ]
    snippet = payload.get("snippet") if isinstance(payload.get("snippet"), dict) else {}
    text = " ".join(
        _text(x)
        for x in (
            payload.get("name"),
            snippet.get("requirement"),
            snippet.get("responsibility"),
            payload.get("description"),
        )
    )
    skills = extract_skill_names([*key_skills, *find_lexicon_hits(text)])

    return VacancySignals(
        vacancy_id=str(payload["id"]),
        title=_text(payload.get("name")),
        skills=skills,
        experience=ExperienceBucket.parse(payload.get("experience")),
    )


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)
