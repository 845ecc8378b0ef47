"""Profile clean-up: tidy skills and turn the summary into bullet lines."""

import re
from collections.abc import Mapping
from typing import Any

from marketfit.profile.schema import Profile

_SENTENCE_SPLIT = re.compile(r"[\n.]+")
BULLET = "•"


def _capitalize(s: str) -> str:
    return s[:1].upper() + s[1:]


def improve_profile(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``{"updated": ..., "changes": ...}`` for a raw profile payload.

    Unknown keys are passed through untouched. Skills are reduced to strings,
    trimmed, de-duplicated (first occurrence wins) and capitalised; the summary
    is split on line breaks and full stops into ``bullets``.
    """
    skills = Profile.model_validate({"skills": raw.get("skills")}).skills
    normalized = list(dict.fromkeys(_capitalize(s.strip()) for s in skills if s.strip()))

    summary = str(raw.get("summary") or "").strip()
    bullets = [f"{BULLET} {line.strip()}" for line in _SENTENCE_SPLIT.split(summary) if line.strip()]

    updated = {**raw, "skills": normalized, "bullets": bullets}
    if summary:
        updated["summary"] = summary
    else:
        updated.pop("summary", None)
    return {
        "updated": updated,
        "changes": {"skillsCount": len(normalized), "bulletsCount": len(bullets)},
    }
