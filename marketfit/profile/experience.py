"""Years-of-experience estimate and the experience bucket scale.

The canonical bucket ids are the vacancy API's own experience classification
ids, so vacancy payloads compare without translation. Other spellings
("1-3", "6+", "none") are mapped at the boundary by ExperienceBucket.parse.
"""

import logging
import re
from datetime import date, datetime, timezone
from enum import Enum

from marketfit.profile.schema import ExperienceEntry, Profile

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365.25
_SECONDS_PER_YEAR = DAYS_PER_YEAR * 24 * 60 * 60

_ONGOING = {"now", "present", "current", "today", "по настоящее время", "настоящее время"}

_DATE_FORMATS = ("%Y-%m", "%Y/%m", "%m.%Y", "%d.%m.%Y", "%m/%Y", "%Y")


class ExperienceBucket(str, Enum):
    """Ordered experience scale: none < 1-3 < 3-6 < 6+."""

    NO_EXPERIENCE = "noExperience"
    BETWEEN_1_AND_3 = "between1And3"
    BETWEEN_3_AND_6 = "between3And6"
    MORE_THAN_6 = "moreThan6"

    @property
    def rank(self) -> int:
        return _ORDER.index(self)

    @classmethod
    def parse(cls, value: object) -> "ExperienceBucket | None":
        """Map any known bucket spelling to a bucket; None for unknown/absent."""
        if isinstance(value, ExperienceBucket):
            return value
        if isinstance(value, dict):
            value = value.get("id")
        if not isinstance(value, str):
            return None
        key = value.strip().replace("–", "-").replace(" ", "")
        for bucket in cls:
            if key == bucket.value:
                return bucket
        return _ALIASES.get(key.lower())


_ORDER: list[ExperienceBucket] = list(ExperienceBucket)

_ALIASES: dict[str, ExperienceBucket] = {
    "none": ExperienceBucket.NO_EXPERIENCE,
    "noexperience": ExperienceBucket.NO_EXPERIENCE,
    "0": ExperienceBucket.NO_EXPERIENCE,
    "0-1": ExperienceBucket.NO_EXPERIENCE,
    "1-3": ExperienceBucket.BETWEEN_1_AND_3,
    "between1and3": ExperienceBucket.BETWEEN_1_AND_3,
    "3-6": ExperienceBucket.BETWEEN_3_AND_6,
    "between3and6": ExperienceBucket.BETWEEN_3_AND_6,
    "6+": ExperienceBucket.MORE_THAN_6,
    "morethan6": ExperienceBucket.MORE_THAN_6,
}


def experience_bucket(years: float) -> ExperienceBucket:
    """Bucket a years-of-experience figure."""
    if years < 1:
        return ExperienceBucket.NO_EXPERIENCE
    if years < 3:
        return ExperienceBucket.BETWEEN_1_AND_3
    if years < 6:
        return ExperienceBucket.BETWEEN_3_AND_6
    return ExperienceBucket.MORE_THAN_6


def bucket_distance(a: ExperienceBucket, b: ExperienceBucket) -> int:
    return abs(a.rank - b.rank)


def years_of_experience(profile: Profile, now: datetime | None = None) -> float:
    """Total years across experience entries, rounded to one decimal, never negative.

    Entries without a parseable start are skipped. A missing end means the
    job is ongoing. Ranges where end <= start contribute nothing.
    """
    now = now or datetime.now(timezone.utc)
    total_seconds = 0.0
    for entry in profile.experience:
        span = _entry_seconds(entry, now)
        if span > 0:
            total_seconds += span
    years = round(total_seconds / _SECONDS_PER_YEAR, 1)
    return max(0.0, years)


def _entry_seconds(entry: ExperienceEntry, now: datetime) -> float:
    start = parse_date(entry.start)
    if start is None:
        return 0.0
    end = now if _is_ongoing(entry.end) else parse_date(entry.end)
    if end is None:
        logger.debug("Unparseable end date %r for '%s' - skipping", entry.end, entry.title)
        return 0.0
    return (end - start).total_seconds()


def _is_ongoing(value: object) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and (not value.strip() or value.strip().lower() in _ONGOING)


def parse_date(value: object) -> datetime | None:
    """Parse the date shapes clients send. Returns an aware UTC datetime or None."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        parsed = _parse_date_text(value.strip())
        if parsed is None:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_date_text(text: str) -> datetime | None:
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass
    if re.fullmatch(r"\d{4}-\d{2}-\d{2}T.*", text):
        text = text[:10]
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None
