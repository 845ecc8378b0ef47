"""Market-fit scoring: demand ranking, skill gaps, and the composite score.

Score = round(100 * (0.60 * skill_fit + 0.25 * exp_fit + 0.15 * role_hit)),
clamped to [10, 95]. Frequency ties keep first-seen order.
"""

import logging
from collections import Counter
from collections.abc import Iterable, Sequence

from marketfit.core.schemas import MAX_SCORE, MIN_SCORE, SkillCount, SkillGap
from marketfit.profile.experience import ExperienceBucket, bucket_distance
from marketfit.profile.roles import advanced_skills_for

logger = logging.getLogger(__name__)

SKILL_WEIGHT = 0.60
EXPERIENCE_WEIGHT = 0.25
ROLE_WEIGHT = 0.15

TOP_DEMAND = 20
TOP_LOCAL = 5
MAX_GAPS = 8
MAX_ADVANCED_GAPS = 6

NEUTRAL_EXPERIENCE = 0.5

# bucket distance → match score
_DISTANCE_SCORES = {0: 1.0, 1: 0.7, 2: 0.4}
_FAR_SCORE = 0.1

# (vacancy count must exceed, role_hit)
_ROLE_HIT_STEPS: tuple[tuple[int, float], ...] = ((50, 1.0), (20, 0.7), (5, 0.4))
_ROLE_HIT_FLOOR = 0.2


def clamp_score(raw: float) -> int:
    """Round and clamp any raw score into [10, 95]."""
    return max(MIN_SCORE, min(MAX_SCORE, round(raw)))


def experience_match_score(user: ExperienceBucket, vacancy: ExperienceBucket | None) -> float:
    """1.0 exact, 0.7 adjacent, 0.4 two apart, 0.1 further; 0.5 if the vacancy is unknown."""
    if vacancy is None:
        return NEUTRAL_EXPERIENCE
    return _DISTANCE_SCORES.get(bucket_distance(user, vacancy), _FAR_SCORE)


def top_skills(freq: Counter[str], n: int) -> list[SkillCount]:
    """Top ``n`` skills by descending count; equal counts keep insertion order."""
    return [SkillCount(name=name, freq=count) for name, count in freq.most_common(n)]


def role_hit_score(vacancy_counts: Iterable[int]) -> float:
    """Market-volume signal from the busiest role's raw vacancy count."""
    busiest = max(vacancy_counts, default=0)
    for threshold, score in _ROLE_HIT_STEPS:
        if busiest > threshold:
            return score
    return _ROLE_HIT_FLOOR


def skill_fit(candidate_skills: Iterable[str], demand: Sequence[SkillCount]) -> float:
    """Share of the top-demand slots covered by the candidate (0 when no demand)."""
    if not demand:
        return 0.0
    demand_names = {d.name for d in demand}
    overlap = len(set(candidate_skills) & demand_names)
    return overlap / TOP_DEMAND


def experience_fit(scores: Sequence[float]) -> float:
    if not scores:
        return NEUTRAL_EXPERIENCE
    return sum(scores) / len(scores)


def compute_market_fit(
    candidate_skills: Iterable[str],
    demand: Sequence[SkillCount],
    experience_scores: Sequence[float],
    vacancy_counts: Iterable[int],
) -> int:
    """Composite market-fit score in [10, 95]."""
    s_fit = skill_fit(candidate_skills, demand)
    e_fit = experience_fit(experience_scores)
    r_hit = role_hit_score(vacancy_counts)
    raw = 100 * (SKILL_WEIGHT * s_fit + EXPERIENCE_WEIGHT * e_fit + ROLE_WEIGHT * r_hit)
    score = clamp_score(raw)
    logger.debug(
        "Market fit: skill=%.2f exp=%.2f role=%.2f -> %d", s_fit, e_fit, r_hit, score,
    )
    return score


def compute_skill_gaps(
    candidate_skills: Iterable[str],
    demand: Sequence[SkillCount],
    primary_role: str | None,
) -> list[SkillGap]:
    """Demand-ranked skills the candidate lacks (top 8).

    When the candidate already covers every demanded skill, fall back to the
    primary role's advanced directions (top 6, flagged ``advanced``).
    """
    owned = set(candidate_skills)
    gaps = [SkillGap(name=d.name, demand=d.freq) for d in demand if d.name not in owned]
    if gaps:
        return gaps[:MAX_GAPS]
    if primary_role is None:
        return []
    advanced = [s for s in advanced_skills_for(primary_role) if s not in owned]
    return [SkillGap(name=s, demand=1, advanced=True) for s in advanced[:MAX_ADVANCED_GAPS]]
