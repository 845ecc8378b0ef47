"""Role guessing from profile text, with skill-cluster and default fallbacks."""

import logging
import re

from marketfit.profile.schema import Profile
from marketfit.profile.skills import normalize_profile_skills

logger = logging.getLogger(__name__)

DEFAULT_ROLES: tuple[str, ...] = ("Business Analyst", "Project Manager")

# Checked in order against explicit role fields + summary + experience titles.
ROLE_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    ("Project Manager", re.compile(
        r"project\s*manager|руководитель\s*проект(ов|а)|менеджер\s*проекта|\bpm\b", re.IGNORECASE)),
    ("Product Manager", re.compile(
        r"product\s*manager|продакт(\s*менеджер)?", re.IGNORECASE)),
    ("Business Analyst", re.compile(
        r"business\s*analyst|бизнес[-\s]?аналитик", re.IGNORECASE)),
    ("System Analyst", re.compile(
        r"system\s*analyst|системн(ый|ого)\s*аналитик", re.IGNORECASE)),
    ("Data Engineer", re.compile(
        r"data\s*engineer|инженер\s*данных|\betl\b", re.IGNORECASE)),
    ("Data Analyst", re.compile(
        r"data\s*analyst|аналитик\s*данных", re.IGNORECASE)),
    ("Data Scientist", re.compile(
        r"data\s*scientist|ml\s*research", re.IGNORECASE)),
    ("ML Engineer", re.compile(
        r"ml\s*engineer|machine\s*learning|машинн(ого|ое)\s*обучени", re.IGNORECASE)),
    ("QA Engineer", re.compile(
        r"\bqa\b|quality\s*assurance|тестировщик|инженер\s*по\s*тестированию", re.IGNORECASE)),
    ("Frontend Developer", re.compile(
        r"front[\s-]*end|фронт[\s-]*енд|javascript\s*developer|react\s*developer", re.IGNORECASE)),
    ("Backend Developer", re.compile(
        r"back[\s-]*end|бэк[\s-]*енд|серверн(ый|ая)\s*разработчик", re.IGNORECASE)),
    ("Fullstack Developer", re.compile(
        r"full[\s-]*stack|фулл[\s-]*стек", re.IGNORECASE)),
    ("DevOps Engineer", re.compile(
        r"devops|platform\s*engineer|\bsre\b", re.IGNORECASE)),
    ("Android Developer", re.compile(r"android\s*developer", re.IGNORECASE)),
    ("iOS Developer", re.compile(r"ios\s*developer", re.IGNORECASE)),
    ("UI/UX Designer", re.compile(
        r"ui/ux|ux/ui|product\s*designer|web\s*designer", re.IGNORECASE)),
    ("Marketing Specialist", re.compile(
        r"marketing|маркетолог|\bsmm\b", re.IGNORECASE)),
]

# Skill-interest clusters in priority order: (role, canonical skills).
SKILL_CLUSTERS: list[tuple[str, frozenset[str]]] = [
    ("Frontend Developer", frozenset(
        {"react", "javascript", "typescript", "html", "css", "vue", "angular", "redux", "next"})),
    ("Backend Developer", frozenset(
        {"node", "express", "nest", "django", "flask", "fastapi", "spring", "dotnet",
         "laravel", "php", "go", "java"})),
    ("Data Analyst", frozenset(
        {"sql", "excel", "python", "power bi", "tableau", "pandas"})),
    ("Business Analyst", frozenset(
        {"requirements", "uml", "bpmn", "jira", "confluence"})),
    ("UI/UX Designer", frozenset({"figma", "ui/ux", "prototyping"})),
]

# Growth directions offered when the candidate already covers market demand.
ADVANCED_SKILLS_BY_ROLE: dict[str, list[str]] = {
    "Frontend Developer": ["Accessibility", "Performance", "GraphQL", "Testing"],
    "Backend Developer": ["API Design", "SQL Optimization", "Caching", "Security"],
    "Fullstack Developer": ["System Design", "DevOps Basics", "Testing"],
    "Data Analyst": ["SQL Optimization", "A/B Testing", "Power BI DAX", "Python Visualization"],
    "Data Scientist": ["Feature Engineering", "Model Monitoring", "MLOps"],
    "Data Engineer": ["Orchestration", "Stream Processing", "Observability"],
    "ML Engineer": ["MLOps", "Optimization", "Experiment Tracking"],
    "QA Engineer": ["Automation", "Performance Testing", "CI/CD Testing"],
    "DevOps Engineer": ["IaC", "Observability", "Security"],
    "Business Analyst": ["BPMN 2.0", "Prototyping", "System Analysis"],
    "System Analyst": ["System Analysis", "Requirements Elicitation", "Prototyping"],
    "Project Manager": ["People Management", "Budgeting", "Roadmapping", "Metrics"],
    "Product Manager": ["Product Analytics", "Customer Development", "Roadmapping"],
    "Marketing Specialist": ["CRO", "Email Marketing", "Marketing Analytics"],
    "UI/UX Designer": ["Design Systems", "Accessibility", "Motion Basics"],
}

GENERIC_ADVANCED_SKILLS: list[str] = ["Communication", "Presentation"]


def role_haystack(profile: Profile) -> str:
    """Text searched for role names."""
    parts = [profile.target_title, profile.desired_role, profile.position, profile.summary]
    parts.extend(e.title for e in profile.experience)
    return " ".join(p for p in parts if p)


def guess_roles(
    profile: Profile,
    skills: list[str] | None = None,
    *,
    max_roles: int = 3,
) -> list[str]:
    """Guess up to ``max_roles`` target roles for a profile, first match first.

    1. Role-name patterns against the profile's own words.
    2. Otherwise, skill clusters hit by the candidate's canonical skills.
    3. Otherwise, the two default roles.
    """
    haystack = role_haystack(profile)
    roles = [title for title, rx in ROLE_PATTERNS if rx.search(haystack)]

    if not roles:
        skill_set = set(skills if skills is not None else normalize_profile_skills(profile))
        roles = [title for title, cluster in SKILL_CLUSTERS if skill_set & cluster]
        if roles:
            logger.debug("Roles from skill clusters: %s", roles)

    if not roles:
        roles = list(DEFAULT_ROLES)

    return list(dict.fromkeys(roles))[:max_roles]


def advanced_skills_for(role: str) -> list[str]:
    """Lowercase growth skills for a role (generic list for unknown roles)."""
    return [s.lower() for s in ADVANCED_SKILLS_BY_ROLE.get(role, GENERIC_ADVANCED_SKILLS)]
