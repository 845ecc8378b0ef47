"""Skill normalization: delimiter splitting, lexicon scan, canonical names.

A canonical skill is a lowercase, alias-resolved token. It is the only form
used as a set member or frequency-map key anywhere in the engine.
"""

import logging
import re
from collections.abc import Iterable

from marketfit.profile.schema import Profile

logger = logging.getLogger(__name__)

# Known skill tokens scanned for in free text. Entries too ambiguous to find in
# prose ("R", "Go", "Less", "Express") are only recognised in explicit skill lists.
SKILL_LEXICON: tuple[str, ...] = (
    # Data / BI / analytics
    "Excel", "MS Excel", "Google Sheets", "Looker Studio", "Power Query", "Power Pivot",
    "SQL", "PostgreSQL", "Postgres", "MySQL", "SQLite", "NoSQL", "MongoDB", "Redis",
    "Power BI", "DAX", "Tableau", "Qlik", "Metabase",
    "Python", "Pandas", "NumPy", "SciPy", "Matplotlib", "Seaborn", "Plotly",
    "Statistics", "A/B Testing", "dbt", "Apache Airflow", "Airflow", "Kafka",
    "Spark", "Hadoop", "ClickHouse", "BigQuery", "Redshift", "LookML",
    # Frontend
    "JavaScript", "TypeScript", "HTML", "CSS", "Sass", "React", "Redux",
    "Next.js", "Vite", "Webpack", "Babel", "Vue", "Nuxt", "Angular", "Tailwind", "GraphQL",
    # Backend
    "Node.js", "Nest.js", "Django", "Flask", "FastAPI", "Spring Boot", "Spring",
    ".NET", "ASP.NET", "Laravel", "PHP", "Golang", "Java", "Kotlin", "C#", "C++", "Rust", "REST",
    # QA
    "Testing", "Unit testing", "Integration testing", "E2E", "Selenium", "Cypress",
    "Playwright", "Jest", "Mocha", "PyTest", "JMeter", "Postman", "Swagger", "Allure",
    # DevOps / cloud
    "Git", "GitHub", "GitLab", "CI/CD", "GitHub Actions", "Docker", "Kubernetes", "K8s",
    "Terraform", "Ansible", "NGINX", "Linux", "Bash", "Helm", "Prometheus", "Grafana",
    "AWS", "GCP", "Azure",
    # DS / ML
    "TensorFlow", "PyTorch", "Keras", "XGBoost", "CatBoost", "LightGBM",
    "Feature Engineering", "MLflow",
    # PM / BA / design / marketing
    "Agile", "Scrum", "Kanban", "Project Management", "Risk Management",
    "Stakeholder Management", "Requirements", "UML", "BPMN", "Jira", "Confluence",
    "Presentation", "Communication", "Roadmapping", "Figma", "UI/UX", "UX/UI",
    "Prototyping", "SEO", "SMM", "Digital Marketing", "Google Analytics", "Copywriting",
)

# alias (lowercase) → canonical
CANONICAL_SKILLS: dict[str, str] = {
    "ms excel": "excel",
    "google data studio": "looker studio",
    "postgresql": "postgres",
    "powerbi": "power bi",
    "apache airflow": "airflow",
    "apache kafka": "kafka",
    "apache spark": "spark",
    "js": "javascript",
    "ecmascript": "javascript",
    "ts": "typescript",
    "react.js": "react",
    "reactjs": "react",
    "next.js": "next",
    "nextjs": "next",
    "vue.js": "vue",
    "vuejs": "vue",
    "tailwindcss": "tailwind",
    "node.js": "node",
    "nodejs": "node",
    "nest.js": "nest",
    "nestjs": "nest",
    "spring boot": "spring",
    ".net": "dotnet",
    "asp.net": "dotnet",
    "golang": "go",
    "c#": "csharp",
    "c++": "cpp",
    "restful": "rest",
    "rest api": "rest",
    "k8s": "kubernetes",
    "nginx": "nginx",
    "ux/ui": "ui/ux",
    "amazon web services": "aws",
    "google cloud": "gcp",
    "sklearn": "scikit-learn",
}

_SPLIT_RE = re.compile(r"[,;|]+")
_SLASH_RE = re.compile(r"/+")

# Lowercase tokens containing "/" that must survive delimiter splitting.
_SLASHED: frozenset[str] = frozenset(
    t for t in {s.lower() for s in SKILL_LEXICON} | set(CANONICAL_SKILLS) | set(CANONICAL_SKILLS.values())
    if "/" in t
)


def canonical_skill(raw: str) -> str:
    """Lowercase, collapse whitespace, and resolve aliases. Unknown tokens pass through."""
    token = " ".join(raw.lower().split())
    return CANONICAL_SKILLS.get(token, token)


def split_skill_tokens(raw: str) -> list[str]:
    """Split a skill field on ``, ; / |`` into trimmed lowercase tokens.

    A slash is kept when the piece as a whole is a known slashed skill
    (``CI/CD``, ``UI/UX``, ``A/B Testing``).
    """
    tokens: list[str] = []
    for piece in _SPLIT_RE.split(raw):
        piece = " ".join(piece.lower().split())
        if not piece:
            continue
        if "/" in piece and piece not in _SLASHED:
            tokens.extend(p.strip() for p in _SLASH_RE.split(piece) if p.strip())
        else:
            tokens.append(piece)
    return tokens


def extract_skill_names(values: Iterable[str]) -> list[str]:
    """Canonical, de-duplicated skills from raw skill fields, in first-seen order."""
    seen: dict[str, None] = {}
    for raw in values:
        for token in split_skill_tokens(raw):
            name = canonical_skill(token)
            if name:
                seen.setdefault(name, None)
    return list(seen)


def find_lexicon_hits(text: str) -> list[str]:
    """Lexicon entries literally present in ``text`` (case-insensitive, whole tokens).

    Returned lowercase and in lexicon order; canonicalization is left to the caller.
    """
    haystack = text.lower()
    if not haystack.strip():
        return []
    return [token for token, rx in _LEXICON_PATTERNS if rx.search(haystack)]


def normalize_profile_skills(profile: Profile) -> list[str]:
    """All canonical skills a profile claims or mentions.

    Explicit skill tags come first, then lexicon hits from the summary,
    experience titles/descriptions, and education fields.
    """
    text = " ".join(
        [profile.summary]
        + [f"{e.title} {e.description}" for e in profile.experience]
        + [f"{e.degree} {e.major} {e.specialization}" for e in profile.education]
    )
    skills = extract_skill_names([*profile.skills, *find_lexicon_hits(text)])
    logger.debug("Profile skills: %s", skills)
    return skills


def _token_pattern(token: str) -> re.Pattern[str]:
    return re.compile(rf"(?<![a-z0-9_]){re.escape(token)}(?![a-z0-9_])")


_LEXICON_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = tuple(
    (t, _token_pattern(t)) for t in dict.fromkeys(s.lower() for s in SKILL_LEXICON)
)
