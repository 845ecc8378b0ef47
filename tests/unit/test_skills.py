"""Tests for skill splitting, canonicalization, and lexicon scanning."""

from marketfit.profile.schema import Profile
from marketfit.profile.skills import (
    canonical_skill,
    extract_skill_names,
    find_lexicon_hits,
    normalize_profile_skills,
    split_skill_tokens,
)


class TestCanonicalSkill:
    def test_lowercase_and_whitespace(self) -> None:
        assert canonical_skill("  Power   BI ") == "power bi"

    def test_aliases(self) -> None:
        assert canonical_skill("JS") == "javascript"
        assert canonical_skill("K8s") == "kubernetes"
        assert canonical_skill("Node.js") == "node"
        assert canonical_skill("PostgreSQL") == "postgres"
        assert canonical_skill("C#") == "csharp"
        assert canonical_skill("UX/UI") == "ui/ux"

    def test_unknown_passes_through(self) -> None:
        assert canonical_skill("Erlang") == "erlang"


class TestSplitSkillTokens:
    def test_delimiters(self) -> None:
        assert split_skill_tokens("React, Redux; Jest | Cypress") == ["react", "redux", "jest", "cypress"]

    def test_slash_splits_unknown_pairs(self) -> None:
        assert split_skill_tokens("HTML/CSS") == ["html", "css"]

    def test_known_slashed_skills_kept(self) -> None:
        assert split_skill_tokens("CI/CD, UI/UX, A/B Testing") == ["ci/cd", "ui/ux", "a/b testing"]

    def test_empty_pieces_dropped(self) -> None:
        assert split_skill_tokens(" , ;; ") == []


class TestExtractSkillNames:
    def test_dedupe_keeps_first_seen_order(self) -> None:
        assert extract_skill_names(["React", "JS, react", "JavaScript"]) == ["react", "javascript"]

    def test_mixed_fields(self) -> None:
        names = extract_skill_names(["React, Node.js", "JS/TypeScript", "CI/CD"])
        assert names == ["react", "node", "javascript", "typescript", "ci/cd"]


class TestFindLexiconHits:
    def test_whole_tokens_only(self) -> None:
        hits = find_lexicon_hits("Experience with JavaScript and React")
        assert "javascript" in hits
        assert "react" in hits
        assert "java" not in hits

    def test_symbols_in_tokens(self) -> None:
        hits = find_lexicon_hits("Backend on C# and .NET, some C++")
        assert {"c#", ".net", "c++"} <= set(hits)

    def test_ambiguous_words_not_scanned(self) -> None:
        hits = find_lexicon_hits("Go to the office, less meetings, express delivery")
        assert hits == []

    def test_empty_text(self) -> None:
        assert find_lexicon_hits("   ") == []


class TestNormalizeProfileSkills:
    def test_explicit_then_text(self) -> None:
        profile = Profile(skills=["React"], summary="I use SQL daily")
        assert normalize_profile_skills(profile) == ["react", "sql"]

    def test_experience_text_scanned(self) -> None:
        profile = Profile.model_validate({
            "experience": [{"title": "Analyst", "description": "Dashboards in Power BI and Excel"}],
        })
        assert normalize_profile_skills(profile) == ["excel", "power bi"]

    def test_empty_profile(self) -> None:
        assert normalize_profile_skills(Profile()) == []
