"""Tests for the profile model and profile loading."""

from datetime import date
from pathlib import Path
from textwrap import dedent

import pytest

from marketfit.profile.experience import years_of_experience
from marketfit.profile.schema import Profile


class TestProfile:
    def test_empty(self) -> None:
        profile = Profile()
        assert profile.is_empty
        assert profile.skills == []

    def test_skill_objects_reduced_to_names(self) -> None:
        profile = Profile.model_validate({
            "skills": ["React", {"name": "SQL"}, {"title": "Figma"}, {"level": 3}, None, "  "],
        })
        assert profile.skills == ["React", "SQL", "Figma"]

    def test_single_skill_string(self) -> None:
        assert Profile.model_validate({"skills": "Python"}).skills == ["Python"]

    def test_camel_case_aliases(self) -> None:
        profile = Profile.model_validate({"targetTitle": "QA Engineer", "desiredRole": "SDET"})
        assert profile.target_title == "QA Engineer"
        assert profile.desired_role == "SDET"
        assert not profile.is_empty

    def test_null_fields_become_empty(self) -> None:
        profile = Profile.model_validate({"summary": None, "experience": None, "education": None})
        assert profile.summary == ""
        assert profile.experience == []

    def test_non_dict_entries_dropped(self) -> None:
        profile = Profile.model_validate({
            "experience": [{"title": "Dev", "from": "2020-01"}, "junk", 3],
            "education": ["junk", {"degree": "BSc", "major": "CS"}],
        })
        assert len(profile.experience) == 1
        assert profile.experience[0].start == "2020-01"
        assert profile.education[0].major == "CS"

    def test_extra_fields_ignored(self) -> None:
        profile = Profile.model_validate({"fullName": "Aigerim", "skills": ["SQL"]})
        assert profile.skills == ["SQL"]

    def test_unknown_date_shapes_become_none(self) -> None:
        profile = Profile.model_validate({
            "experience": [
                {"title": "Dev", "start": {"year": 2020, "month": 1}, "end": [2021, 5]},
                {"title": "QA", "start": True},
            ],
        })
        assert [(e.start, e.end) for e in profile.experience] == [(None, None), (None, None)]

    def test_bare_year_number_kept_as_year(self) -> None:
        profile = Profile.model_validate({"experience": [{"title": "Dev", "start": 2019, "end": 2021}]})
        assert profile.experience[0].start == "2019"
        assert years_of_experience(profile) == 2.0

    def test_date_objects_kept(self) -> None:
        profile = Profile.model_validate({"experience": [{"start": date(2020, 3, 1)}]})
        assert profile.experience[0].start == date(2020, 3, 1)


class TestProfileFromYaml:
    def test_load(self, tmp_path: Path) -> None:
        path = tmp_path / "profile.yaml"
        path.write_text(dedent("""\
            summary: Analyst
            skills: [SQL, Excel]
            experience:
              - title: Data Analyst
                start: "2021-01-01"
                end: present
        """))
        profile = Profile.from_yaml(path)
        assert profile.skills == ["SQL", "Excel"]
        assert profile.experience[0].end == "present"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            Profile.from_yaml(tmp_path / "nope.yaml")
