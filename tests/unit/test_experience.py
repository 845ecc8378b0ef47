"""Tests for years-of-experience, bucketing, and bucket label parsing."""

from datetime import date, datetime, timezone

import pytest

from marketfit.profile.experience import (
    ExperienceBucket,
    bucket_distance,
    experience_bucket,
    parse_date,
    years_of_experience,
)
from marketfit.profile.schema import Profile

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _profile(*entries: dict[str, object]) -> Profile:
    return Profile.model_validate({"experience": list(entries)})


class TestYearsOfExperience:
    def test_no_entries(self) -> None:
        assert years_of_experience(Profile(), NOW) == 0.0

    def test_closed_range(self) -> None:
        assert years_of_experience(_profile({"start": "2020-01-01", "end": "2022-01-01"}), NOW) == 2.0

    def test_ongoing_job(self) -> None:
        assert years_of_experience(_profile({"start": "2023-01-01", "end": "present"}), NOW) == 1.0

    def test_missing_end_is_ongoing(self) -> None:
        assert years_of_experience(_profile({"start": "2021-01-01"}), NOW) == 3.0

    def test_missing_start_skipped(self) -> None:
        assert years_of_experience(_profile({"end": "2020-01-01"}), NOW) == 0.0

    def test_reversed_range_contributes_nothing(self) -> None:
        profile = _profile(
            {"start": "2022-01-01", "end": "2020-01-01"},
            {"start": "2022-01-01", "end": "2023-01-01"},
        )
        assert years_of_experience(profile, NOW) == 1.0

    def test_entries_summed(self) -> None:
        profile = _profile(
            {"from": "2016-01", "to": "2019-01"},
            {"dateStart": "01.2019", "dateEnd": "01.2021"},
        )
        assert years_of_experience(profile, NOW) == 5.0

    def test_unparseable_start_skipped(self) -> None:
        assert years_of_experience(_profile({"start": "sometime"}), NOW) == 0.0


class TestExperienceBucket:
    @pytest.mark.parametrize(
        ("years", "bucket"),
        [
            (0.0, ExperienceBucket.NO_EXPERIENCE),
            (0.9, ExperienceBucket.NO_EXPERIENCE),
            (1.0, ExperienceBucket.BETWEEN_1_AND_3),
            (2.9, ExperienceBucket.BETWEEN_1_AND_3),
            (3.0, ExperienceBucket.BETWEEN_3_AND_6),
            (6.0, ExperienceBucket.MORE_THAN_6),
        ],
    )
    def test_thresholds(self, years: float, bucket: ExperienceBucket) -> None:
        assert experience_bucket(years) is bucket

    def test_distance(self) -> None:
        assert bucket_distance(ExperienceBucket.NO_EXPERIENCE, ExperienceBucket.MORE_THAN_6) == 3
        assert bucket_distance(ExperienceBucket.BETWEEN_3_AND_6, ExperienceBucket.BETWEEN_1_AND_3) == 1


class TestParseBucket:
    def test_canonical_ids(self) -> None:
        assert ExperienceBucket.parse("between1And3") is ExperienceBucket.BETWEEN_1_AND_3

    def test_api_object(self) -> None:
        value = {"id": "between3And6", "name": "От 3 до 6 лет"}
        assert ExperienceBucket.parse(value) is ExperienceBucket.BETWEEN_3_AND_6

    def test_labels(self) -> None:
        assert ExperienceBucket.parse("none") is ExperienceBucket.NO_EXPERIENCE
        assert ExperienceBucket.parse("1–3") is ExperienceBucket.BETWEEN_1_AND_3
        assert ExperienceBucket.parse("3-6") is ExperienceBucket.BETWEEN_3_AND_6
        assert ExperienceBucket.parse("6+") is ExperienceBucket.MORE_THAN_6

    def test_unknown(self) -> None:
        assert ExperienceBucket.parse("junior") is None
        assert ExperienceBucket.parse(None) is None
        assert ExperienceBucket.parse({"name": "no id"}) is None


class TestParseDate:
    def test_formats(self) -> None:
        assert parse_date("2020-05") == datetime(2020, 5, 1, tzinfo=timezone.utc)
        assert parse_date("05.2020") == datetime(2020, 5, 1, tzinfo=timezone.utc)
        assert parse_date("2020-05-17T10:00:00Z") == datetime(2020, 5, 17, 10, tzinfo=timezone.utc)

    def test_date_object(self) -> None:
        assert parse_date(date(2020, 5, 17)) == datetime(2020, 5, 17, tzinfo=timezone.utc)

    def test_garbage(self) -> None:
        assert parse_date("soon") is None
        assert parse_date("") is None
        assert parse_date(42) is None
