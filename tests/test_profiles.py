from __future__ import annotations

import pytest

from career_coach.errors import ValidationFailedError
from career_coach.profiles import ProfileUpdateRequest


def test_request_normalises_optional_fields() -> None:
    request = ProfileUpdateRequest.from_payload(
        {"industry": " tech-software ", "experience": "4", "bio": "   ", "skills": ["Go", " Go", "", "SQL"]}
    )

    assert request.industry == "tech-software"
    assert request.experience == 4
    assert request.bio is None
    assert request.skills == ["Go", "SQL"]


@pytest.mark.parametrize("experience", [-1, "three", 2.5, True, None, [3], "²", "-3", "1.5"])
def test_invalid_experience_is_treated_as_absent(experience: object) -> None:
    request = ProfileUpdateRequest.from_payload({"industry": "finance", "experience": experience})
    assert request.experience is None


def test_zero_years_of_experience_is_kept() -> None:
    assert ProfileUpdateRequest.from_payload({"industry": "finance", "experience": 0}).experience == 0


@pytest.mark.parametrize("skills", ["Go, SQL", None, {"Go": 1}, ["Go", 3]])
def test_skills_that_are_not_a_list_of_strings_become_empty(skills: object) -> None:
    assert ProfileUpdateRequest.from_payload({"industry": "finance", "skills": skills}).skills == []


@pytest.mark.parametrize("payload", [{}, {"industry": ""}, {"industry": "   "}, {"industry": None}])
def test_industry_is_required(payload: dict) -> None:
    with pytest.raises(ValidationFailedError, match="Industry is required"):
        ProfileUpdateRequest.from_payload(payload)


def test_non_mapping_payload_is_rejected() -> None:
    with pytest.raises(ValidationFailedError):
        ProfileUpdateRequest.from_payload(["industry", "finance"])
