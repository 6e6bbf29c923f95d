from __future__ import annotations

import pytest
from pydantic import ValidationError

from festmatch.catalog.models import Month
from festmatch.recommendations.models import (
    AudiencePreference,
    Budget,
    Criteria,
    Dimension,
    DurationPreference,
    Flexibility,
)


def test_defaults_are_neutral():
    criteria = Criteria()
    assert criteria.categories == ()
    assert criteria.budget is None
    assert criteria.audience_preference is AudiencePreference.any
    assert criteria.family_friendly == "any"
    assert criteria.category_importance == 0.5
    assert criteria.budget_flexibility is Flexibility.flexible


def test_from_answers_accepts_questionnaire_keys():
    criteria = Criteria.from_answers({
        "genres": ["Rock", "Pop", "Rock"],
        "budget": {"min": 100, "max": 500},
        "months": ["july", "Aug"],
        "region": "europe",
        "vibes": "party, chill",
        "duration": "week+",
        "camping": True,
        "audienceSize": "intimate",
        "familyFriendly": "any",
        "genreImportance": 5,
        "budgetFlexibility": "very flexible",
        "dateFlexibility": "strict",
    })
    assert criteria.categories == ("Rock", "Pop")
    assert criteria.budget == Budget(min=100, max=500)
    assert criteria.months == (Month.July, Month.August)
    assert criteria.region == "europe"
    assert criteria.vibes == ("party", "chill")
    assert criteria.duration_preference is DurationPreference.week_plus
    assert criteria.camping_required is True
    assert criteria.audience_preference is AudiencePreference.intimate
    assert criteria.category_importance == 1.0
    assert criteria.budget_flexibility is Flexibility.very_flexible
    assert criteria.date_flexibility is Flexibility.strict


def test_min_max_budget_keys():
    criteria = Criteria.from_answers({"minBudget": 100, "maxBudget": "400"})
    assert criteria.budget == Budget(min=100, max=400)


def test_invalid_fields_are_treated_as_absent():
    criteria = Criteria.from_answers({
        "categories": 42,
        "budget": {"min": 600, "max": 100},
        "months": ["Julember", "July"],
        "category_importance": 7,
        "duration_preference": "fortnight",
        "family_friendly": "sometimes",
        "audience_preference": ["massive"],
        "region": "   ",
    })
    assert criteria.categories == ()
    assert criteria.budget is None
    assert criteria.months == (Month.July,)
    assert criteria.category_importance == 0.5
    assert criteria.duration_preference is None
    assert criteria.family_friendly == "any"
    assert criteria.audience_preference is AudiencePreference.any
    assert criteria.region is None


def test_non_mapping_answers_give_default_criteria():
    assert Criteria.from_answers("not a mapping") == Criteria()
    assert Criteria.from_answers(None) == Criteria()


def test_direct_construction_is_lenient():
    criteria = Criteria(budget={"min": -5, "max": 100}, camping_required="yes")
    assert criteria.budget is None
    assert criteria.camping_required is True


def test_criteria_is_immutable():
    criteria = Criteria(categories=["rock"])
    with pytest.raises(ValidationError):
        criteria.categories = ("pop",)


def test_expressed_dimensions():
    assert Criteria().expressed_dimensions() == set()

    criteria = Criteria(
        categories=["rock"],
        months=["July"],
        region="anywhere",
        audience_preference="massive",
        camping_required=True,
    )
    assert criteria.expressed_dimensions() == {
        Dimension.category,
        Dimension.season,
        Dimension.crowd,
        Dimension.accessibility,
        Dimension.bonus,
    }
