from __future__ import annotations

from festmatch.catalog.models import Festival
from festmatch.recommendations.config import ScoringConfig
from festmatch.recommendations.explain import explain
from festmatch.recommendations.models import Criteria
from festmatch.recommendations.scoring import score_dimensions


def _festival(**overrides) -> Festival:
    record = {
        "id": "test-fest",
        "name": "Test Fest",
        "country": "Spain",
        "genres": ["electronic"],
        "estimated_cost_usd": {"min": 200, "max": 400},
        "months": ["July"],
        "audience_size": "large",
        "duration_days": 3,
        "vibe": ["party"],
    }
    record.update(overrides)
    return Festival.from_record(record)


def _reasons(festival: Festival, criteria: Criteria, config: ScoringConfig | None = None) -> list[str]:
    config = config or ScoringConfig()
    return explain(festival, criteria, score_dimensions(festival, criteria, config), config)


def _full_match(**extra) -> Criteria:
    return Criteria(
        categories=["electronic"],
        budget={"min": 100, "max": 500},
        months=["July"],
        region="Spain",
        **extra,
    )


def test_reasons_are_capped_and_ordered_by_weight():
    assert _reasons(_festival(), _full_match()) == [
        "Matches your preferred electronic",
        "Fits your budget",
        "Happens in July",
    ]


def test_low_category_importance_demotes_category_reason():
    assert _reasons(_festival(), _full_match(category_importance=0.0)) == [
        "Fits your budget",
        "Happens in July",
        "Matches your preferred electronic",
    ]


def test_max_reasons_is_configurable():
    reasons = _reasons(_festival(), _full_match(), ScoringConfig(max_reasons=5))
    assert reasons[-1] == "Located in Spain"
    assert len(reasons) == 4


def test_no_preferences_no_reasons():
    assert _reasons(_festival(), Criteria()) == []


def test_weak_dimensions_are_not_explained():
    criteria = Criteria(categories=["jazz"], months=["June"])
    assert _reasons(_festival(), criteria) == []


def test_camping_only():
    festival = _festival(camping=True, glamping=True)
    assert _reasons(festival, Criteria(camping_required=True)) == [
        "Meets your camping needs",
        "Offers camping, glamping",
    ]


def test_accessibility_reason_names_stated_needs():
    family_camp = _festival(camping=True, family_friendly=True)
    assert _reasons(family_camp, Criteria(camping_required=True, family_friendly=True)) == [
        "Meets your camping and family needs",
        "Offers camping, family-friendly facilities",
    ]

    assert _reasons(_festival(family_friendly=True), Criteria(family_friendly=True)) == [
        "Meets your family needs",
        "Offers family-friendly facilities",
    ]

    assert _reasons(_festival(family_friendly=False), Criteria(family_friendly=False)) == [
        "Meets your adults-only needs",
    ]


def test_category_reason_names_matched_tags():
    festival = _festival(genres=["techno", "house", "electronic"])
    reasons = _reasons(festival, Criteria(categories=["house", "techno"]))
    assert reasons == ["Matches your preferred techno & house"]


def test_vibe_duration_and_crowd_reasons():
    festival = _festival(vibe=["nature", "camping"], audience_size="small", duration_days=1)
    criteria = Criteria(vibes=["chill"], duration_preference="day", audience_preference="intimate")
    assert _reasons(festival, criteria) == [
        "Matches your chill vibe",
        "Right length for a one-day trip",
        "Intimate crowd, just as you like it",
    ]
