from __future__ import annotations

import pytest

from festmatch.catalog.loader import load_catalog
from festmatch.catalog.models import Festival
from festmatch.recommendations.config import ScoringConfig
from festmatch.recommendations.models import (
    Criteria,
    Dimension,
    FilterConstraints,
    RecommendOptions,
    Tier,
)
from festmatch.recommendations.retrieval import assign_tier, cluster, rank_catalog, recommend


@pytest.fixture(scope="module")
def festivals() -> list[Festival]:
    return load_catalog()


def _festival(name: str, genres: list[str], **overrides) -> Festival:
    record = {
        "id": name.lower().replace(" ", "-"),
        "name": name,
        "country": "Spain",
        "genres": genres,
        "estimated_cost_usd": {"min": 200, "max": 400},
        "months": ["July"],
        "audience_size": "large",
        "duration_days": 3,
    }
    record.update(overrides)
    return Festival.from_record(record)


MATCHING = Criteria(
    categories=["electronic"],
    budget={"min": 100, "max": 500},
    months=["July"],
    region="Spain",
)


def test_empty_catalog_returns_empty_list():
    assert recommend([], MATCHING) == []


def test_results_are_deterministic(festivals):
    first = recommend(festivals, MATCHING, RecommendOptions(include_below_threshold=True))
    second = recommend(festivals, MATCHING, RecommendOptions(include_below_threshold=True))
    assert [r.model_dump() for r in first] == [r.model_dump() for r in second]


def test_results_are_ranked_by_score(festivals):
    results = recommend(festivals, MATCHING, RecommendOptions(include_below_threshold=True))
    assert len(results) == len(festivals)
    scores = [r.overall_score for r in results]
    assert scores == sorted(scores, reverse=True)


def test_ties_break_on_category_then_name():
    catalog = [
        _festival("Zed Fest", ["rock"]),
        _festival("Abba Days", ["pop"]),
        _festival("Mid Fest", ["rock"]),
    ]
    config = ScoringConfig(weights={Dimension.budget: 1.0})
    results = recommend(catalog, Criteria(categories=["rock"], budget={"min": 0, "max": 1000}), config=config)
    assert {r.overall_score for r in results} == {100}
    assert [r.festival.name for r in results] == ["Mid Fest", "Zed Fest", "Abba Days"]


@pytest.mark.parametrize(
    "score,tier",
    [
        (100, Tier.perfect),
        (85, Tier.perfect),
        (84, Tier.good),
        (70, Tier.good),
        (69, Tier.explore),
        (50, Tier.explore),
        (49, Tier.below),
        (0, Tier.below),
    ],
)
def test_assign_tier(score, tier):
    assert assign_tier(score) is tier


def test_exact_match_is_perfect_with_reasons():
    results = recommend([_festival("Test Fest", ["electronic"])], MATCHING)
    assert len(results) == 1
    match = results[0]
    assert match.tier is Tier.perfect
    assert match.overall_score == 90
    assert match.reasons[0] == "Matches your preferred electronic"
    assert set(match.dimension_scores) == set(Dimension)


def test_below_threshold_only_on_request():
    poor = _festival(
        "Far Away",
        ["jazz"],
        country="Japan",
        months=["January"],
        estimated_cost_usd={"min": 2000, "max": 3000},
    )
    assert recommend([poor], MATCHING) == []

    results = recommend([poor], MATCHING, RecommendOptions(include_below_threshold=True))
    assert [r.tier for r in results] == [Tier.below]


def test_limit(festivals):
    results = recommend(festivals, Criteria(), RecommendOptions(limit=5))
    assert len(results) == 5
    assert len(recommend(festivals, Criteria())) == len(festivals)


def test_unusable_options_fall_back_to_defaults():
    options = RecommendOptions.from_mapping({
        "limit": 0,
        "prefilter": "Spain",
        "include_below_threshold": "sometimes",
    })
    assert options == RecommendOptions()
    assert RecommendOptions(limit=2.5).limit is None
    assert RecommendOptions.from_mapping(None) == RecommendOptions()


def test_options_accept_a_plain_mapping(festivals):
    results = recommend(festivals, {"genres": ["rock"]}, {"include_below_threshold": True})
    assert len(results) == len(festivals)
    assert any(r.tier is Tier.below for r in results)


def test_mapping_options_with_prefilter_and_limit(festivals):
    results = recommend(
        festivals,
        Criteria(),
        {"prefilter": {"countries": "Spain"}, "limit": "2", "includeBelowThreshold": "false"},
    )
    assert len(results) == 2
    assert {r.festival.location.country for r in results} == {"Spain"}


def test_rank_catalog_reports_candidate_count(festivals):
    results, total = rank_catalog(festivals, {"genres": ["rock"]}, {"prefilter": {"countries": "Spain"}})
    assert total == 4
    assert len(results) <= total

    _, everything = rank_catalog(festivals, Criteria())
    assert everything == len(festivals)


def test_prefilter_restricts_candidates(festivals):
    options = RecommendOptions(prefilter=FilterConstraints(countries=["Spain"]))
    results = recommend(festivals, Criteria(), options)
    assert len(results) == 4
    assert {r.festival.location.country for r in results} == {"Spain"}


def test_raw_answers_are_accepted(festivals):
    results = recommend(festivals, {"genres": ["jazz"], "budget": "lots"})
    assert results[0].festival.id == "montreux-jazz"


def test_garbage_answers_fall_back_to_defaults(festivals):
    assert recommend(festivals, "nonsense") == recommend(festivals, None)


def test_cluster_groups_by_tier(festivals):
    results = recommend(festivals, MATCHING, RecommendOptions(include_below_threshold=True))
    groups = cluster(results)
    assert set(groups) == set(Tier)
    assert sum(len(group) for group in groups.values()) == len(results)
    for tier, group in groups.items():
        assert all(r.tier is tier for r in group)
        scores = [r.overall_score for r in group]
        assert scores == sorted(scores, reverse=True)


def test_cluster_of_nothing_has_every_tier():
    assert cluster([]) == {tier: [] for tier in Tier}
