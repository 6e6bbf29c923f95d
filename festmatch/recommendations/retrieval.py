from __future__ import annotations

from typing import Any, Iterable, Mapping

from ..catalog.models import Festival
from .config import DEFAULT_SCORING_CONFIG, ScoringConfig
from .explain import explain
from .filtering import filter_catalog, name_key
from .models import (
    Criteria,
    Dimension,
    MatchResult,
    RecommendOptions,
    ScoreCard,
    Tier,
)
from .scoring import score_festival


def assign_tier(score: int, config: ScoringConfig = DEFAULT_SCORING_CONFIG) -> Tier:
    for tier, minimum in config.tier_thresholds:
        if score >= minimum:
            return tier
    return Tier.below


def _rank_key(festival: Festival, card: ScoreCard) -> tuple:
    return (-card.overall, -card.dimensions[Dimension.category], name_key(festival.name))


def rank_catalog(
    catalog: Iterable[Festival],
    criteria: Criteria | Mapping[str, Any] | None,
    options: RecommendOptions | Mapping[str, Any] | None = None,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> tuple[list[MatchResult], int]:
    """
    Score every candidate festival and return ranked, explained matches
    together with the number of candidates that survived the pre-filter.

    Ranking: overall score descending, then category score descending, then
    name. Matches below the lowest tier are dropped unless
    ``options.include_below_threshold`` is set.
    """
    if not isinstance(criteria, Criteria):
        criteria = Criteria.from_answers(criteria)
    options = RecommendOptions.from_mapping(options)

    # --- Optional hard pre-filter ---
    if options.prefilter is not None:
        candidates = filter_catalog(catalog, options.prefilter).items
    else:
        candidates = list(catalog)

    # --- Scoring ---
    scored = [(festival, score_festival(festival, criteria, config)) for festival in candidates]
    scored.sort(key=lambda pair: _rank_key(*pair))

    # --- Tiering & explanation ---
    results: list[MatchResult] = []
    for festival, card in scored:
        tier = assign_tier(card.overall, config)
        if tier is Tier.below and not options.include_below_threshold:
            continue
        results.append(MatchResult(
            festival=festival,
            overall_score=card.overall,
            dimension_scores={dim: round(score, 4) for dim, score in card.dimensions.items()},
            reasons=explain(festival, criteria, card.dimensions, config),
            tier=tier,
        ))
        if options.limit is not None and len(results) >= options.limit:
            break

    return results, len(candidates)


def recommend(
    catalog: Iterable[Festival],
    criteria: Criteria | Mapping[str, Any] | None,
    options: RecommendOptions | Mapping[str, Any] | None = None,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> list[MatchResult]:
    """Ranked, explained matches for ``criteria``; see ``rank_catalog``."""
    results, _ = rank_catalog(catalog, criteria, options, config)
    return results




def cluster(results: Iterable[MatchResult]) -> dict[Tier, list[MatchResult]]:
    """Group ranked matches by tier, keeping rank order inside each tier."""
    tiers: dict[Tier, list[MatchResult]] = {tier: [] for tier in Tier}
    for result in results:
        tiers[result.tier].append(result)
    return tiers
