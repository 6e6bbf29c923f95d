"""
Multi-factor festival scoring.

Each dimension function compares one festival with one set of criteria and
returns a float in [0, 1]. ``score_festival`` blends the dimensions with the
configured weights into a single 0-100 score.
"""
from __future__ import annotations

import math
from enum import Enum
from typing import Callable

from ..catalog.models import AudienceSize, Festival
from .config import DEFAULT_SCORING_CONFIG, ScoringConfig
from .models import (
    AudiencePreference,
    Criteria,
    Dimension,
    DurationPreference,
    Flexibility,
    ScoreCard,
)

# Score by number of steps between two ordered tiers
_STEP_SCORES = (1.0, 0.5, 0.0)

REGION_COUNTRIES: dict[str, tuple[str, ...]] = {
    "north-america": ("USA", "Canada", "Mexico"),
    "europe": (
        "UK", "Germany", "France", "Spain", "Netherlands", "Italy", "Poland",
        "Belgium", "Portugal", "Sweden", "Denmark", "Norway", "Finland",
        "Switzerland", "Austria", "Hungary", "Romania", "Serbia", "Croatia",
        "Ireland", "Czechia",
    ),
    "south-america": ("Brazil", "Colombia", "Argentina", "Chile", "Costa Rica"),
    "asia-pacific": ("Japan", "Australia", "Thailand", "India", "New Zealand", "South Korea", "Indonesia"),
    "middle-east": ("UAE", "Egypt", "South Africa", "Morocco"),
    "caribbean": ("Jamaica", "Barbados", "Trinidad"),
}

VIBE_GROUPS: dict[str, tuple[str, ...]] = {
    "party": ("party", "edm", "electronic", "dancing", "nightlife", "mainstream"),
    "chill": ("chill", "relaxed", "laid-back", "camping", "nature", "intimate"),
    "immersive": ("art", "interactive", "experience", "creative", "cultural", "immersive"),
    "discovery": ("underground", "indie", "emerging", "experimental", "discovery"),
    "cultural": ("world", "traditional", "heritage", "cultural"),
    "vip": ("luxury", "premium", "exclusive", "vip"),
}

_NO_REGION = ("any", "anywhere")


class CrowdTier(str, Enum):
    intimate = "intimate"
    medium = "medium"
    massive = "massive"

    def distance(self, other: CrowdTier) -> int:
        return abs(_CROWD_ORDER.index(self) - _CROWD_ORDER.index(other))


_CROWD_ORDER: list[CrowdTier] = list(CrowdTier)

_AUDIENCE_TO_CROWD: dict[AudienceSize, CrowdTier] = {
    AudienceSize.small: CrowdTier.intimate,
    AudienceSize.medium: CrowdTier.medium,
    AudienceSize.large: CrowdTier.massive,
    AudienceSize.massive: CrowdTier.massive,
}

_DURATION_BANDS: dict[DurationPreference, int] = {
    DurationPreference.day: 0,
    DurationPreference.weekend: 1,
    DurationPreference.week_plus: 2,
}


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def _step_score(distance: int) -> float:
    return _STEP_SCORES[min(distance, len(_STEP_SCORES) - 1)]


def _loosely_equal(a: str, b: str) -> bool:
    """Case-insensitive containment in either direction ("rock" ~ "indie rock")."""
    a, b = a.lower(), b.lower()
    return a in b or b in a


def _region_key(region: str) -> str:
    return region.strip().lower().replace("_", "-").replace(" ", "-")


def duration_band(days: int) -> int:
    """0 for a single day, 1 for a weekend (2-3 days), 2 for four days or more."""
    if days <= 1:
        return 0
    if days <= 3:
        return 1
    return 2


def crowd_tier(size: AudienceSize) -> CrowdTier:
    return _AUDIENCE_TO_CROWD[size]


# ---------------------------------------------------------------------------
# Match helpers (shared with the explanation generator)
# ---------------------------------------------------------------------------


def matched_categories(festival: Festival, criteria: Criteria) -> list[str]:
    """Festival tags that satisfy at least one requested category, in festival order."""
    return [
        tag for tag in festival.category_tags
        if any(_loosely_equal(want, tag) for want in criteria.categories)
    ]


def _vibe_matches(want: str, festival_vibes: list[str]) -> bool:
    group = VIBE_GROUPS.get(want.lower(), (want.lower(),))
    return any(_loosely_equal(g, tag) for g in group for tag in festival_vibes)


def matched_vibes(festival: Festival, criteria: Criteria) -> list[str]:
    """Requested vibes that the festival satisfies, in request order."""
    tags = [v.lower() for v in festival.vibe_tags]
    return [want for want in criteria.vibes if _vibe_matches(want, tags)]


# ---------------------------------------------------------------------------
# Dimension scores
# ---------------------------------------------------------------------------


def category_score(
    festival: Festival, criteria: Criteria, config: ScoringConfig = DEFAULT_SCORING_CONFIG
) -> float:
    if not criteria.categories:
        return config.neutral_score
    hits = sum(
        1 for want in criteria.categories
        if any(_loosely_equal(want, tag) for tag in festival.category_tags)
    )
    return _clamp(hits / len(criteria.categories))


def budget_score(
    festival: Festival, criteria: Criteria, config: ScoringConfig = DEFAULT_SCORING_CONFIG
) -> float:
    """
    1.0 when the cost range sits inside the budget.

    Otherwise the score falls linearly with the share of the cost range
    outside the budget plus the relative gap when the ranges are disjoint.
    The slope depends on the user's budget flexibility.
    """
    budget = criteria.budget
    if budget is None:
        return config.neutral_score

    low, high = festival.cost_range.min, festival.cost_range.max
    if low >= budget.min and high <= budget.max:
        return 1.0

    width = high - low
    inside = max(0.0, min(high, budget.max) - max(low, budget.min))
    overlap = inside / width if width > 0 else 0.0
    gap = max(0.0, low - budget.max, budget.min - high)
    miss = (1.0 - overlap) + gap / max(budget.max, 1.0)

    slope = config.budget_decay.get(criteria.budget_flexibility, 1.0)
    return _clamp(1.0 - miss * slope)


def season_score(
    festival: Festival, criteria: Criteria, config: ScoringConfig = DEFAULT_SCORING_CONFIG
) -> float:
    if not criteria.months:
        return config.neutral_score
    wanted = set(criteria.months)
    if any(month in wanted for month in festival.time_window):
        return 1.0
    if criteria.date_flexibility is not Flexibility.strict and any(
        month.is_adjacent(other) for month in festival.time_window for other in wanted
    ):
        return config.adjacent_month_score
    return 0.0


def region_score(
    festival: Festival, criteria: Criteria, config: ScoringConfig = DEFAULT_SCORING_CONFIG
) -> float:
    region = criteria.region
    if region is None or region.strip().lower() in _NO_REGION:
        return config.neutral_score

    needle = region.strip().lower()
    country = festival.location.country.lower()
    if needle in country:
        return 1.0
    own_region = festival.location.region
    if own_region and needle in own_region.lower():
        return 1.0
    countries = REGION_COUNTRIES.get(_region_key(region), ())
    if any(c.lower() == country for c in countries):
        return 1.0
    return 0.0


def vibe_score(
    festival: Festival, criteria: Criteria, config: ScoringConfig = DEFAULT_SCORING_CONFIG
) -> float:
    if not criteria.vibes:
        return config.neutral_score
    return _clamp(len(matched_vibes(festival, criteria)) / len(criteria.vibes))


def duration_score(
    festival: Festival, criteria: Criteria, config: ScoringConfig = DEFAULT_SCORING_CONFIG
) -> float:
    if criteria.duration_preference is None:
        return config.neutral_score
    wanted = _DURATION_BANDS[criteria.duration_preference]
    return _step_score(abs(duration_band(festival.duration_days) - wanted))


def crowd_score(
    festival: Festival, criteria: Criteria, config: ScoringConfig = DEFAULT_SCORING_CONFIG
) -> float:
    if criteria.audience_preference is AudiencePreference.any:
        return 1.0
    wanted = CrowdTier(criteria.audience_preference.value)
    return _step_score(crowd_tier(festival.audience_size).distance(wanted))


def accessibility_score(
    festival: Festival, criteria: Criteria, config: ScoringConfig = DEFAULT_SCORING_CONFIG
) -> float:
    """Hard gate: 0 on a family-friendly conflict or missing required camping."""
    family = criteria.family_friendly
    if isinstance(family, bool) and family != festival.flags.family_friendly:
        return 0.0
    if criteria.camping_required and not festival.flags.camping:
        return 0.0
    return 1.0


def bonus_score(
    festival: Festival, criteria: Criteria, config: ScoringConfig = DEFAULT_SCORING_CONFIG
) -> float:
    score = 0.7
    if criteria.family_friendly is True and festival.flags.family_friendly:
        score += 0.2
    if criteria.camping_required and (festival.flags.camping or festival.flags.glamping):
        score += 0.1
    return _clamp(score)


DIMENSION_SCORERS: dict[Dimension, Callable[[Festival, Criteria, ScoringConfig], float]] = {
    Dimension.category: category_score,
    Dimension.budget: budget_score,
    Dimension.season: season_score,
    Dimension.region: region_score,
    Dimension.vibe: vibe_score,
    Dimension.duration: duration_score,
    Dimension.crowd: crowd_score,
    Dimension.accessibility: accessibility_score,
    Dimension.bonus: bonus_score,
}


# ---------------------------------------------------------------------------
# Blending
# ---------------------------------------------------------------------------


def effective_weights(
    criteria: Criteria, config: ScoringConfig = DEFAULT_SCORING_CONFIG
) -> dict[Dimension, float]:
    """Configured weights with the category weight scaled by the user's category importance."""
    weights = {dim: max(0.0, float(config.weights.get(dim, 0.0))) for dim in Dimension}
    weights[Dimension.category] *= 0.5 + criteria.category_importance
    return weights


def blend(dimensions: dict[Dimension, float], weights: dict[Dimension, float]) -> int:
    total = sum(weights.get(dim, 0.0) for dim in dimensions)
    if total <= 0:
        raw = sum(dimensions.values()) / len(dimensions) if dimensions else 0.0
    else:
        raw = sum(score * weights.get(dim, 0.0) for dim, score in dimensions.items()) / total
    # Halves round up
    return max(0, min(100, math.floor(100 * raw + 0.5)))


def score_dimensions(
    festival: Festival, criteria: Criteria, config: ScoringConfig = DEFAULT_SCORING_CONFIG
) -> dict[Dimension, float]:
    return {dim: scorer(festival, criteria, config) for dim, scorer in DIMENSION_SCORERS.items()}


def score_festival(
    festival: Festival, criteria: Criteria, config: ScoringConfig = DEFAULT_SCORING_CONFIG
) -> ScoreCard:
    """Score one festival against one set of criteria."""
    dimensions = score_dimensions(festival, criteria, config)
    overall = blend(dimensions, effective_weights(criteria, config))
    return ScoreCard(overall=overall, dimensions=dimensions)
