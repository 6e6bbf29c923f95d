from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Mapping

from .models import Dimension, Flexibility, Tier

# Dimension weights for the overall blend. They sum to 1.0 but are
# renormalised at blend time, so any non-negative mapping works.
DEFAULT_WEIGHTS: dict[Dimension, float] = {
    Dimension.category: 0.25,
    Dimension.budget: 0.20,
    Dimension.season: 0.15,
    Dimension.region: 0.12,
    Dimension.vibe: 0.12,
    Dimension.duration: 0.08,
    Dimension.crowd: 0.05,
    Dimension.accessibility: 0.02,
    Dimension.bonus: 0.01,
}

WEIGHT_PROFILES: dict[str, dict[Dimension, float]] = {
    "quiz": DEFAULT_WEIGHTS,
    # Earlier matcher: genre-heavy, no vibe/duration signal, amenities folded into accessibility
    "classic": {
        Dimension.category: 0.30,
        Dimension.budget: 0.25,
        Dimension.season: 0.20,
        Dimension.region: 0.10,
        Dimension.vibe: 0.0,
        Dimension.duration: 0.0,
        Dimension.crowd: 0.08,
        Dimension.accessibility: 0.07,
        Dimension.bonus: 0.0,
    },
}

# Budget decay slope per flexibility level; larger is steeper
BUDGET_DECAY: dict[Flexibility, float] = {
    Flexibility.strict: 1.0,
    Flexibility.flexible: 0.6,
    Flexibility.very_flexible: 0.35,
}

# Minimum overall score per tier, highest first
TIER_THRESHOLDS: tuple[tuple[Tier, int], ...] = (
    (Tier.perfect, 85),
    (Tier.good, 70),
    (Tier.explore, 50),
)


@dataclass(frozen=True)
class ScoringConfig:
    weights: Mapping[Dimension, float] = field(default_factory=lambda: dict(DEFAULT_WEIGHTS))
    budget_decay: Mapping[Flexibility, float] = field(default_factory=lambda: dict(BUDGET_DECAY))
    tier_thresholds: tuple[tuple[Tier, int], ...] = TIER_THRESHOLDS
    neutral_score: float = 0.5
    adjacent_month_score: float = 0.3
    reason_threshold: float = 0.6
    max_reasons: int = 3

    def with_weights(self, weights: Mapping[Dimension | str, float]) -> ScoringConfig:
        """Copy of this config with some or all weights overridden."""
        merged = dict(self.weights)
        for key, value in weights.items():
            try:
                dimension = Dimension(key)
            except ValueError:
                continue
            merged[dimension] = max(0.0, float(value))
        return replace(self, weights=merged)


DEFAULT_SCORING_CONFIG = ScoringConfig()


def weight_profile(name: str | None, base: ScoringConfig = DEFAULT_SCORING_CONFIG) -> ScoringConfig:
    """Return ``base`` re-weighted with the named profile; unknown names keep ``base``."""
    profile = WEIGHT_PROFILES.get((name or "").strip().lower())
    if profile is None:
        return base
    return replace(base, weights=dict(profile))
