from __future__ import annotations

from string import Formatter

from ..catalog.models import Festival
from .config import DEFAULT_SCORING_CONFIG, ScoringConfig
from .models import Criteria, Dimension, DurationPreference
from .scoring import CrowdTier, crowd_tier, effective_weights, matched_categories, matched_vibes

REASON_TEMPLATES: dict[Dimension, str] = {
    Dimension.category: "Matches your preferred {categories}",
    Dimension.budget: "Fits your budget",
    Dimension.season: "Happens in {months}",
    Dimension.region: "Located in {country}",
    Dimension.vibe: "Matches your {vibes} vibe",
    Dimension.duration: "Right length for a {duration} trip",
    Dimension.crowd: "{crowd} crowd, just as you like it",
    Dimension.accessibility: "Meets your {needs} needs",
    Dimension.bonus: "Offers {perks}",
}

_DURATION_LABELS = {
    DurationPreference.day: "one-day",
    DurationPreference.weekend: "weekend",
    DurationPreference.week_plus: "week-long",
}

_CROWD_LABELS = {
    CrowdTier.intimate: "Intimate",
    CrowdTier.medium: "Mid-sized",
    CrowdTier.massive: "Massive",
}


def _context(festival: Festival, criteria: Criteria) -> dict[str, str]:
    wanted_months = set(criteria.months)
    months = [m.value for m in festival.time_window if m in wanted_months]

    needs: list[str] = []
    if criteria.camping_required:
        needs.append("camping")
    if criteria.family_friendly is True:
        needs.append("family")
    elif criteria.family_friendly is False:
        needs.append("adults-only")

    perks: list[str] = []
    if criteria.camping_required and festival.flags.camping:
        perks.append("camping")
    if criteria.camping_required and festival.flags.glamping:
        perks.append("glamping")
    if criteria.family_friendly is True and festival.flags.family_friendly:
        perks.append("family-friendly facilities")

    return {
        "categories": " & ".join(matched_categories(festival, criteria)[:2]),
        "months": "/".join(months),
        "country": festival.location.country,
        "vibes": " & ".join(matched_vibes(festival, criteria)[:2]),
        "duration": _DURATION_LABELS.get(criteria.duration_preference, ""),
        "crowd": _CROWD_LABELS[crowd_tier(festival.audience_size)],
        "perks": ", ".join(perks),
        "needs": " and ".join(needs),
    }


def _render(template: str, context: dict[str, str]) -> str | None:
    fields = [name for _, name, _, _ in Formatter().parse(template) if name]
    if any(not context.get(name) for name in fields):
        return None
    return template.format(**context)


def explain(
    festival: Festival,
    criteria: Criteria,
    dimensions: dict[Dimension, float],
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> list[str]:
    """
    Short justifications for a match, strongest-weighted dimension first.

    Only dimensions the user expressed a preference on and that score above
    ``config.reason_threshold`` produce a reason. Returns at most
    ``config.max_reasons`` strings, possibly none.
    """
    weights = effective_weights(criteria, config)
    expressed = criteria.expressed_dimensions()
    order = list(Dimension)
    candidates = sorted(
        (dim for dim, score in dimensions.items()
         if score > config.reason_threshold and dim in expressed),
        key=lambda dim: (-weights.get(dim, 0.0), order.index(dim)),
    )

    context = _context(festival, criteria)
    reasons: list[str] = []
    for dim in candidates:
        text = _render(REASON_TEMPLATES[dim], context)
        if text:
            reasons.append(text)
        if len(reasons) >= config.max_reasons:
            break
    return reasons
