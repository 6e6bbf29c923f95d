"""
Browse filtering over the festival catalog.

Every non-empty constraint is a hard AND filter; results are sorted
deterministically with name as the final tie-break.
"""
from __future__ import annotations

import unicodedata
from typing import Any, Callable, Iterable, Mapping

from ..catalog.models import Festival, Month
from .models import FilterConstraints, FilterResult, SortKey, SortOrder

BUDGET_RANGES: list[dict[str, Any]] = [
    {"label": "Under $300", "min": 0, "max": 300},
    {"label": "$300 - $500", "min": 300, "max": 500},
    {"label": "$500 - $1000", "min": 500, "max": 1000},
    {"label": "$1000 - $2000", "min": 1000, "max": 2000},
    {"label": "Over $2000", "min": 2000, "max": 10000},
]

# Sort key -> (key function, natural order)
_SORTS: dict[SortKey, tuple[Callable[[Festival], Any], SortOrder]] = {
    SortKey.name: (lambda f: name_key(f.name), SortOrder.asc),
    SortKey.cost: (lambda f: f.cost_range.min, SortOrder.asc),
    SortKey.duration: (lambda f: f.duration_days, SortOrder.desc),
    SortKey.popularity: (lambda f: f.audience_size.popularity, SortOrder.desc),
    SortKey.date: (lambda f: f.time_window[0].position, SortOrder.asc),
}


def name_key(name: str) -> tuple[str, str]:
    """Accent- and case-insensitive collation key, exact name as tie-break."""
    decomposed = unicodedata.normalize("NFKD", name)
    folded = "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()
    return folded, name


def _lower_set(values: Iterable[str]) -> set[str]:
    return {v.lower() for v in values}


def _matches_query(festival: Festival, query: str) -> bool:
    needle = query.lower()
    haystacks = [festival.name, festival.location.city, festival.location.country, *festival.category_tags]
    return any(needle in text.lower() for text in haystacks)


def filter_catalog(
    catalog: Iterable[Festival],
    constraints: FilterConstraints | Mapping[str, Any] | None = None,
) -> FilterResult:
    """Apply browse constraints to the catalog and return the sorted survivors."""
    if not isinstance(constraints, FilterConstraints):
        constraints = FilterConstraints.from_query(constraints)

    filtered = list(catalog)

    if constraints.categories:
        wanted = _lower_set(constraints.categories)
        filtered = [f for f in filtered if wanted & _lower_set(f.category_tags)]

    if constraints.countries:
        wanted = _lower_set(constraints.countries)
        filtered = [f for f in filtered if f.location.country.lower() in wanted]

    if constraints.months:
        wanted_months: set[Month] = set(constraints.months)
        filtered = [f for f in filtered if wanted_months.intersection(f.time_window)]

    if constraints.budget_min is not None:
        filtered = [f for f in filtered if f.cost_range.max >= constraints.budget_min]
    if constraints.budget_max is not None:
        filtered = [f for f in filtered if f.cost_range.min <= constraints.budget_max]

    if constraints.q:
        filtered = [f for f in filtered if _matches_query(f, constraints.q)]

    # Two stable passes: name first so equal primary keys stay alphabetical
    sort_key = constraints.sort or SortKey.popularity
    key_fn, natural = _SORTS[sort_key]
    order = constraints.order or natural
    filtered.sort(key=lambda f: name_key(f.name))
    if sort_key is not SortKey.name:
        filtered.sort(key=key_fn, reverse=order is SortOrder.desc)
    elif order is SortOrder.desc:
        filtered.reverse()

    return FilterResult(items=filtered, total_count=len(filtered), applied=constraints)


def filter_options(catalog: Iterable[Festival]) -> dict[str, Any]:
    """Values a browse UI can offer as filter choices."""
    festivals = list(catalog)
    categories = sorted({tag for f in festivals for tag in f.category_tags}, key=name_key)
    countries = sorted({f.location.country for f in festivals}, key=name_key)
    return {
        "categories": categories,
        "countries": countries,
        "months": [m.value for m in Month],
        "budget_ranges": BUDGET_RANGES,
    }
