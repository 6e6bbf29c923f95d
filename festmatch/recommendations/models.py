from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Mapping
from urllib.parse import urlencode

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..catalog.models import Festival, Month
from .parsing import (
    log_dropped,
    parse_bool,
    parse_bool_or_any,
    parse_choice,
    parse_months,
    parse_number,
    parse_str_list,
    parse_unit_interval,
)


class Flexibility(str, Enum):
    strict = "strict"
    flexible = "flexible"
    very_flexible = "very-flexible"


class DurationPreference(str, Enum):
    day = "day"
    weekend = "weekend"
    week_plus = "week-plus"


class AudiencePreference(str, Enum):
    intimate = "intimate"
    medium = "medium"
    massive = "massive"
    any = "any"


class Dimension(str, Enum):
    category = "category"
    budget = "budget"
    season = "season"
    region = "region"
    vibe = "vibe"
    duration = "duration"
    crowd = "crowd"
    accessibility = "accessibility"
    bonus = "bonus"


class Tier(str, Enum):
    perfect = "perfect"
    good = "good"
    explore = "explore"
    below = "below"


class SortKey(str, Enum):
    name = "name"
    cost = "cost"
    duration = "duration"
    popularity = "popularity"
    date = "date"


class SortOrder(str, Enum):
    asc = "asc"
    desc = "desc"


_FLEXIBILITY_ALIASES = {
    "very flexible": "very-flexible",
    "very_flexible": "very-flexible",
    "veryflexible": "very-flexible",
}
_DURATION_ALIASES = {
    "week+": "week-plus",
    "week_plus": "week-plus",
    "weekplus": "week-plus",
    "week": "week-plus",
    "single-day": "day",
    "one-day": "day",
}
_AUDIENCE_ALIASES = {
    "small": "intimate",
    "large": "massive",
    "huge": "massive",
}

# Raw quiz answer key -> Criteria field
_CRITERIA_KEYS: dict[str, str] = {
    "categories": "categories",
    "genres": "categories",
    "preferredGenres": "categories",
    "budget": "budget",
    "months": "months",
    "monthWindow": "months",
    "region": "region",
    "regions": "region",
    "vibes": "vibes",
    "vibe": "vibes",
    "duration_preference": "duration_preference",
    "durationPreference": "duration_preference",
    "duration": "duration_preference",
    "camping_required": "camping_required",
    "campingRequired": "camping_required",
    "camping": "camping_required",
    "wantsCamping": "camping_required",
    "audience_preference": "audience_preference",
    "audiencePreference": "audience_preference",
    "audienceSize": "audience_preference",
    "audiencePref": "audience_preference",
    "family_friendly": "family_friendly",
    "familyFriendly": "family_friendly",
    "category_importance": "category_importance",
    "categoryImportance": "category_importance",
    "budget_flexibility": "budget_flexibility",
    "budgetFlexibility": "budget_flexibility",
    "date_flexibility": "date_flexibility",
    "dateFlexibility": "date_flexibility",
}


class Budget(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: float = Field(default=0.0, ge=0)
    max: float = Field(..., ge=0)

    @model_validator(mode="after")
    def _check_order(self) -> Budget:
        if self.min > self.max:
            raise ValueError("budget min exceeds max")
        return self


def _parse_budget(value: Any) -> dict[str, float] | None:
    if isinstance(value, Budget):
        return value.model_dump()
    if not isinstance(value, Mapping):
        return None
    low = parse_number(value.get("min", 0))
    high = parse_number(value.get("max"))
    if low is None or high is None or low < 0 or high < 0 or low > high:
        return None
    return {"min": low, "max": high}


def _parse_region(value: Any) -> str | None:
    if isinstance(value, (list, tuple)):
        value = next((v for v in value if isinstance(v, str) and v.strip()), None)
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


def _parse_genre_importance(value: Any) -> float | None:
    """Map the questionnaire's 1-5 importance slider onto [0, 1]."""
    number = parse_number(value)
    if number is None or not 1.0 <= number <= 5.0:
        return None
    return (number - 1.0) / 4.0


_CRITERIA_PARSERS = {
    "categories": parse_str_list,
    "budget": _parse_budget,
    "months": parse_months,
    "region": _parse_region,
    "vibes": parse_str_list,
    "duration_preference": lambda v: parse_choice(v, DurationPreference, _DURATION_ALIASES),
    "camping_required": lambda v: parse_bool(v) if v != "any" else False,
    "audience_preference": lambda v: parse_choice(v, AudiencePreference, _AUDIENCE_ALIASES),
    "family_friendly": parse_bool_or_any,
    "category_importance": parse_unit_interval,
    "budget_flexibility": lambda v: parse_choice(v, Flexibility, _FLEXIBILITY_ALIASES),
    "date_flexibility": lambda v: parse_choice(v, Flexibility, _FLEXIBILITY_ALIASES),
}


def _sanitize_criteria(raw: Mapping[str, Any]) -> dict[str, Any]:
    clean: dict[str, Any] = {}

    for key, value in raw.items():
        field = _CRITERIA_KEYS.get(key)
        if field is None or value is None:
            continue
        parsed = _CRITERIA_PARSERS[field](value)
        if parsed is None:
            log_dropped(field, value)
            continue
        clean[field] = parsed

    # Legacy questionnaire fields
    if "category_importance" not in clean and "genreImportance" in raw:
        importance = _parse_genre_importance(raw["genreImportance"])
        if importance is not None:
            clean["category_importance"] = importance
    if "budget" not in clean:
        budget = _parse_budget({
            "min": raw.get("minBudget", raw.get("budgetMin", 0)),
            "max": raw.get("maxBudget", raw.get("budgetMax")),
        })
        if budget is not None:
            clean["budget"] = budget

    return clean


class Criteria(BaseModel):
    """
    One user's stated preferences for a single scoring pass.

    Construction never fails on a bad field: anything that cannot be parsed
    is dropped and the field keeps its neutral default.
    """

    model_config = ConfigDict(frozen=True)

    categories: tuple[str, ...] = ()
    budget: Budget | None = None
    months: tuple[Month, ...] = ()
    region: str | None = None
    vibes: tuple[str, ...] = ()
    duration_preference: DurationPreference | None = None
    camping_required: bool = False
    audience_preference: AudiencePreference = AudiencePreference.any
    family_friendly: bool | Literal["any"] = "any"
    category_importance: float = Field(default=0.5, ge=0.0, le=1.0)
    budget_flexibility: Flexibility = Flexibility.flexible
    date_flexibility: Flexibility = Flexibility.flexible

    @model_validator(mode="before")
    @classmethod
    def _sanitize(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            return _sanitize_criteria(data)
        return data

    @classmethod
    def from_answers(cls, answers: Mapping[str, Any] | None) -> Criteria:
        """Build criteria from raw questionnaire answers (camelCase or snake_case keys)."""
        if isinstance(answers, Criteria):
            return answers
        if not isinstance(answers, Mapping):
            return cls()
        return cls.model_validate(answers)

    def expressed_dimensions(self) -> set[Dimension]:
        """Dimensions on which the user stated an actual preference."""
        expressed: set[Dimension] = set()
        if self.categories:
            expressed.add(Dimension.category)
        if self.budget is not None:
            expressed.add(Dimension.budget)
        if self.months:
            expressed.add(Dimension.season)
        if self.region is not None and self.region.lower() not in ("any", "anywhere"):
            expressed.add(Dimension.region)
        if self.vibes:
            expressed.add(Dimension.vibe)
        if self.duration_preference is not None:
            expressed.add(Dimension.duration)
        if self.audience_preference is not AudiencePreference.any:
            expressed.add(Dimension.crowd)
        if self.camping_required or self.family_friendly != "any":
            expressed.add(Dimension.accessibility)
        if self.camping_required or self.family_friendly is True:
            expressed.add(Dimension.bonus)
        return expressed


# ── Browse constraints ───────────────────────────────────────────────────

_CONSTRAINT_KEYS: dict[str, str] = {
    "categories": "categories",
    "genres": "categories",
    "countries": "countries",
    "months": "months",
    "budget_min": "budget_min",
    "budgetMin": "budget_min",
    "budget_max": "budget_max",
    "budgetMax": "budget_max",
    "q": "q",
    "searchQuery": "q",
    "sort": "sort",
    "sortBy": "sort",
    "order": "order",
    "sortOrder": "order",
}


def _parse_query_text(value: Any) -> str | None:
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


def _parse_bound(value: Any) -> float | None:
    number = parse_number(value)
    if number is None or number < 0:
        return None
    return number


_CONSTRAINT_PARSERS = {
    "categories": parse_str_list,
    "countries": parse_str_list,
    "months": parse_months,
    "budget_min": _parse_bound,
    "budget_max": _parse_bound,
    "q": _parse_query_text,
    "sort": lambda v: parse_choice(v, SortKey, {"price": "cost"}),
    "order": lambda v: parse_choice(v, SortOrder),
}


def _sanitize_constraints(raw: Mapping[str, Any]) -> dict[str, Any]:
    clean: dict[str, Any] = {}
    for key, value in raw.items():
        field = _CONSTRAINT_KEYS.get(key)
        if field is None or value is None:
            continue
        parsed = _CONSTRAINT_PARSERS[field](value)
        if parsed is None:
            log_dropped(field, value)
            continue
        clean[field] = parsed

    low, high = clean.get("budget_min"), clean.get("budget_max")
    if low is not None and high is not None and low > high:
        log_dropped("budget", (low, high))
        clean.pop("budget_min")
        clean.pop("budget_max")
    return clean


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


class FilterConstraints(BaseModel):
    """Hard browse filters. Every field is optional; absent means unconstrained."""

    model_config = ConfigDict(frozen=True)

    categories: tuple[str, ...] = ()
    countries: tuple[str, ...] = ()
    months: tuple[Month, ...] = ()
    budget_min: float | None = None
    budget_max: float | None = None
    q: str | None = None
    sort: SortKey | None = None
    order: SortOrder | None = None

    @model_validator(mode="before")
    @classmethod
    def _sanitize(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            return _sanitize_constraints(data)
        return data

    @classmethod
    def from_query(cls, params: Mapping[str, Any] | None) -> FilterConstraints:
        """Parse flat query-string style pairs (``budgetMin``, ``q``, comma lists ...)."""
        if isinstance(params, FilterConstraints):
            return params
        if not isinstance(params, Mapping):
            return cls()
        return cls.model_validate(dict(params))

    def to_query(self) -> str:
        """Serialise to a compact query string, omitting absent fields."""
        pairs: list[tuple[str, str]] = []
        if self.categories:
            pairs.append(("categories", ",".join(self.categories)))
        if self.countries:
            pairs.append(("countries", ",".join(self.countries)))
        if self.months:
            pairs.append(("months", ",".join(m.value.lower() for m in self.months)))
        if self.budget_min is not None:
            pairs.append(("budgetMin", _format_number(self.budget_min)))
        if self.budget_max is not None:
            pairs.append(("budgetMax", _format_number(self.budget_max)))
        if self.q:
            pairs.append(("q", self.q))
        if self.sort is not None:
            pairs.append(("sort", self.sort.value))
        if self.order is not None:
            pairs.append(("order", self.order.value))
        return urlencode(pairs, safe=",")


class FilterResult(BaseModel):
    items: list[Festival]
    total_count: int
    applied: FilterConstraints


# ── Scoring output ───────────────────────────────────────────────────────


class ScoreCard(BaseModel):
    model_config = ConfigDict(frozen=True)

    overall: int = Field(..., ge=0, le=100)
    dimensions: dict[Dimension, float]


class MatchResult(BaseModel):
    festival: Festival
    overall_score: int = Field(..., ge=0, le=100)
    dimension_scores: dict[Dimension, float]
    reasons: list[str] = Field(default_factory=list)
    tier: Tier


_OPTION_KEYS: dict[str, str] = {
    "prefilter": "prefilter",
    "include_below_threshold": "include_below_threshold",
    "includeBelowThreshold": "include_below_threshold",
    "limit": "limit",
}


def _parse_prefilter(value: Any) -> FilterConstraints | None:
    if isinstance(value, (FilterConstraints, Mapping)):
        return FilterConstraints.from_query(value)
    return None


def _parse_limit(value: Any) -> int | None:
    number = parse_number(value)
    if number is None or number < 1 or not number.is_integer():
        return None
    return int(number)


_OPTION_PARSERS = {
    "prefilter": _parse_prefilter,
    "include_below_threshold": parse_bool,
    "limit": _parse_limit,
}


class RecommendOptions(BaseModel):
    """Per-call options for ``recommend``. Unusable values fall back to the defaults."""

    prefilter: FilterConstraints | None = None
    include_below_threshold: bool = False
    limit: int | None = Field(default=None, ge=1)

    @model_validator(mode="before")
    @classmethod
    def _sanitize(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        clean: dict[str, Any] = {}
        for key, value in data.items():
            field = _OPTION_KEYS.get(key)
            if field is None or value is None:
                continue
            parsed = _OPTION_PARSERS[field](value)
            if parsed is None:
                log_dropped(field, value)
                continue
            clean[field] = parsed
        return clean

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any] | None) -> RecommendOptions:
        if isinstance(options, RecommendOptions):
            return options
        if not isinstance(options, Mapping):
            return cls()
        return cls.model_validate(dict(options))


# ── API payloads ─────────────────────────────────────────────────────────


class RecommendationRequest(BaseModel):
    answers: dict[str, Any] = Field(default_factory=dict, description="Raw questionnaire answers")
    prefilter: dict[str, Any] | None = Field(
        default=None, description="Browse constraints applied before scoring"
    )
    include_below_threshold: bool = False
    limit: int = Field(default=10, ge=1, le=50)
    weight_profile: str | None = None


class RecommendationResponse(BaseModel):
    recommendations: list[MatchResult]
    total_candidates: int
    tiers: dict[Tier, list[str]]


class FilterResponse(BaseModel):
    festivals: list[Festival]
    total_count: int
    query: str
