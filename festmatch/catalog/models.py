from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Iterable, Iterator, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

logger = logging.getLogger(__name__)


class Month(str, Enum):
    January = "January"
    February = "February"
    March = "March"
    April = "April"
    May = "May"
    June = "June"
    July = "July"
    August = "August"
    September = "September"
    October = "October"
    November = "November"
    December = "December"

    @property
    def position(self) -> int:
        return _MONTH_ORDER.index(self)

    def is_adjacent(self, other: Month) -> bool:
        """True when the two months are calendar neighbours (December wraps to January)."""
        distance = abs(self.position - other.position)
        return distance in (1, 11)

    @classmethod
    def parse(cls, value: Any) -> Month | None:
        """Return the month for a full or three-letter name (any case), else ``None``."""
        if isinstance(value, Month):
            return value
        if not isinstance(value, str):
            return None
        key = value.strip().lower()
        return _MONTH_LOOKUP.get(key)


_MONTH_ORDER: list[Month] = list(Month)
_MONTH_LOOKUP: dict[str, Month] = {}
for _m in _MONTH_ORDER:
    _MONTH_LOOKUP[_m.value.lower()] = _m
    _MONTH_LOOKUP[_m.value[:3].lower()] = _m


class AudienceSize(str, Enum):
    small = "small"
    medium = "medium"
    large = "large"
    massive = "massive"

    @property
    def popularity(self) -> int:
        return _AUDIENCE_ORDER.index(self)


_AUDIENCE_ORDER: list[AudienceSize] = list(AudienceSize)

_TRUE_STRINGS = {"true", "yes", "y", "1"}


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


class Location(BaseModel):
    model_config = ConfigDict(frozen=True)

    country: str = Field(..., min_length=1)
    city: str = ""
    region: str | None = None


class CostRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: float = Field(..., ge=0)
    max: float = Field(..., ge=0)

    @model_validator(mode="after")
    def _check_order(self) -> CostRange:
        if self.min > self.max:
            raise ValueError(f"cost min {self.min} exceeds max {self.max}")
        return self


class Flags(BaseModel):
    model_config = ConfigDict(frozen=True)

    family_friendly: bool = False
    camping: bool = False
    glamping: bool = False


class Festival(BaseModel):
    """One recommendable catalog entry. Immutable once loaded."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    location: Location
    category_tags: tuple[str, ...] = Field(..., min_length=1)
    cost_range: CostRange
    time_window: tuple[Month, ...] = Field(..., min_length=1)
    duration_days: int = Field(..., gt=0)
    audience_size: AudienceSize
    vibe_tags: tuple[str, ...] = ()
    flags: Flags = Field(default_factory=Flags)
    min_age: int | None = Field(default=None, ge=0)
    weather_profile: tuple[str, ...] = ()
    website: str | None = None
    ticket_url: str | None = None
    status: str | None = None

    @field_validator("category_tags", "vibe_tags", "weather_profile", mode="before")
    @classmethod
    def _clean_tags(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, (list, tuple, set, frozenset)):
            seen: list[str] = []
            for tag in value:
                tag = str(tag).strip()
                if tag and tag not in seen:
                    seen.append(tag)
            return tuple(seen)
        return value

    @field_validator("time_window", mode="before")
    @classmethod
    def _parse_months(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.split(",")
        if not isinstance(value, (list, tuple, set, frozenset)):
            return value
        months: list[Month] = []
        for raw in value:
            month = Month.parse(raw)
            if month is None:
                raise ValueError(f"unknown month {raw!r}")
            if month not in months:
                months.append(month)
        return tuple(sorted(months, key=lambda m: m.position))

    @field_validator("audience_size", mode="before")
    @classmethod
    def _lower_audience(cls, value: Any) -> Any:
        return value.strip().lower() if isinstance(value, str) else value

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Festival:
        """
        Build a festival from a flat catalog record.

        Accepts the flat export shape (``country``, ``city``, ``genres``,
        ``estimated_cost_usd``, ``months``, ``vibe``, ``family_friendly`` ...)
        as well as records already in the nested model shape.
        Raises ``ValueError`` when the record is malformed.
        """
        if not isinstance(record, Mapping):
            raise ValueError(f"record must be a mapping, got {type(record).__name__}")
        if "location" in record:
            return cls.model_validate(dict(record))

        cost = record.get("estimated_cost_usd") or record.get("cost_range")
        if cost is None and ("cost_min" in record or "cost_max" in record):
            cost = {"min": record.get("cost_min"), "max": record.get("cost_max")}

        return cls.model_validate({
            "id": None if record.get("id") is None else str(record["id"]),
            "name": record.get("name"),
            "location": {
                "country": record.get("country"),
                "city": record.get("city") or "",
                "region": record.get("region"),
            },
            "category_tags": record.get("genres", record.get("category_tags")),
            "cost_range": cost,
            "time_window": record.get("months", record.get("time_window")),
            "duration_days": record.get("duration_days"),
            "audience_size": record.get("audience_size"),
            "vibe_tags": record.get("vibe", record.get("vibe_tags")) or (),
            "flags": {
                "family_friendly": _as_bool(record.get("family_friendly")),
                "camping": _as_bool(record.get("camping")),
                "glamping": _as_bool(record.get("glamping")),
            },
            "min_age": record.get("min_age"),
            "weather_profile": record.get("weather_profile") or (),
            "website": record.get("website"),
            "ticket_url": record.get("ticket_official_url", record.get("ticket_url")),
            "status": record.get("status"),
        })


class Catalog:
    """Read-only, id-indexed collection of festivals."""

    def __init__(self, festivals: Iterable[Festival] = ()) -> None:
        items: list[Festival] = []
        index: dict[str, Festival] = {}
        for festival in festivals:
            if festival.id in index:
                logger.warning("Duplicate festival id %r, keeping the first record", festival.id)
                continue
            index[festival.id] = festival
            items.append(festival)
        self._items: tuple[Festival, ...] = tuple(items)
        self._index = index

    def __iter__(self) -> Iterator[Festival]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, festival_id: object) -> bool:
        return festival_id in self._index

    def get(self, festival_id: str) -> Festival | None:
        return self._index.get(festival_id)

    @property
    def festivals(self) -> tuple[Festival, ...]:
        return self._items
