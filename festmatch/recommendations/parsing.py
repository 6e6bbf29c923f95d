"""
Lenient field parsers for quiz answers and browse constraints.

Every parser returns ``None`` for a value it cannot use, which callers treat
as "field absent".
"""
from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Any, Mapping, TypeVar

from ..catalog.models import Month

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

_TRUE = {"true", "yes", "y", "1", "on"}
_FALSE = {"false", "no", "n", "0", "off"}


def parse_str_list(value: Any, separator: str = ",") -> tuple[str, ...] | None:
    """Ordered, de-duplicated tuple of non-empty strings."""
    if isinstance(value, str):
        value = value.split(separator)
    if not isinstance(value, (list, tuple, set, frozenset)):
        return None
    out: list[str] = []
    for item in value:
        if not isinstance(item, str):
            continue
        item = item.strip()
        if item and item not in out:
            out.append(item)
    return tuple(out)


def parse_months(value: Any) -> tuple[Month, ...] | None:
    names = parse_str_list(value)
    if names is None:
        return None
    months: list[Month] = []
    for name in names:
        month = Month.parse(name)
        if month is not None and month not in months:
            months.append(month)
    return tuple(months)


def parse_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def parse_unit_interval(value: Any) -> float | None:
    number = parse_number(value)
    if number is None or not 0.0 <= number <= 1.0:
        return None
    return number


def parse_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lower = value.strip().lower()
        if lower in _TRUE:
            return True
        if lower in _FALSE:
            return False
    return None


def parse_bool_or_any(value: Any) -> bool | str | None:
    if isinstance(value, str) and value.strip().lower() == "any":
        return "any"
    return parse_bool(value)


def parse_choice(
    value: Any,
    enum_cls: type[E],
    aliases: Mapping[str, str] | None = None,
) -> E | None:
    if isinstance(value, enum_cls):
        return value
    if not isinstance(value, str):
        return None
    key = value.strip().lower()
    if aliases:
        key = aliases.get(key, key)
    try:
        return enum_cls(key)
    except ValueError:
        return None


def log_dropped(field: str, value: Any) -> None:
    logger.debug("Ignoring invalid %s value %r", field, value)
