from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Union

import pandas as pd

from .config import DEFAULT_CATALOG_CONFIG, CatalogConfig
from .models import Festival

logger = logging.getLogger(__name__)

CatalogSource = Union[str, Path, Iterable[Mapping[str, Any]]]

# Flat CSV columns holding comma-separated lists
LIST_COLUMNS: List[str] = ["genres", "months", "vibe", "weather_profile"]


def _read_json(path: Path) -> list[Any]:
    with path.open(encoding="utf-8") as fh:
        payload = json.load(fh)
    if isinstance(payload, Mapping):
        payload = payload.get("festivals", [])
    if not isinstance(payload, list):
        raise ValueError(f"{path} does not contain a list of festival records")
    return payload


def _read_csv(path: Path, config: CatalogConfig) -> list[dict[str, Any]]:
    df = pd.read_csv(path)

    # Missing cells become None rather than NaN so optional fields stay optional
    df = df.astype(object).where(pd.notna(df), None)

    for col in LIST_COLUMNS:
        if col in df.columns:
            df[col] = df[col].apply(
                lambda s: [p.strip() for p in str(s).split(config.list_separator) if p.strip()]
                if s is not None
                else []
            )

    return df.to_dict(orient="records")


def _read_records(source: CatalogSource, config: CatalogConfig) -> list[Any]:
    if isinstance(source, (str, Path)):
        path = Path(source)
        if path.suffix.lower() == ".csv":
            return _read_csv(path, config)
        return _read_json(path)
    return list(source)


def load_catalog(
    source: CatalogSource | None = None,
    config: CatalogConfig = DEFAULT_CATALOG_CONFIG,
) -> list[Festival]:
    """
    Load festival records into validated ``Festival`` objects.

    ``source`` is a ``.json`` / ``.csv`` path or an iterable of record
    mappings; it defaults to the configured catalog path. A malformed record
    is skipped with a warning so that one bad row never empties the catalog.
    """
    if source is None:
        source = config.catalog_path

    festivals: list[Festival] = []
    for position, record in enumerate(_read_records(source, config)):
        try:
            festivals.append(Festival.from_record(record))
        except ValueError as exc:
            record_id = record.get("id") if isinstance(record, Mapping) else None
            logger.warning(
                "Skipping malformed festival record #%d (id=%r): %s",
                position,
                record_id,
                exc,
            )

    return festivals
