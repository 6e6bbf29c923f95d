from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

_BUNDLED_CATALOG = Path(__file__).resolve().parent.parent / "data" / "festivals.json"


@dataclass(frozen=True)
class CatalogConfig:
    """
    Where the festival catalog is read from at process start.
    """

    catalog_path: Path = Path(os.getenv("FESTMATCH_CATALOG_PATH", str(_BUNDLED_CATALOG)))
    list_separator: str = ","


DEFAULT_CATALOG_CONFIG = CatalogConfig()
