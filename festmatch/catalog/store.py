from __future__ import annotations

import logging

from .config import DEFAULT_CATALOG_CONFIG
from .loader import load_catalog
from .models import Catalog

logger = logging.getLogger(__name__)

_catalog: Catalog | None = None


def get_catalog() -> Catalog:
    """Return the process-wide festival catalog, loading it on first call."""
    global _catalog
    if _catalog is None:
        path = DEFAULT_CATALOG_CONFIG.catalog_path
        _catalog = Catalog(load_catalog(path))
        logger.info("Loaded %d festivals from %s", len(_catalog), path)
    return _catalog
