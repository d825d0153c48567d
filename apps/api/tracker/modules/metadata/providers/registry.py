from __future__ import annotations

import os
from typing import Callable, Dict, Optional

from .base import MetadataProvider
from .catalog_provider import CatalogProvider

DEFAULT_PROVIDER = "catalog"

_OFF_VALUES = ("", "0", "false", "no", "off")

PROVIDERS: Dict[str, Callable[[], MetadataProvider]] = {
    "catalog": CatalogProvider,
}


def is_metadata_enabled(*, default: bool = False) -> bool:
    """METADATA_ENABLED turns the metadata endpoints on; unset means `default`."""
    raw = os.getenv("METADATA_ENABLED")
    if raw is None:
        return default
    return raw.strip().lower() not in _OFF_VALUES


def get_provider(name: Optional[str] = None) -> MetadataProvider:
    key = name or DEFAULT_PROVIDER
    if key not in PROVIDERS:
        raise ValueError(f"unknown metadata provider: {key}")
    return PROVIDERS[key]()
