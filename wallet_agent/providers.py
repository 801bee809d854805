from __future__ import annotations

import json
from pathlib import Path
from typing import Protocol

from wallet_agent.catalog import CatalogLoader
from wallet_agent.errors import CatalogFormatError
from wallet_agent.models import OfferCatalog


class OfferProvider(Protocol):
    source: str

    def fetch_catalog(self) -> OfferCatalog:
        ...


class JsonOfferProvider:
    """Reads a per-bank offer dump (a JSON list of bank entries) from disk."""

    def __init__(self, source: str, file_path: str) -> None:
        self.source = source
        self.file_path = Path(file_path)

    def fetch_catalog(self) -> OfferCatalog:
        try:
            payload = json.loads(self.file_path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise CatalogFormatError(f"Cannot read {self.file_path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise CatalogFormatError(f"{self.file_path} is not valid JSON: {exc}") from exc
        return CatalogLoader(source=self.source).load(payload)


def merge_catalogs(*catalogs: OfferCatalog) -> OfferCatalog:
    offers = tuple(offer for catalog in catalogs for offer in catalog.offers)
    warnings = tuple(warning for catalog in catalogs for warning in catalog.warnings)
    return OfferCatalog(offers=offers, warnings=warnings)
