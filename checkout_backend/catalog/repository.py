"""
Accès au catalogue statique (fichier JSON chargé une fois au démarrage).
"""
import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from checkout_backend.catalog.models import CatalogEntry
from checkout_backend.errors import ConfigurationError

logger = logging.getLogger(__name__)


class Catalog(Mapping[str, CatalogEntry]):
    """
    Table SKU -> CatalogEntry en lecture seule.
    Construite une fois puis injectée (app.state.catalog) dans les composants de prix;
    aucune mutation après chargement, un rechargement exige un redémarrage.
    """

    def __init__(self, entries: Mapping[str, CatalogEntry]):
        self._entries = MappingProxyType(dict(entries))

    def __getitem__(self, sku: str) -> CatalogEntry:
        return self._entries[sku]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def resolve(self, sku: str) -> Optional[CatalogEntry]:
        """Entrée active pour ce SKU, ou None (inconnu ou prix nul)."""
        entry = self._entries.get(sku)
        if entry is None or not entry.is_active:
            return None
        return entry

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Mapping[str, Any]], default_currency: str = "usd") -> "Catalog":
        """
        Construit le catalogue depuis {sku: {name, price, currency, image, description}}.
        - La clé du dict fait foi pour le SKU.
        - Lève ConfigurationError si une entrée est invalide (prix négatif, non entier, pas un objet...).
        """
        entries: Dict[str, CatalogEntry] = {}
        for sku, attrs in (raw or {}).items():
            if not isinstance(attrs, Mapping):
                raise ConfigurationError(f"Invalid catalog entry {sku!r}: expected an object")
            data = dict(attrs)
            data["sku"] = str(sku).strip()
            if not data.get("currency"):
                data["currency"] = default_currency
            try:
                entries[data["sku"]] = CatalogEntry.model_validate(data)
            except PydanticValidationError as e:
                raise ConfigurationError(f"Invalid catalog entry {sku!r}: {e.errors()[0].get('msg')}")
        return cls(entries)


def load_catalog(path: Union[str, Path], default_currency: str = "usd") -> Catalog:
    """
    Charge products.json depuis le disque.
    - Fichier absent ou JSON invalide => ConfigurationError (fatal au démarrage)
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise ConfigurationError(f"Product catalog not found: {path}")
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Product catalog is not valid JSON ({path}): {e}")
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Product catalog must be a JSON object keyed by SKU: {path}")
    catalog = Catalog.from_mapping(raw, default_currency=default_currency)
    logger.info("catalog.load path=%s entries=%s", path, len(catalog))
    return catalog
