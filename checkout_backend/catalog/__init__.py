"""
Module 'catalog': table SKU -> produit, chargée une fois et injectée.
"""

from .models import CatalogEntry
from .repository import Catalog, load_catalog

__all__ = ["CatalogEntry", "Catalog", "load_catalog"]
