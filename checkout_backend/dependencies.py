"""
Dépendances FastAPI partagées: accès aux ressources construites au démarrage.
"""
import json
from typing import Any

from fastapi import Request

from checkout_backend.catalog import Catalog
from checkout_backend.config import Settings
from checkout_backend.errors import ValidationError


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_catalog(request: Request) -> Catalog:
    """Catalogue injecté par le lifespan (lecture seule, partagé entre requêtes)."""
    return request.app.state.catalog


async def read_json_body(request: Request) -> Any:
    """Body JSON de la requête; ValidationError si illisible."""
    raw = await request.body()
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise ValidationError("Invalid JSON body")
