"""
Factory d'application pour les entrypoints (ex: checkout_backend.asgi) et les tests.
Ordonne les étapes d'initialisation de manière lisible et testable.
"""
from typing import Optional

from fastapi import FastAPI

from checkout_backend.catalog import Catalog
from checkout_backend.config import Settings, load_settings
from .lifespan import lifespan
from .middlewares import register_cors_middleware, register_security_middleware
from .exceptions import register_exception_handlers
from .routers import register_routers

def create_app(settings: Optional[Settings] = None, catalog: Optional[Catalog] = None) -> FastAPI:
    """
    Construit l'app FastAPI avec le lifespan et enregistre:
      - CORS (liste blanche) et en-têtes de sécurité
      - gestionnaires d'exceptions
      - tous les routers (checkout, marketing, health)
    Paramètres:
      - settings: instantané de configuration (défaut: load_settings())
      - catalog: catalogue déjà construit (défaut: chargé depuis settings.products_path au démarrage)
    """
    settings = settings or load_settings()
    app = FastAPI(title="J.HINTON Checkout API", lifespan=lifespan)
    app.state.settings = settings
    app.state.catalog = catalog
    app.state.rate_limit_enabled = False
    register_security_middleware(app)
    register_cors_middleware(app, settings.cors_origins)
    register_exception_handlers(app)
    register_routers(app)
    return app
