"""
Lifespan FastAPI: initialisation/arrêt des ressources partagées.
- Valide la configuration (ConfigurationError => le process ne sert aucune requête).
- Charge le catalogue produits une seule fois (sauf s'il a été injecté par create_app).
- Initialise FastAPILimiter (Redis) avec options de test (fakeredis).
- Variables d'environnement supportées:
  - DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS=1: désactive complètement (tests)
  - USE_FAKE_REDIS_FOR_TESTS=1: utilise fakeredis (tests)
  - LOCAL_RATE_LIMIT_FALLBACK=1: active un fallback local si l'init échoue
  - RATE_LIMIT_REDIS_URL: URL Redis (défaut redis://127.0.0.1:6379/0)
"""
import os
import logging
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from fastapi import FastAPI
from fastapi_limiter import FastAPILimiter

from checkout_backend.catalog import load_catalog
from checkout_backend.config import validate_settings
from checkout_backend.payments.stripe_client import require_stripe

try:
    from fakeredis.aioredis import FakeRedis  # tests only
except ImportError:
    FakeRedis = None


async def _init_rate_limiter(app: FastAPI, logger: logging.Logger) -> None:
    """
    Configure le rate limiting et gère les fallbacks.
    - En cas d'échec de Redis et sans fallback, le rate limiting est désactivé proprement.
    """
    if os.getenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS") == "1":
        app.state.rate_limit_enabled = False
        logger.info("Rate limiting disabled by DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS")
        return
    try:
        if os.getenv("USE_FAKE_REDIS_FOR_TESTS") == "1":
            if not FakeRedis:
                raise RuntimeError("USE_FAKE_REDIS_FOR_TESTS=1 mais fakeredis n'est pas installé.")
            r = FakeRedis(decode_responses=True)
        else:
            redis_url = os.getenv("RATE_LIMIT_REDIS_URL", "redis://127.0.0.1:6379/0")
            r = aioredis.from_url(redis_url, encoding="utf-8", decode_responses=True)

        await FastAPILimiter.init(r)
        app.state.rate_limit_enabled = True
        logger.info("Rate limiting enabled")
    except Exception as e:
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            app.state.rate_limit_enabled = True
            logger.warning("Rate limiting falling back to local in-memory due to init error: %s", e)
        else:
            app.state.rate_limit_enabled = False
            logger.warning("Rate limiting disabled due to init error: %s", e)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Démarrage: validation de Settings, catalogue, client Stripe, rate limiter.
    Arrêt: fermeture de la connexion Redis du limiteur si elle a été ouverte.
    """
    logger = logging.getLogger("uvicorn.error")
    settings = validate_settings(app.state.settings)

    if getattr(app.state, "catalog", None) is None:
        app.state.catalog = load_catalog(settings.products_path, default_currency=settings.currency)
    logger.info("Catalog ready: %s products", len(app.state.catalog))

    require_stripe(settings)
    if settings.stripe_webhook_secret:
        logger.info("Stripe webhook secret configured")
    else:
        logger.warning("STRIPE_WEBHOOK_SECRET missing: webhook events will be refused")

    await _init_rate_limiter(app, logger)
    try:
        yield
    finally:
        if app.state.rate_limit_enabled and getattr(FastAPILimiter, "redis", None) is not None:
            await FastAPILimiter.close()
