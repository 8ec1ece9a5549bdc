from typing import Dict, Any
from urllib.parse import urlparse
from fastapi import Request, Response, HTTPException
import logging
import os
import time

logger = logging.getLogger(__name__)


def _client_key(req: Request) -> str:
    # Clé par IP cliente (derrière proxy: X-Forwarded-For en premier) et par chemin
    forwarded = (req.headers.get("x-forwarded-for") or "").split(",")[0].strip()
    ip = forwarded or (req.client.host if req.client else "local")
    return f"ip:{ip}:{req.url.path}"


def optional_rate_limit(times: int, seconds: int):
    """
    Dépendance de rate limiting "best-effort".
    - LOCAL_RATE_LIMIT_FALLBACK=1: fenêtre glissante en mémoire (dev/tests)
    - app.state.rate_limit_enabled False: désactivé
    - sinon fastapi-limiter (Redis); une panne du limiteur ne bloque jamais la requête
    """
    async def _dep(request: Request, response: Response):
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            now = time.time()
            key = _client_key(request)
            store = getattr(request.app.state, "_rl_store", {})
            hits = [t for t in store.get(key, []) if now - t < seconds]
            if len(hits) >= times:
                raise HTTPException(status_code=429, detail="Too Many Requests")
            hits.append(now)
            store[key] = hits
            request.app.state._rl_store = store
            return

        if getattr(request.app.state, "rate_limit_enabled", None) is not True:
            return

        try:
            from fastapi_limiter.depends import RateLimiter
        except ImportError:
            return

        async def _identifier(req: Request) -> str:
            return _client_key(req)

        try:
            return await RateLimiter(times=times, seconds=seconds, identifier=_identifier)(request, response)
        except HTTPException:
            raise
        except Exception as e:
            logger.warning("rate_limit backend error, allowing request: %s", e)
            return
    return _dep


def rate_limit_health_info(request: Request) -> Dict[str, Any]:
    enabled = getattr(request.app.state, "rate_limit_enabled", None)

    limiter_ready = False
    backend = None
    try:
        from fastapi_limiter import FastAPILimiter
        limiter_ready = getattr(FastAPILimiter, "redis", None) is not None
        backend = "redis" if limiter_ready else None
    except ImportError:
        pass
    if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
        backend = backend or "memory"

    info: Dict[str, Any] = {
        "enabled": (bool(enabled) if enabled is not None else None),
        "ready": limiter_ready,
        "backend": backend,
    }

    if backend == "redis":
        redis_url = os.getenv("RATE_LIMIT_REDIS_URL")
        if redis_url:
            p = urlparse(redis_url)
            info["redis"] = {
                "scheme": p.scheme,
                "host": p.hostname,
                "port": p.port,
            }

    return info
