"""
Middlewares transverses de l'application.
- register_cors_middleware: CORS en liste blanche stricte (aucun contournement localhost ni "*").
- register_security_middleware: en-têtes de sécurité sur toutes les réponses.
Notes:
- Une requête sans en-tête Origin (curl, Stripe) n'est pas concernée par CORS.
- L'origine est comparée exactement, après suppression du slash final.
"""
from typing import Iterable, Sequence

from fastapi import FastAPI, Request
from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp


def normalize_origin(origin: str) -> str:
    return (origin or "").strip().rstrip("/")


def is_origin_allowed(origin: str, allowed: Iterable[str]) -> bool:
    """
    Prédicat pur: True si `origin` figure exactement dans `allowed`.
    - "https://shop.example/" == "https://shop.example"
    - les entrées "*" sont ignorées; origine vide => False
    """
    candidate = normalize_origin(origin)
    if not candidate:
        return False
    return any(candidate == normalize_origin(a) for a in allowed if a and a.strip() != "*")


class AllowListCORSMiddleware(CORSMiddleware):
    """CORSMiddleware de Starlette dont le test d'origine délègue à is_origin_allowed."""

    def __init__(self, app: ASGIApp, allow_origins: Sequence[str] = (), **kwargs) -> None:
        origins = [normalize_origin(o) for o in allow_origins if o and o.strip() != "*"]
        super().__init__(app, allow_origins=origins, **kwargs)

    def is_allowed_origin(self, origin: str) -> bool:
        return is_origin_allowed(origin, self.allow_origins)


def register_cors_middleware(app: FastAPI, origins: Sequence[str]) -> None:
    app.add_middleware(
        AllowListCORSMiddleware,
        allow_origins=list(origins),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )


def register_security_middleware(app: FastAPI) -> None:
    """
    En-têtes: X-Frame-Options, X-Content-Type-Options, Referrer-Policy, Permissions-Policy.
    Une valeur déjà posée par la route est conservée.
    """
    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        if "X-Frame-Options" not in response.headers:
            response.headers["X-Frame-Options"] = "DENY"
        if "X-Content-Type-Options" not in response.headers:
            response.headers["X-Content-Type-Options"] = "nosniff"
        if "Referrer-Policy" not in response.headers:
            response.headers["Referrer-Policy"] = "no-referrer"
        if "Permissions-Policy" not in response.headers:
            response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        return response
