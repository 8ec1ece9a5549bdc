"""
ASGI entrypoint: expose `app` for process managers / deployments.

- En production, un process manager (ex: uvicorn, gunicorn -k uvicorn.workers.UvicornWorker)
  importe `checkout_backend.asgi:app`.
- Toute la configuration (routes, middlewares, exceptions) est centralisée dans
  checkout_backend.app_setup.factory; ce fichier ne fait qu'exposer l'instance `app`.
"""

from checkout_backend.app import app

__all__ = ["app"]
