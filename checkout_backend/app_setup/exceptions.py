"""
Gestionnaires d'exceptions utilisés par la factory.
- CheckoutError (et sous-classes): code HTTP porté par l'exception.
- Routes storefront: {"error": message}
- Routes /api/*: {"ok": false, "error": message, "details"?}
"""
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from checkout_backend.errors import CheckoutError

logger = logging.getLogger(__name__)


def _is_api(request: Request) -> bool:
    return request.url.path.startswith("/api/")


def error_payload(request: Request, message: str, details: Optional[Any] = None) -> Dict[str, Any]:
    if _is_api(request):
        content: Dict[str, Any] = {"ok": False, "error": message}
        if details is not None:
            content["details"] = details
        return content
    return {"error": message}


def register_exception_handlers(app: FastAPI) -> None:
    """
    Enregistre les handlers CheckoutError et RequestValidationError (/api/*).
    - 5xx loggés en erreur, 4xx en info (pas de payload client dans les logs).
    """
    @app.exception_handler(CheckoutError)
    async def checkout_error_handler(request: Request, exc: CheckoutError):
        if exc.status_code >= 500:
            logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
        else:
            logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_payload(request, exc.message, exc.details),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        if _is_api(request):
            return JSONResponse(status_code=400, content=error_payload(request, "Invalid request body"))
        return JSONResponse(status_code=422, content={"detail": exc.errors()})
