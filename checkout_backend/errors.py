"""
Taxonomie d'erreurs du backend checkout.
Chaque exception porte son code HTTP; le handler global (app_setup.exceptions)
les convertit en JSON ({"error": ...} ou {"ok": false, "error": ...} sous /api/).
"""
from typing import Any, Optional


class CheckoutError(Exception):
    """Base commune: message lisible + code HTTP + détails optionnels."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details


class ConfigurationError(CheckoutError):
    """Secret/URL obligatoire absent ou invalide (fatal au démarrage)."""

    status_code = 500


class ValidationError(CheckoutError):
    """Requête rejetée sans effet de bord (panier vide, SKU inconnu, consentement...)."""

    status_code = 400


class EmptyCartError(ValidationError):
    def __init__(self, message: str = "Cart is empty"):
        super().__init__(message)


class UnknownSkuError(ValidationError):
    def __init__(self, sku: str):
        super().__init__(f"Unknown or inactive product: {sku}")
        self.sku = sku


class ConsentRequiredError(ValidationError):
    def __init__(self, message: str = "Consent required"):
        super().__init__(message)


class SignatureError(CheckoutError):
    """Webhook dont l'authenticité n'a pas pu être vérifiée."""

    status_code = 400


class UpstreamError(CheckoutError):
    """Échec d'un appel fournisseur (Stripe, Klaviyo)."""

    status_code = 502
