"""
Adaptateur Stripe: centralise les appels et la configuration Stripe.
Les fonctions sont synchrones (SDK bloquant); le service les exécute hors event loop.
"""
import logging
from typing import Any, Dict, List, Optional

import stripe

from checkout_backend.config import Settings
from checkout_backend.errors import ConfigurationError, SignatureError, UpstreamError

logger = logging.getLogger(__name__)

COMPLETED_EVENT = "checkout.session.completed"
WEBHOOK_EXPAND = ["line_items.data.price.product", "customer", "payment_intent"]


# module checkout_backend.payments.stripe_client
def require_stripe(settings: Settings):
    """
    Prépare et retourne le module stripe prêt à l'emploi.
    - Configure stripe.api_key et la version d'API figée depuis Settings.
    - ConfigurationError si STRIPE_SECRET_KEY est absent.
    """
    if not settings.stripe_secret_key:
        raise ConfigurationError("Missing STRIPE_SECRET_KEY")
    stripe.api_key = settings.stripe_secret_key
    stripe.api_version = settings.stripe_api_version
    return stripe


def _as_dict(obj: Any) -> Dict[str, Any]:
    # StripeObject -> dict récursif (to_dict_recursive ou to_dict selon la version du SDK)
    if type(obj) is dict:
        return obj
    for name in ("to_dict_recursive", "to_dict"):
        fn = getattr(obj, name, None)
        if callable(fn):
            return fn()
    return dict(obj)


def _upstream(action: str, e: "stripe.StripeError") -> UpstreamError:
    status = getattr(e, "http_status", None)
    message = getattr(e, "user_message", None) or str(e) or f"Stripe {action} failed"
    if status == 404:
        return UpstreamError("Checkout session not found", status_code=404)
    return UpstreamError(message)


def create_session(params: Dict[str, Any]) -> Dict[str, Any]:
    """
    Crée une session Stripe Checkout.
    - params: sortie de CheckoutSessionRequest.to_stripe_params()
    Retour: dict session (ex: {"id": "cs_test_...", "url": "https://..."})
    """
    try:
        session = stripe.checkout.Session.create(**params)
    except stripe.StripeError as e:
        logger.warning("payments.stripe create_session failed: %s", e)
        raise _upstream("create_session", e)
    return _as_dict(session)


def get_session(session_id: str, expand: Optional[List[str]] = None) -> Dict[str, Any]:
    """
    Récupère une session Stripe Checkout par son identifiant.
    - expand: relations à développer (line_items, customer, ...)
    """
    if not session_id:
        raise UpstreamError("Checkout session not found", status_code=404)
    try:
        session = stripe.checkout.Session.retrieve(session_id, expand=expand or [])
    except stripe.StripeError as e:
        logger.warning("payments.stripe get_session failed id=%s: %s", session_id, e)
        raise _upstream("get_session", e)
    return _as_dict(session)


def parse_event(payload: bytes, sig_header: Optional[str], secret: str) -> Dict[str, Any]:
    """
    Valide un événement Stripe signé (webhook) sur le body BRUT.
    - Aucun secret configuré => ConfigurationError: on refuse, jamais de repli non signé.
    - Signature absente/invalide ou payload illisible => SignatureError.
    Retour: l'événement sous forme de dict ({"id", "type", "data": {"object": ...}}).
    """
    if not secret:
        raise ConfigurationError("STRIPE_WEBHOOK_SECRET is not configured; refusing webhook events")
    if not sig_header:
        raise SignatureError("Missing Stripe-Signature header")
    try:
        event = stripe.Webhook.construct_event(payload, sig_header, secret)
    except stripe.SignatureVerificationError as e:
        raise SignatureError(f"Webhook signature verification failed: {e}")
    except ValueError as e:
        raise SignatureError(f"Invalid webhook payload: {e}")
    return _as_dict(event)
