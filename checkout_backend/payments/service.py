"""
Cas d'usage 'payments': orchestre cart, pricing, session_builder, stripe_client et notifications.
"""
import logging
from typing import Any, Dict, Optional

from starlette.concurrency import run_in_threadpool

from checkout_backend.catalog import Catalog
from checkout_backend.config import Settings
from checkout_backend.notifications import send_order_emails
from . import cart as cart_logic
from . import pricing
from . import stripe_client
from .session_builder import RedirectConfig, build_session_request

logger = logging.getLogger(__name__)


def prepare_session_request(items: Any, catalog: Catalog, settings: Settings):
    """
    Panier client -> CheckoutSessionRequest (sans appel réseau).
    1) normalize_cart: SKU/variante/quantité, rejet global si SKU inconnu
    2) compute_subtotal + select_shipping_options selon ShippingPolicy
    3) build_session_request: prix catalogue uniquement, URLs et metadata
    """
    lines = cart_logic.normalize_cart(items, catalog)
    subtotal = pricing.compute_subtotal(lines, catalog)
    policy = pricing.ShippingPolicy.from_settings(settings)
    options = pricing.select_shipping_options(subtotal, policy)
    redirect = RedirectConfig(
        site_url=settings.site_base_url,
        success_path=settings.checkout_success_path,
        cancel_path=settings.checkout_cancel_path,
    )
    request = build_session_request(
        lines,
        catalog,
        options,
        redirect,
        source=settings.metadata_source,
        shipping_countries=settings.shipping_countries,
        default_currency=policy.currency,
    )
    logger.info("payments.checkout lines=%s subtotal=%s shipping_options=%s", len(lines), subtotal, len(options))
    return request


async def create_checkout(items: Any, catalog: Catalog, settings: Settings) -> Dict[str, Any]:
    """Crée la session hébergée et retourne {"url", "id"} pour la redirection client."""
    request = prepare_session_request(items, catalog, settings)
    stripe_client.require_stripe(settings)
    session = await run_in_threadpool(stripe_client.create_session, request.to_stripe_params())
    logger.info("payments.checkout created session_id=%s", session.get("id"))
    return {"url": session.get("url"), "id": session.get("id")}


def project_session(session: Dict[str, Any]) -> Dict[str, Any]:
    """Projection publique d'une session: statut, montants, contact client, metadata."""
    details = session.get("customer_details") or {}
    customer = session.get("customer") if isinstance(session.get("customer"), dict) else {}
    totals = session.get("total_details") or {}
    return {
        "id": session.get("id"),
        "status": session.get("status"),
        "payment_status": session.get("payment_status"),
        "amount_total": session.get("amount_total"),
        "amount_subtotal": session.get("amount_subtotal"),
        "amount_shipping": totals.get("amount_shipping"),
        "currency": session.get("currency"),
        "customer_email": details.get("email") or customer.get("email"),
        "customer_name": details.get("name") or customer.get("name"),
        "metadata": dict(session.get("metadata") or {}),
    }


async def get_session_status(session_id: str, settings: Settings) -> Dict[str, Any]:
    stripe_client.require_stripe(settings)
    session = await run_in_threadpool(stripe_client.get_session, session_id, ["customer"])
    return project_session(session)


async def handle_webhook(payload: bytes, sig_header: Optional[str], settings: Settings) -> Dict[str, Any]:
    """
    Webhook Stripe: vérifie la signature puis traite checkout.session.completed.
    - Signature/secret: erreurs propagées (400 / 500), aucun effet de bord.
    - Après vérification, toute erreur aval (Stripe retrieve, email) est loggée puis
      absorbée: Stripe reçoit {"received": true} et ne relivre pas pour une panne d'email.
    """
    event = stripe_client.parse_event(payload, sig_header, settings.stripe_webhook_secret)
    event_type = event.get("type")
    if event_type != stripe_client.COMPLETED_EVENT:
        logger.info("payments.webhook ignored type=%s id=%s", event_type, event.get("id"))
        return {"received": True}

    session_id = ((event.get("data") or {}).get("object") or {}).get("id")
    try:
        stripe_client.require_stripe(settings)
        full = await run_in_threadpool(stripe_client.get_session, session_id, stripe_client.WEBHOOK_EXPAND)
        await send_order_emails(full, settings)
    except Exception:
        logger.exception("payments.webhook handling error session_id=%s event_id=%s", session_id, event.get("id"))
    return {"received": True}
