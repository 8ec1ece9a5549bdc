import logging

from fastapi import APIRouter, Depends, Request

from checkout_backend.catalog import Catalog
from checkout_backend.config import Settings
from checkout_backend.dependencies import get_catalog, get_settings, read_json_body
from checkout_backend.utils.rate_limit import optional_rate_limit
from checkout_backend.payments import service as payments_service

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Checkout"])


# module checkout_backend.payments.views
@router.post("/create-checkout-session", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def create_checkout_session(
    request: Request,
    catalog: Catalog = Depends(get_catalog),
    settings: Settings = Depends(get_settings),
):
    """
    Crée une session Checkout Stripe pour le panier soumis.
    - Entrée JSON: { "items": [ { "sku": "TEE-BLK--M", "qty": 2 }, ... ] }
    - Prix: catalogue serveur uniquement (un champ "price" client est ignoré)
    - Réponse: {"url", "id"}; 400 si panier vide/SKU inconnu, 502 si Stripe échoue
    """
    body = await read_json_body(request)
    items = body.get("items") if isinstance(body, dict) else None
    return await payments_service.create_checkout(items, catalog, settings)


@router.get("/checkout-session/{session_id}")
async def get_checkout_session(session_id: str, settings: Settings = Depends(get_settings)):
    """
    Lecture seule d'une session (page de succès): statut, montants, client.
    - 404 si la session est inconnue de Stripe
    """
    return await payments_service.get_session_status(session_id, settings)


@router.post("/webhook", include_in_schema=False)
async def stripe_webhook(request: Request, settings: Settings = Depends(get_settings)):
    """
    Webhook Stripe (Checkout): consomme checkout.session.completed pour notifier la commande.
    - Body BRUT lu avant tout parsing (la signature porte sur les octets exacts)
    - Réponses: {"received": true}; 400 signature invalide; 500 secret non configuré
    """
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature")
    return await payments_service.handle_webhook(payload, sig_header, settings)
