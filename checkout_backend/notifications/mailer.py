"""
Envoi des emails de commande via Resend.
- Sans RESEND_API_KEY: simple log, le checkout ne dépend jamais de l'email.
- Jusqu'à deux envois: client (si email présent) + copie interne (si configurée).
- Pas de déduplication: une relivraison du webhook renvoie le même message.
"""
import logging
from typing import Any, Dict, Optional

import resend
from starlette.concurrency import run_in_threadpool

from checkout_backend.config import Settings
from .models import CompletedSessionRecord, OrderEmail
from .render import render_order_email

logger = logging.getLogger(__name__)


def send_email(message: OrderEmail, *, to: str, sender: str, api_key: str) -> Dict[str, Any]:
    """Appel bloquant à l'API Resend; retourne la réponse ({"id": ...})."""
    resend.api_key = api_key
    payload: Dict[str, Any] = {
        "from": sender,
        "to": [to],
        "subject": message.subject,
        "html": message.html,
    }
    return resend.Emails.send(payload)


async def dispatch(
    message: OrderEmail,
    settings: Settings,
    *,
    customer_address: Optional[str],
    internal_message: Optional[OrderEmail] = None,
    internal_address: Optional[str] = None,
) -> int:
    """
    Envoie le message au client puis la copie interne.
    - Adresse absente => envoi ignoré (pas une erreur)
    - Échec d'un envoi: loggé, l'autre destinataire est tout de même tenté
    Retour: nombre d'envois acceptés par Resend.
    """
    if not settings.resend_api_key:
        logger.info(
            "notifications.dispatch RESEND_API_KEY not set, skipping (customer=%s internal=%s)",
            bool(customer_address),
            bool(internal_address),
        )
        return 0

    sent = 0
    targets = [(customer_address, message), (internal_address, internal_message or message)]
    for address, msg in targets:
        if not address:
            continue
        try:
            await run_in_threadpool(
                send_email, msg, to=address, sender=settings.from_email, api_key=settings.resend_api_key
            )
            sent += 1
        except Exception:
            logger.exception("notifications.dispatch send failed subject=%s", msg.subject)
    return sent


async def send_order_emails(session: Dict[str, Any], settings: Settings) -> int:
    """
    Cas d'usage webhook: session Stripe complète -> emails client + interne.
    """
    record = CompletedSessionRecord.from_stripe(session)
    internal = settings.internal_order_email
    customer_msg = render_order_email(record, brand=settings.brand_name, support_email=internal)
    internal_msg = render_order_email(record, brand=settings.brand_name, support_email=internal, internal=True)
    sent = await dispatch(
        customer_msg,
        settings,
        customer_address=record.customer_email,
        internal_message=internal_msg,
        internal_address=internal,
    )
    logger.info("notifications.order session_id=%s sent=%s lines=%s", record.id, sent, len(record.lines))
    return sent
