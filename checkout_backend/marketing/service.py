"""
Cas d'usage 'marketing': inscription email (+ SMS optionnel) à la liste Klaviyo.
"""
import logging
import re
from typing import Any, Dict, Optional

import httpx

from checkout_backend.config import Settings
from checkout_backend.errors import ConfigurationError, ConsentRequiredError, UpstreamError, ValidationError
from . import klaviyo_client

logger = logging.getLogger(__name__)

SUBSCRIPTION_SOURCE = "jhinton-home-join"


def normalize_phone(phone: Any) -> Optional[str]:
    """
    Numéro US au format E.164: chiffres uniquement, préfixe +1.
    - "(555) 123-4567" -> "+15551234567"; "1-555-123-4567" -> "+15551234567"
    - vide/sans chiffres -> None
    """
    digits = re.sub(r"\D", "", str(phone or ""))
    if not digits:
        return None
    if len(digits) == 11 and digits.startswith("1"):
        digits = digits[1:]
    return f"+1{digits}"


def build_subscription_payload(
    *,
    list_id: str,
    email: str,
    phone: Any = None,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    marketing_emails: bool = False,
    marketing_texts: bool = False,
) -> Dict[str, Any]:
    """
    Corps JSON:API du job profile-subscription-bulk-create-job.
    - Consentement SMS demandé seulement si marketing_texts et un téléphone est fourni.
    """
    phone_number = normalize_phone(phone)
    subscriptions: Dict[str, Any] = {"email": {"marketing": {"consent": "SUBSCRIBED"}}}
    if marketing_texts and phone_number:
        subscriptions["sms"] = {"marketing": {"consent": "SUBSCRIBED"}}

    attributes: Dict[str, Any] = {
        "email": email,
        "first_name": first_name,
        "last_name": last_name,
        "properties": {
            "marketing_emails": bool(marketing_emails),
            "marketing_texts": bool(marketing_texts),
            "source": SUBSCRIPTION_SOURCE,
        },
    }
    if phone_number:
        attributes["phone_number"] = phone_number

    return {
        "data": {
            "type": "profile-subscription-bulk-create-job",
            "attributes": {
                "list_id": list_id,
                "subscriptions": subscriptions,
                "profiles": [{"type": "profile", "attributes": attributes}],
            },
        }
    }


async def subscribe(
    settings: Settings,
    *,
    email: Optional[str],
    consent: bool,
    phone: Any = None,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    marketing_emails: bool = False,
    marketing_texts: bool = False,
) -> Dict[str, Any]:
    """
    Valide la demande puis appelle Klaviyo (fire-and-forget côté client).
    - email manquant => ValidationError; consentement absent => ConsentRequiredError
    - clés Klaviyo absentes => ConfigurationError
    - réponse non 2xx => UpstreamError(400, details=<corps Klaviyo>)
    """
    if not email:
        raise ValidationError("Missing email")
    if not consent:
        raise ConsentRequiredError()
    if not settings.klaviyo_private_key or not settings.klaviyo_list_id:
        raise ConfigurationError("Klaviyo env vars missing")

    payload = build_subscription_payload(
        list_id=settings.klaviyo_list_id,
        email=email,
        phone=phone,
        first_name=first_name,
        last_name=last_name,
        marketing_emails=marketing_emails,
        marketing_texts=marketing_texts,
    )
    try:
        status, data = await klaviyo_client.post_subscription(
            payload, api_key=settings.klaviyo_private_key, revision=settings.klaviyo_revision
        )
    except httpx.HTTPError as e:
        logger.warning("marketing.subscribe klaviyo unreachable: %s", e)
        raise UpstreamError("Klaviyo unreachable")
    if not 200 <= status < 300:
        logger.warning("marketing.subscribe klaviyo rejected status=%s", status)
        raise UpstreamError("Klaviyo error", status_code=400, details=data)

    logger.info("marketing.subscribe ok sms=%s", "sms" in payload["data"]["attributes"]["subscriptions"])
    return {"ok": True}
