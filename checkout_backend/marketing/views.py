from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from checkout_backend.config import Settings
from checkout_backend.dependencies import get_settings
from checkout_backend.utils.rate_limit import optional_rate_limit
from . import service as marketing_service

router = APIRouter(prefix="/api/klaviyo", tags=["Marketing API"])


class SubscribeRequest(BaseModel):
    # Champs optionnels: les règles (email requis, consentement) sont dans le service
    email: Optional[str] = None
    phone: Optional[Any] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    marketing_texts: bool = False
    marketing_emails: bool = False
    consent: bool = False


@router.post("/subscribe", dependencies=[Depends(optional_rate_limit(times=5, seconds=60))])
async def subscribe(req: SubscribeRequest, settings: Settings = Depends(get_settings)):
    """
    Inscription newsletter (email + SMS optionnel).
    - 400 si email manquant ou consentement absent
    - 500 si Klaviyo n'est pas configuré; 400 si Klaviyo rejette la demande
    """
    return await marketing_service.subscribe(
        settings,
        email=(req.email or "").strip(),
        consent=req.consent,
        phone=req.phone,
        first_name=req.first_name,
        last_name=req.last_name,
        marketing_emails=req.marketing_emails,
        marketing_texts=req.marketing_texts,
    )
