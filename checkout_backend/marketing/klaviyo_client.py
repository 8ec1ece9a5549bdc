"""
Client HTTP Klaviyo (API REST, httpx asynchrone).
"""
from typing import Any, Dict, Tuple

import httpx

KLAVIYO_SUBSCRIBE_URL = "https://a.klaviyo.com/api/profile-subscription-bulk-create-jobs/"


async def post_subscription(payload: Dict[str, Any], *, api_key: str, revision: str) -> Tuple[int, Dict[str, Any]]:
    """
    POST du job d'inscription. Retourne (status_code, body JSON ou {}).
    Les erreurs réseau (httpx.HTTPError) sont propagées à l'appelant.
    """
    headers = {
        "Authorization": f"Klaviyo-API-Key {api_key}",
        "Content-Type": "application/json",
        "Accept": "application/json",
        "revision": revision,
    }
    async with httpx.AsyncClient() as client:
        response = await client.post(KLAVIYO_SUBSCRIBE_URL, json=payload, headers=headers)
    try:
        data = response.json() if response.content else {}
    except ValueError:
        data = {}
    return response.status_code, data
