import hashlib
import hmac
import json
import os
import time
from typing import Any, Callable, Dict, Generator, Optional

import pytest
from fastapi.testclient import TestClient

# Environnement de test, fixé avant tout import de checkout_backend (.env ne l'écrase pas)
os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["SITE_URL"] = "https://shop.example"
os.environ["DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS"] = "1"

from checkout_backend.app_setup.factory import create_app
from checkout_backend.catalog import Catalog
from checkout_backend.config import Settings

WEBHOOK_SECRET = "whsec_test_secret"

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)

@pytest.fixture(autouse=True)
def _no_local_rate_limit(monkeypatch):
    # Le fallback mémoire ne doit être actif que dans les tests qui le demandent
    monkeypatch.delenv("LOCAL_RATE_LIMIT_FALLBACK", raising=False)

@pytest.fixture
def catalog() -> Catalog:
    """Catalogue factice, indépendant de products.json."""
    return Catalog.from_mapping({
        "TEE-BLK": {"name": "Essential Tee - Black", "price": 2000, "currency": "usd", "image": "https://cdn.example/tee.jpg"},
        "HOOD-BLK": {"name": "Signature Hoodie", "price": 12000, "currency": "usd", "description": "Brushed fleece"},
        "CAP-LOGO": {"price": 3500},
        "TOTE-ARCHIVE": {"name": "Archive Tote", "price": 0},
        "SCARF-EU": {"name": "Wool Scarf", "price": 5000, "currency": "eur"},
    })

@pytest.fixture
def settings() -> Settings:
    return Settings(
        stripe_secret_key="sk_test_dummy",
        stripe_webhook_secret=WEBHOOK_SECRET,
        site_url="https://shop.example/",
        allowed_origins=("https://shop.example", "https://www.shop.example/"),
        resend_api_key="re_test_dummy",
        from_email="orders@shop.example",
        internal_order_email="team@shop.example",
        klaviyo_private_key="pk_test_dummy",
        klaviyo_list_id="LIST123",
    )

@pytest.fixture
def app(settings, catalog):
    return create_app(settings=settings, catalog=catalog)

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c

@pytest.fixture
def sign_webhook() -> Callable[..., str]:
    """
    Construit un en-tête Stripe-Signature valide: t=<ts>,v1=HMAC_SHA256(secret, "<ts>.<payload>").
    """
    def _sign(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: Optional[int] = None) -> str:
        ts = int(timestamp if timestamp is not None else time.time())
        signed = f"{ts}.{payload.decode('utf-8')}".encode("utf-8")
        digest = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
        return f"t={ts},v1={digest}"
    return _sign

@pytest.fixture
def make_event() -> Callable[..., bytes]:
    def _event(event_type: str = "checkout.session.completed", obj: Optional[Dict[str, Any]] = None) -> bytes:
        body = {
            "id": "evt_test_1",
            "object": "event",
            "type": event_type,
            "data": {"object": obj or {"id": "cs_test_1", "object": "checkout.session"}},
        }
        return json.dumps(body).encode("utf-8")
    return _event

@pytest.fixture
def completed_session() -> Dict[str, Any]:
    """Session Stripe complète telle que renvoyée avec line_items/customer développés."""
    return {
        "id": "cs_test_1",
        "object": "checkout.session",
        "created": 1735689600,  # 2025-01-01T00:00:00Z
        "currency": "usd",
        "status": "complete",
        "payment_status": "paid",
        "amount_subtotal": 4000,
        "amount_total": 5295,
        "total_details": {"amount_shipping": 1295},
        "customer_details": {"email": "buyer@example.com", "name": "Ada Buyer"},
        "customer": {"id": "cus_1", "email": "fallback@example.com", "name": "Fallback"},
        "shipping_details": {
            "name": "Ada Buyer",
            "address": {
                "line1": "1 Main St",
                "line2": "Apt 2",
                "city": "Brooklyn",
                "state": "NY",
                "postal_code": "11201",
                "country": "US",
            },
        },
        "line_items": {
            "data": [
                {
                    "description": "Essential Tee - Black",
                    "quantity": 2,
                    "price": {
                        "unit_amount": 2000,
                        "product": {"name": "Essential Tee - Black", "description": "Size: M", "metadata": {"sku": "TEE-BLK", "variant": "M"}},
                    },
                }
            ]
        },
        "metadata": {"source": "jhinton-site", "size_TEE-BLK": "M"},
    }
