import pytest

from checkout_backend.errors import UpstreamError


@pytest.fixture
def captured_params(monkeypatch):
    captured = []

    def _fake_create_session(params):
        captured.append(params)
        return {"id": "cs_test_1", "url": "https://checkout.stripe.com/c/pay/cs_test_1"}

    monkeypatch.setattr("checkout_backend.payments.stripe_client.create_session", _fake_create_session)
    return captured


def test_create_checkout_session_ok(client, captured_params):
    # Arrange
    body = {"items": [{"sku": "TEE-BLK--M", "qty": 2}]}
    # Act
    res = client.post("/create-checkout-session", json=body)
    # Assert
    assert res.status_code == 200
    assert res.json() == {"url": "https://checkout.stripe.com/c/pay/cs_test_1", "id": "cs_test_1"}
    params = captured_params[0]
    assert params["line_items"][0]["quantity"] == 2
    assert params["line_items"][0]["price_data"]["unit_amount"] == 2000
    assert params["metadata"] == {"source": "jhinton-site", "size_TEE-BLK": "M"}
    assert len(params["shipping_options"]) == 2


def test_client_price_field_is_ignored(client, captured_params):
    body = {"items": [{"sku": "HOOD-BLK", "qty": 1, "price": 1, "price_data": {"unit_amount": 1}}]}
    res = client.post("/create-checkout-session", json=body)
    assert res.status_code == 200
    assert captured_params[0]["line_items"][0]["price_data"]["unit_amount"] == 12000


def test_huge_quantity_is_clamped_to_max(client, captured_params):
    # Entier JSON de 400 chiffres: borné à 99, jamais une erreur 500
    body = b'{"items": [{"sku": "TEE-BLK", "qty": ' + b"9" * 400 + b"}]}"
    res = client.post("/create-checkout-session", content=body, headers={"Content-Type": "application/json"})
    assert res.status_code == 200
    assert captured_params[0]["line_items"][0]["quantity"] == 99


@pytest.mark.parametrize("body", [{"items": []}, {}, {"items": "TEE-BLK"}, []])
def test_empty_cart_is_400(client, captured_params, body):
    res = client.post("/create-checkout-session", json=body)
    assert res.status_code == 400
    assert res.json() == {"error": "Cart is empty"}
    assert captured_params == []


def test_unknown_sku_is_400(client, captured_params):
    res = client.post("/create-checkout-session", json={"items": [{"sku": "TEE-BLK", "qty": 1}, {"sku": "GHOST--L", "qty": 1}]})
    assert res.status_code == 400
    assert res.json() == {"error": "Unknown or inactive product: GHOST"}
    assert captured_params == []


def test_invalid_json_is_400(client, captured_params):
    res = client.post("/create-checkout-session", content=b"{not json", headers={"Content-Type": "application/json"})
    assert res.status_code == 400
    assert res.json() == {"error": "Invalid JSON body"}


def test_stripe_failure_is_502(client, monkeypatch):
    def _fail(params):
        raise UpstreamError("Stripe is unavailable")

    monkeypatch.setattr("checkout_backend.payments.stripe_client.create_session", _fail)
    res = client.post("/create-checkout-session", json={"items": [{"sku": "TEE-BLK", "qty": 1}]})
    assert res.status_code == 502
    assert res.json() == {"error": "Stripe is unavailable"}


def test_get_checkout_session_projection(client, monkeypatch, completed_session):
    seen = {}

    def _fake_get_session(session_id, expand=None):
        seen["args"] = (session_id, expand)
        return completed_session

    monkeypatch.setattr("checkout_backend.payments.stripe_client.get_session", _fake_get_session)
    res = client.get("/checkout-session/cs_test_1")

    assert res.status_code == 200
    data = res.json()
    assert data["id"] == "cs_test_1"
    assert data["payment_status"] == "paid"
    assert data["amount_total"] == 5295
    assert data["customer_email"] == "buyer@example.com"
    assert "line_items" not in data
    assert seen["args"] == ("cs_test_1", ["customer"])


def test_get_checkout_session_unknown_is_404(client, monkeypatch):
    def _missing(session_id, expand=None):
        raise UpstreamError("Checkout session not found", status_code=404)

    monkeypatch.setattr("checkout_backend.payments.stripe_client.get_session", _missing)
    res = client.get("/checkout-session/cs_missing")
    assert res.status_code == 404
    assert res.json() == {"error": "Checkout session not found"}
