"""
Types du flux checkout: lignes normalisées, options de livraison, requête de session.
"""
from typing import Any, Dict, List, Tuple
from pydantic import BaseModel, ConfigDict, Field

MIN_QUANTITY = 1
MAX_QUANTITY = 99


class NormalizedLine(BaseModel):
    """Ligne de panier canonique: (SKU de base, variante, quantité bornée)."""
    model_config = ConfigDict(frozen=True)

    base_sku: str
    variant: str = ""
    quantity: int = Field(default=MIN_QUANTITY, ge=MIN_QUANTITY, le=MAX_QUANTITY)


class ShippingOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    amount: int = Field(ge=0)
    estimate_days_min: int
    estimate_days_max: int

    def to_stripe(self, currency: str) -> Dict[str, Any]:
        """Format shipping_rate_data attendu par Checkout Session."""
        return {
            "shipping_rate_data": {
                "display_name": self.label,
                "type": "fixed_amount",
                "fixed_amount": {"amount": self.amount, "currency": currency},
                "delivery_estimate": {
                    "minimum": {"unit": "business_day", "value": self.estimate_days_min},
                    "maximum": {"unit": "business_day", "value": self.estimate_days_max},
                },
            }
        }


class CheckoutSessionRequest(BaseModel):
    """
    Requête complète de création de session, prête pour stripe.checkout.Session.create.
    - line_items: prix et devise issus exclusivement du catalogue
    - metadata: map plate str -> str (source + size_<sku>)
    """
    model_config = ConfigDict(frozen=True)

    line_items: List[Dict[str, Any]]
    shipping_options: List[Dict[str, Any]]
    success_url: str
    cancel_url: str
    metadata: Dict[str, str]
    shipping_countries: Tuple[str, ...] = ("US",)

    def to_stripe_params(self) -> Dict[str, Any]:
        return {
            "mode": "payment",
            "payment_method_types": ["card"],
            "line_items": self.line_items,
            "automatic_tax": {"enabled": True},
            "billing_address_collection": "required",
            "shipping_address_collection": {"allowed_countries": list(self.shipping_countries)},
            "shipping_options": self.shipping_options,
            "phone_number_collection": {"enabled": True},
            "success_url": self.success_url,
            "cancel_url": self.cancel_url,
            "metadata": dict(self.metadata),
        }
