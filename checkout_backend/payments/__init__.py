"""
Module 'payments' (feature-first): point d'entrée public.
Réunit normalisation du panier, politique de prix, construction de session et client Stripe.
"""

from .models import NormalizedLine, ShippingOption, CheckoutSessionRequest
from .cart import split_sku, coerce_quantity, normalize_cart
from .pricing import ShippingPolicy, compute_subtotal, select_shipping_options
from .session_builder import RedirectConfig, build_session_request
from .stripe_client import require_stripe, create_session, get_session, parse_event

__all__ = [
    # models
    "NormalizedLine",
    "ShippingOption",
    "CheckoutSessionRequest",
    # cart
    "split_sku",
    "coerce_quantity",
    "normalize_cart",
    # pricing
    "ShippingPolicy",
    "compute_subtotal",
    "select_shipping_options",
    # session
    "RedirectConfig",
    "build_session_request",
    # stripe
    "require_stripe",
    "create_session",
    "get_session",
    "parse_event",
]
