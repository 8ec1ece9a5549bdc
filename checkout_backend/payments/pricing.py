"""
Politique de prix: sous-total et options de livraison selon le sous-total.
"""
import logging
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from checkout_backend.catalog import Catalog
from .models import NormalizedLine, ShippingOption

logger = logging.getLogger(__name__)


class ShippingPolicy(BaseModel):
    """
    Table fixe des paliers de livraison (montants en centimes).
    - free_threshold: sous-total à partir duquel la livraison offerte est proposée
    """
    model_config = ConfigDict(frozen=True)

    free_threshold: int = Field(default=15000, ge=0)
    standard_amount: int = Field(default=1295, ge=0)
    express_amount: int = Field(default=2999, ge=0)
    currency: str = "usd"

    @classmethod
    def from_settings(cls, settings) -> "ShippingPolicy":
        """Applique SHIPPING_FLAT_RATE_CENTS (palier Standard) et le seuil configuré."""
        override: Optional[int] = settings.flat_rate_override
        fields = {"free_threshold": settings.free_shipping_threshold, "currency": settings.currency}
        if override is not None:
            fields["standard_amount"] = override
        return cls(**fields)

    @property
    def free_label(self) -> str:
        return f"Free Shipping (Orders ${self.free_threshold // 100}+)"


DEFAULT_POLICY = ShippingPolicy()


def compute_subtotal(lines: Iterable[NormalizedLine], catalog: Catalog) -> int:
    """
    Somme prix catalogue x quantité, en centimes.
    Les SKU non résolus sont ignorés (avec un warning), contrairement à normalize_cart
    qui rejette le panier entier: le flux checkout n'appelle cette fonction qu'avec
    des lignes déjà validées, l'écart ne peut donc pas modifier un prix facturé.
    """
    subtotal = 0
    for line in lines:
        entry = catalog.resolve(line.base_sku)
        if entry is None:
            logger.warning("pricing.subtotal skipped unresolved sku=%s", line.base_sku)
            continue
        subtotal += entry.price * line.quantity
    return subtotal


def select_shipping_options(subtotal: int, policy: ShippingPolicy = DEFAULT_POLICY) -> List[ShippingOption]:
    """
    Options présentées au payeur, dans cet ordre:
    - Free (en premier) seulement si subtotal >= policy.free_threshold
    - Standard (2-5 jours ouvrés) puis Express (1-2 jours ouvrés), toujours
    """
    options: List[ShippingOption] = []
    if subtotal >= policy.free_threshold:
        options.append(ShippingOption(label=policy.free_label, amount=0, estimate_days_min=2, estimate_days_max=5))
    options.append(ShippingOption(label="Standard (2-5 Days)", amount=policy.standard_amount, estimate_days_min=2, estimate_days_max=5))
    options.append(ShippingOption(label="Express (1-2 Days)", amount=policy.express_amount, estimate_days_min=1, estimate_days_max=2))
    return options
