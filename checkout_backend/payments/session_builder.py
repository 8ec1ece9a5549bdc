"""
Construction de la requête de session Checkout (pure, sans appel Stripe).
"""
from typing import Any, Dict, List, Sequence

from pydantic import BaseModel, ConfigDict

from checkout_backend.catalog import Catalog, CatalogEntry
from checkout_backend.errors import UnknownSkuError, ValidationError
from .models import CheckoutSessionRequest, NormalizedLine, ShippingOption

SESSION_ID_PLACEHOLDER = "{CHECKOUT_SESSION_ID}"
DEFAULT_DESCRIPTION = "Apparel"


class RedirectConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    site_url: str
    success_path: str = "/success.html"
    cancel_path: str = "/cancel.html"

    @property
    def success_url(self) -> str:
        # Stripe substitue {CHECKOUT_SESSION_ID} au moment de la redirection
        base = self.site_url.rstrip("/")
        sep = "&" if "?" in self.success_path else "?"
        return f"{base}{self.success_path}{sep}session_id={SESSION_ID_PLACEHOLDER}"

    @property
    def cancel_url(self) -> str:
        return f"{self.site_url.rstrip('/')}{self.cancel_path}"


def _line_item(line: NormalizedLine, entry: CatalogEntry) -> Dict[str, Any]:
    product_metadata = {"sku": line.base_sku}
    if line.variant:
        product_metadata["variant"] = line.variant
    return {
        "price_data": {
            "currency": entry.currency,
            "unit_amount": entry.price,
            "product_data": {
                "name": entry.display_name,
                "description": f"Size: {line.variant}" if line.variant else (entry.description or DEFAULT_DESCRIPTION),
                "images": [entry.image_url] if entry.image_url else [],
                "metadata": product_metadata,
            },
        },
        "quantity": line.quantity,
    }


def build_session_request(
    lines: Sequence[NormalizedLine],
    catalog: Catalog,
    shipping_options: Sequence[ShippingOption],
    redirect: RedirectConfig,
    *,
    source: str = "jhinton-site",
    shipping_countries: Sequence[str] = ("US",),
    default_currency: str = "usd",
) -> CheckoutSessionRequest:
    """
    Assemble line_items, options de livraison, URLs et metadata.
    - Prix unitaire et devise viennent uniquement du catalogue (jamais du client).
    - metadata: {"source": ..., "size_<sku>": VARIANTE} pour chaque ligne avec variante.
    - Soulève ValidationError si le panier mélange plusieurs devises.
    - Options de livraison dans la devise du panier, sinon default_currency.
    """
    line_items: List[Dict[str, Any]] = []
    metadata: Dict[str, str] = {"source": source}
    currencies = set()
    for line in lines:
        entry = catalog.resolve(line.base_sku)
        if entry is None:
            raise UnknownSkuError(line.base_sku)
        currencies.add(entry.currency)
        if line.variant:
            metadata[f"size_{line.base_sku}"] = line.variant
        line_items.append(_line_item(line, entry))

    if len(currencies) > 1:
        raise ValidationError("Cart mixes several currencies")
    currency = currencies.pop() if currencies else default_currency.lower()

    return CheckoutSessionRequest(
        line_items=line_items,
        shipping_options=[opt.to_stripe(currency) for opt in shipping_options],
        success_url=redirect.success_url,
        cancel_url=redirect.cancel_url,
        metadata=metadata,
        shipping_countries=tuple(shipping_countries),
    )
