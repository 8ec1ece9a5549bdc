"""
Vue typée, en lecture seule, d'une session Checkout complétée (fournie par Stripe).
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict

SIZE_PREFIX = "Size:"


def _obj(value: Any) -> Dict[str, Any]:
    # Les relations non développées arrivent sous forme d'id (str)
    return value if isinstance(value, dict) else {}


class ShippingAddress(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = ""
    line1: str = ""
    line2: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""


class PurchasedLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    description: str
    quantity: int = 1
    unit_amount: int = 0
    variant: str = ""


class CompletedSessionRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = ""
    created: Optional[int] = None
    currency: str = "usd"
    amount_total: Optional[int] = None
    amount_shipping: Optional[int] = None
    customer_email: str = ""
    customer_name: str = ""
    shipping: ShippingAddress = ShippingAddress()
    lines: List[PurchasedLine] = []

    @classmethod
    def from_stripe(cls, session: Dict[str, Any]) -> "CompletedSessionRecord":
        """
        Projette une session Stripe (line_items, customer développés) en record.
        - Email: customer_details.email puis customer.email
        - Adresse: shipping_details (ou collected_information.shipping_details)
        - Variante: metadata produit "variant", sinon description "Size: X"
        """
        session = session or {}
        details = _obj(session.get("customer_details"))
        customer = _obj(session.get("customer"))
        ship = _obj(session.get("shipping_details")) or _obj(_obj(session.get("collected_information")).get("shipping_details"))
        addr = _obj(ship.get("address"))

        lines: List[PurchasedLine] = []
        for li in _obj(session.get("line_items")).get("data") or []:
            price = _obj(li.get("price"))
            product = _obj(price.get("product"))
            variant = str(_obj(product.get("metadata")).get("variant") or "")
            product_desc = str(product.get("description") or "")
            if not variant and product_desc.startswith(SIZE_PREFIX):
                variant = product_desc[len(SIZE_PREFIX):].strip()
            lines.append(PurchasedLine(
                description=str(li.get("description") or product.get("name") or "Item"),
                quantity=int(li.get("quantity") or 1),
                unit_amount=int(price.get("unit_amount") or 0),
                variant=variant,
            ))

        return cls(
            id=str(session.get("id") or ""),
            created=session.get("created"),
            currency=str(session.get("currency") or "usd").lower(),
            amount_total=session.get("amount_total"),
            amount_shipping=_obj(session.get("total_details")).get("amount_shipping"),
            customer_email=str(details.get("email") or customer.get("email") or ""),
            customer_name=str(details.get("name") or customer.get("name") or ""),
            shipping=ShippingAddress(
                name=str(ship.get("name") or ""),
                line1=str(addr.get("line1") or ""),
                line2=str(addr.get("line2") or ""),
                city=str(addr.get("city") or ""),
                state=str(addr.get("state") or ""),
                postal_code=str(addr.get("postal_code") or ""),
                country=str(addr.get("country") or ""),
            ),
            lines=lines,
        )


class OrderEmail(BaseModel):
    model_config = ConfigDict(frozen=True)

    subject: str
    html: str
