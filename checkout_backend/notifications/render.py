"""
Rendu déterministe de l'email de confirmation de commande.
- Montants: centimes entiers -> "xx.yy" (deux décimales), sans passer par float.
- Texte libre (noms, adresses, lignes): échappé par l'autoescape Jinja2.
"""
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .models import CompletedSessionRecord, OrderEmail, PurchasedLine

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
MISSING_AMOUNT = "—"
CURRENCY_SYMBOLS = {"usd": "$", "cad": "CA$", "eur": "€", "gbp": "£"}

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
)


def format_amount(minor_units: Optional[int], currency: str = "usd") -> str:
    """1295 -> "$12.95"; None -> "—"."""
    if minor_units is None:
        return MISSING_AMOUNT
    sign = "-" if minor_units < 0 else ""
    units, cents = divmod(abs(int(minor_units)), 100)
    code = (currency or "usd").lower()
    symbol = CURRENCY_SYMBOLS.get(code)
    if symbol:
        return f"{sign}{symbol}{units}.{cents:02d}"
    return f"{sign}{units}.{cents:02d} {code.upper()}"


def format_line(line: PurchasedLine, currency: str = "usd") -> str:
    variant = f" ({line.variant})" if line.variant else ""
    return f"{line.quantity} × {line.description}{variant} — {format_amount(line.unit_amount, currency)}"


def _year(record: CompletedSessionRecord) -> int:
    # Année de création de la session: même rendu à chaque relivraison du webhook
    if record.created:
        return datetime.fromtimestamp(record.created, tz=timezone.utc).year
    return datetime.now(timezone.utc).year


def render_order_email(
    record: CompletedSessionRecord,
    *,
    brand: str = "J.HINTON",
    support_email: str = "",
    internal: bool = False,
) -> OrderEmail:
    """
    Construit {subject, html} pour le client, ou la copie interne si internal=True
    (sujet préfixé "[INTERNAL] ", titre "Order Confirmed (Internal Copy)").
    """
    amount_total = format_amount(record.amount_total, record.currency)
    subject = f"{brand} Order Confirmed — {amount_total}"
    heading = "Order Confirmed"
    if internal:
        subject = "[INTERNAL] " + subject
        heading = "Order Confirmed (Internal Copy)"

    html = _env.get_template("order_confirmation.html").render(
        heading=heading,
        lines=[format_line(li, record.currency) for li in record.lines],
        amount_shipping=format_amount(record.amount_shipping, record.currency),
        amount_total=amount_total,
        customer_name=record.customer_name,
        address=record.shipping,
        support_email=support_email,
        brand=brand,
        year=_year(record),
    )
    return OrderEmail(subject=subject, html=html)
