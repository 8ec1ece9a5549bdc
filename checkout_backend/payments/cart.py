"""
Logique panier pure (pas de Stripe, pas d'I/O).
"""
from typing import Any, List, Tuple
import math

from checkout_backend.catalog import Catalog
from checkout_backend.errors import EmptyCartError, UnknownSkuError
from .models import MAX_QUANTITY, MIN_QUANTITY, NormalizedLine

VARIANT_DELIMITER = "--"


def _clamp(value: int) -> int:
    return max(MIN_QUANTITY, min(MAX_QUANTITY, value))


# module checkout_backend.payments.cart
def split_sku(raw_sku: Any) -> Tuple[str, str]:
    """
    Sépare "BASE--VARIANTE" en (base, VARIANTE).
    - Découpe sur le premier délimiteur; le reste (même s'il contient "--") forme la variante.
    - Variante en majuscules pour l'affichage, "" si absente.
    """
    text = str(raw_sku or "").strip()
    base, sep, rest = text.partition(VARIANT_DELIMITER)
    variant = rest.strip().upper() if sep else ""
    return base.strip(), variant


def coerce_quantity(raw: Any) -> int:
    """
    Quantité entière bornée à [1, 99].
    - Absente, non numérique, NaN/inf ou booléenne => 1
    - Décimale tronquée ("2.7" => 2), puis bornage
    """
    if raw is None or isinstance(raw, bool):
        return MIN_QUANTITY
    if isinstance(raw, int):
        # Entier JSON arbitrairement grand: bornage direct, sans conversion en float
        return _clamp(raw)
    if isinstance(raw, str):
        try:
            return _clamp(int(raw.strip()))
        except ValueError:
            pass
    try:
        value = float(raw)
    except (TypeError, ValueError, OverflowError):
        return MIN_QUANTITY
    if not math.isfinite(value):
        return MIN_QUANTITY
    return _clamp(int(value))


def normalize_cart(items: Any, catalog: Catalog) -> List[NormalizedLine]:
    """
    Normalise un panier client [{sku, qty}, ...] en lignes canoniques.
    - Soulève EmptyCartError si items n'est pas une liste ou est vide.
    - Soulève UnknownSkuError au premier SKU inconnu/inactif: tout le panier est rejeté.
    - Tout champ de prix envoyé par le client est ignoré.
    """
    if not isinstance(items, list) or not items:
        raise EmptyCartError()

    lines: List[NormalizedLine] = []
    for it in items:
        it = it if isinstance(it, dict) else {}
        base_sku, variant = split_sku(it.get("sku"))
        if catalog.resolve(base_sku) is None:
            raise UnknownSkuError(base_sku)
        lines.append(NormalizedLine(base_sku=base_sku, variant=variant, quantity=coerce_quantity(it.get("qty"))))
    return lines
