"""
Modèle d'une entrée du catalogue produits (products.json).
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class CatalogEntry(BaseModel):
    """
    Produit vendable, indexé par SKU de base.
    - price: montant unitaire en centimes (entier >= 0); 0 = produit inactif
    - currency: code ISO minuscule (ex: "usd")
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    sku: str
    name: str = ""
    price: int = Field(default=0, ge=0)
    currency: str = "usd"
    description: Optional[str] = None
    image_url: Optional[str] = Field(default=None, alias="image")

    @field_validator("currency")
    def lower_currency(cls, v: str) -> str:
        return (v or "usd").strip().lower()

    @property
    def is_active(self) -> bool:
        return self.price > 0

    @property
    def display_name(self) -> str:
        return self.name or self.sku
