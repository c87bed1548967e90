# module storefront.catalog.models
from typing import Optional
from pydantic import BaseModel, Field


class Product(BaseModel):
    """
    Produit du catalogue.
    - unit_price: prix unitaire en centimes (unités mineures)
    - currency: code ISO en minuscules, tel qu'attendu par Stripe
    - stock: jamais négatif; seul le règlement (webhook) le décrémente
    """
    id: str
    name: str
    description: str = ""
    unit_price: int = Field(ge=0)
    currency: str = "eur"
    image: Optional[str] = None
    stock: int = Field(ge=0)
