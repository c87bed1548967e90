"""
Product Store: capacité de lecture du catalogue et décrémentation atomique du stock.

Le cœur (panier, checkout, règlement) ne dépend que de ProductStore.
Deux implémentations:
- InMemoryProductStore: table en mémoire, une seule porte d'entrée de mutation
  protégée par un verrou.
- SupabaseProductStore: l'atomicité est poussée dans Postgres via la fonction
  SQL decrement_stock (voir sql/products.sql), appelée en RPC.
"""
import logging
import threading
from typing import Any, Dict, Iterable, List, Optional, Protocol

import storefront.infra.supabase_client as supabase_client
from storefront.config import Settings
from storefront.errors import CatalogUnavailable

from .models import Product

logger = logging.getLogger(__name__)


class ProductStore(Protocol):
    def find_by_id(self, product_id: str) -> Optional[Product]: ...

    def list_products(self) -> List[Product]: ...

    def decrement_stock(self, product_id: str, quantity: int) -> Optional[int]: ...


class InMemoryProductStore:
    def __init__(self, products: Optional[Iterable[Product]] = None):
        self._lock = threading.Lock()
        self._products: Dict[str, Product] = {}
        for p in products or []:
            self._products[p.id] = p.model_copy()

    def find_by_id(self, product_id: str) -> Optional[Product]:
        with self._lock:
            product = self._products.get(product_id)
            return product.model_copy() if product else None

    def list_products(self) -> List[Product]:
        with self._lock:
            return [p.model_copy() for p in self._products.values()]

    def decrement_stock(self, product_id: str, quantity: int) -> Optional[int]:
        """
        Décrément relatif, borné à zéro.
        - Retourne le nouveau stock, ou None si le produit est inconnu (no-op).
        - Un dépassement (survente) est journalisé puis ramené à 0.
        """
        with self._lock:
            product = self._products.get(product_id)
            if product is None:
                logger.warning("catalog.memory.decrement unknown product_id=%s qty=%s", product_id, quantity)
                return None
            remaining = product.stock - quantity
            if remaining < 0:
                logger.warning(
                    "catalog.memory.decrement oversold product_id=%s stock=%s qty=%s",
                    product_id, product.stock, quantity,
                )
                remaining = 0
            product.stock = remaining
            return remaining


def _row_to_product(row: Dict[str, Any]) -> Product:
    return Product(
        id=str(row.get("id")),
        name=row.get("name") or "Article",
        description=row.get("description") or "",
        unit_price=int(row.get("unit_price") or 0),
        currency=(row.get("currency") or "eur").lower(),
        image=row.get("image"),
        stock=max(int(row.get("stock") or 0), 0),
    )


class SupabaseProductStore:
    """Catalogue Postgres (table 'products') via le client service-role."""

    table = "products"

    def __init__(self, settings: Settings):
        self.settings = settings

    def _client(self):
        return supabase_client.get_service_supabase(self.settings)

    def find_by_id(self, product_id: str) -> Optional[Product]:
        try:
            res = (
                self._client()
                .table(self.table)
                .select("*")
                .eq("id", product_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.exception("catalog.supabase.find_by_id failed product_id=%s", product_id)
            raise CatalogUnavailable() from e
        rows = res.data or []
        return _row_to_product(rows[0]) if rows else None

    def list_products(self) -> List[Product]:
        try:
            res = self._client().table(self.table).select("*").order("id").execute()
        except Exception as e:
            logger.exception("catalog.supabase.list_products failed")
            raise CatalogUnavailable() from e
        return [_row_to_product(r) for r in (res.data or [])]

    def decrement_stock(self, product_id: str, quantity: int) -> Optional[int]:
        """
        stock = greatest(stock - qty, 0) WHERE id = product_id, côté Postgres.
        Retourne le nouveau stock, ou None si aucune ligne ne correspond.
        """
        try:
            res = (
                self._client()
                .rpc("decrement_stock", {"p_id": product_id, "p_qty": int(quantity)})
                .execute()
            )
        except Exception as e:
            logger.exception("catalog.supabase.decrement_stock failed product_id=%s qty=%s", product_id, quantity)
            raise CatalogUnavailable() from e
        data = res.data
        if isinstance(data, list):
            data = data[0] if data else None
        return int(data) if data is not None else None


def build_store(settings: Settings) -> ProductStore:
    """Choisit l'implémentation selon CATALOG_BACKEND."""
    if settings.catalog_backend == "supabase":
        return SupabaseProductStore(settings)
    from .seed import default_products
    return InMemoryProductStore(default_products())
