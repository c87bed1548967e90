"""
Logique panier pure (pas de Stripe, pas de DB): validation contre le stock courant.

La validation est une lecture ponctuelle: elle ne réserve ni ne décrémente rien.
Deux paniers concurrents peuvent donc valider la dernière unité d'un produit;
seul le règlement (webhook) touche au stock.
"""
from typing import Any, Callable, Dict, List, NamedTuple, Optional

from storefront.catalog.models import Product
from storefront.errors import EmptyCart, InsufficientStock, InvalidCart, UnknownProduct

Lookup = Callable[[str], Optional[Product]]


class CartLine(NamedTuple):
    product: Product
    quantity: int


# module storefront.payments.cart
def _parse_quantity(raw: Any) -> int:
    # bool est un int en Python: on le refuse explicitement
    if isinstance(raw, bool):
        raise InvalidCart("Quantité invalide")
    if isinstance(raw, int):
        qty = raw
    # isdigit() accepte aussi les chiffres Unicode ("²") que int() refuse
    elif isinstance(raw, str) and raw.strip().isascii() and raw.strip().isdigit():
        qty = int(raw.strip())
    else:
        raise InvalidCart("Quantité invalide")
    if qty <= 0:
        raise InvalidCart("Quantité invalide")
    return qty


def aggregate_quantities(items: Any) -> Dict[str, int]:
    """
    Agrège un panier brut [{id, quantity}, ...] en {product_id: total_quantity}.
    - Les ids répétés sont fusionnés (quantités additionnées), ordre de première apparition conservé.
    - Soulève EmptyCart si le panier est vide, InvalidCart si une ligne est mal formée
      (id vide, quantité non entière ou <= 0).
    """
    if items is None or (isinstance(items, list) and not items):
        raise EmptyCart()
    if not isinstance(items, list):
        raise InvalidCart()
    quantities: Dict[str, int] = {}
    for it in items:
        if not isinstance(it, dict):
            raise InvalidCart()
        product_id = str(it.get("id") or "").strip()
        if not product_id:
            raise InvalidCart("Identifiant produit manquant")
        qty = _parse_quantity(it.get("quantity"))
        quantities[product_id] = quantities.get(product_id, 0) + qty
    return quantities


def validate_cart(items: Any, lookup: Lookup, strict: bool = False) -> List[CartLine]:
    """
    Valide un panier contre le stock courant et retourne les lignes acceptées (ordre du panier).
    - Produit inconnu: ligne ignorée silencieusement, ou UnknownProduct si strict=True.
    - Quantité > stock: InsufficientStock sur la première ligne fautive (une seule erreur, déterministe).
    - Si plus aucune ligne ne subsiste: EmptyCart.
    """
    quantities = aggregate_quantities(items)
    lines: List[CartLine] = []
    for product_id, qty in quantities.items():
        product = lookup(product_id)
        if product is None:
            if strict:
                raise UnknownProduct(product_id)
            continue
        if qty > product.stock:
            raise InsufficientStock(product.id, product.stock, product_name=product.name)
        lines.append(CartLine(product=product, quantity=qty))
    if not lines:
        raise EmptyCart("Aucun article valide")
    return lines


def to_line_items(lines: List[CartLine]) -> List[Dict[str, Any]]:
    """
    Construit les line_items Stripe (price_data) à partir du panier validé.
    unit_amount est déjà en centimes dans le catalogue.
    """
    line_items: List[Dict[str, Any]] = []
    for line in lines:
        product = line.product
        product_data: Dict[str, Any] = {"name": product.name or "Article"}
        if product.description:
            product_data["description"] = product.description
        line_items.append({
            "quantity": line.quantity,
            "price_data": {
                "currency": product.currency,
                "unit_amount": product.unit_price,
                "product_data": product_data,
            },
        })
    return line_items
