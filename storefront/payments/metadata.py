"""
Sérialisation/désérialisation des métadonnées de réservation Stripe.

Format (une paire de clés par produit réservé):
    prod_<product_id> -> "<product_id>"
    qty_<product_id>  -> "<quantité décimale>"
La clé de quantité se déduit du seul identifiant produit. Ce dictionnaire est
le seul canal qui transporte le contenu du panier entre la création de la
session et le webhook: il doit faire l'aller-retour exactement.

Limites Stripe: 50 clés, 40 caractères par clé, 500 caractères par valeur.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from storefront.errors import MetadataLimitExceeded

from .cart import CartLine

logger = logging.getLogger(__name__)

PRODUCT_KEY_PREFIX = "prod_"
QUANTITY_KEY_PREFIX = "qty_"
USER_KEY = "user_id"

MAX_KEYS = 50
MAX_KEY_LENGTH = 40
MAX_VALUE_LENGTH = 500
MAX_PRODUCT_ID_LENGTH = MAX_KEY_LENGTH - len(PRODUCT_KEY_PREFIX)
# Caractères refusés par Stripe dans les clés de métadonnées
FORBIDDEN_KEY_CHARS = frozenset("[]")

Reservation = Tuple[str, int]


def product_key(product_id: str) -> str:
    return f"{PRODUCT_KEY_PREFIX}{product_id}"


def quantity_key(product_id: str) -> str:
    return f"{QUANTITY_KEY_PREFIX}{product_id}"


def max_lines(user_id: Optional[str] = None) -> int:
    """Nombre maximal de produits distincts encodables dans une session."""
    reserved = 1 if user_id else 0
    return (MAX_KEYS - reserved) // 2


# module storefront.payments.metadata
def encode_metadata(lines: Sequence[CartLine], user_id: Optional[str] = None) -> Dict[str, str]:
    """
    Encode le panier validé en métadonnées de session.
    - user_id (optionnel) identifie l'acheteur; le décodeur l'ignore.
    - Soulève MetadataLimitExceeded si le panier ne tient pas dans les limites Stripe
      (trop de lignes, identifiant trop long ou contenant "[" ou "]").
    """
    if len(lines) > max_lines(user_id):
        raise MetadataLimitExceeded(
            f"Trop d'articles distincts pour un paiement ({len(lines)} > {max_lines(user_id)})"
        )
    metadata: Dict[str, str] = {}
    if user_id:
        metadata[USER_KEY] = str(user_id)[:MAX_VALUE_LENGTH]
    for line in lines:
        product_id = line.product.id
        if len(product_id) > MAX_PRODUCT_ID_LENGTH:
            raise MetadataLimitExceeded(f"Identifiant produit trop long: {product_id}")
        if FORBIDDEN_KEY_CHARS.intersection(product_id):
            raise MetadataLimitExceeded(f"Identifiant produit non encodable: {product_id}")
        metadata[product_key(product_id)] = product_id
        metadata[quantity_key(product_id)] = str(int(line.quantity))
    return metadata


def decode_metadata(metadata: Optional[Mapping[str, Any]]) -> List[Reservation]:
    """
    Retrouve les paires (product_id, quantité) depuis les métadonnées d'une session.
    - Ignore toute clé qui n'est pas une clé produit (user_id, ajouts Stripe...).
    - Une paire incohérente (clé/valeur divergentes, quantité absente, non numérique
      ou <= 0) est ignorée et journalisée: le webhook doit tout de même être acquitté.
    """
    reservations: List[Reservation] = []
    for key, value in (metadata or {}).items():
        if not str(key).startswith(PRODUCT_KEY_PREFIX):
            continue
        product_id = str(value or "")
        if not product_id or key != product_key(product_id):
            logger.warning("payments.metadata.decode mismatched key=%s value=%s", key, value)
            continue
        raw_qty = str((metadata or {}).get(quantity_key(product_id)) or "").strip()
        if not (raw_qty.isascii() and raw_qty.isdigit()) or int(raw_qty) <= 0:
            logger.warning("payments.metadata.decode invalid quantity product_id=%s qty=%r", product_id, raw_qty)
            continue
        reservations.append((product_id, int(raw_qty)))
    return reservations


def extract_user_id(metadata: Optional[Mapping[str, Any]]) -> Optional[str]:
    return (metadata or {}).get(USER_KEY) or None
