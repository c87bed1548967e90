"""
Cas d'usage 'payments': orchestre panier, métadonnées et passerelle Stripe.

start_checkout ne décrémente pas le stock et ne persiste aucune réservation:
les métadonnées embarquées dans la session sont l'unique trace de la réservation
jusqu'au règlement. Deux appels avec le même panier donnent deux sessions
indépendantes.
"""
import logging
from typing import Any, List, Optional

from storefront.catalog.store import ProductStore
from storefront.config import Settings

from . import cart as cart_logic
from .gateway import CheckoutSession, PaymentGateway
from .metadata import encode_metadata

logger = logging.getLogger(__name__)


def _join_url(base_url: str, path: str) -> str:
    if path.startswith("http://") or path.startswith("https://"):
        return path
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def start_checkout(
    lines: List[cart_logic.CartLine],
    gateway: PaymentGateway,
    base_url: str,
    *,
    user_id: Optional[str] = None,
    success_path: str = "/success.html?session_id={CHECKOUT_SESSION_ID}",
    cancel_path: str = "/cancel.html",
) -> CheckoutSession:
    """
    Prépare et crée la session Stripe à partir d'un panier validé.
    - Vérifie la configuration de la passerelle avant tout appel (GatewayMisconfigured).
    - Construit line_items + métadonnées de réservation, puis les URLs succès/annulation depuis base_url.
    - Les erreurs d'appel remontent en GatewayError (traduites par l'adaptateur).
    """
    gateway.ensure_configured()
    line_items = cart_logic.to_line_items(lines)
    metadata = encode_metadata(lines, user_id=user_id)
    session = gateway.create_session(
        line_items=line_items,
        metadata=metadata,
        success_url=_join_url(base_url, success_path),
        cancel_url=_join_url(base_url, cancel_path),
    )
    logger.info("payments.checkout session=%s lines=%s user_id=%s", session.id, len(lines), user_id)
    return session


def process_checkout(
    items: Any,
    *,
    store: ProductStore,
    gateway: PaymentGateway,
    settings: Settings,
    base_url: Optional[str] = None,
    user_id: Optional[str] = None,
) -> CheckoutSession:
    """
    Chaîne complète utilisée par la vue: validation du panier puis création de session.
    base_url: origine de la requête si fournie, sinon BASE_URL de la configuration.
    """
    lines = cart_logic.validate_cart(items, store.find_by_id, strict=settings.strict_unknown_products)
    return start_checkout(
        lines,
        gateway,
        base_url or settings.base_url,
        user_id=user_id,
        success_path=settings.checkout_success_path,
        cancel_path=settings.checkout_cancel_path,
    )
