"""
Règlement: consomme les notifications Stripe vérifiées et décrémente le stock.

Règles:
- La signature est vérifiée sur le body brut AVANT toute mutation.
- Seul checkout.session.completed mute le stock; les autres types sont acquittés sans effet.
- Une décrémentation relative par ligne réservée, sans revalidation du stock courant
  (le store borne à zéro).
- Tout est acquitté sauf une signature invalide ou une configuration absente, pour que
  Stripe ne rejoue pas indéfiniment un payload déjà (ou jamais) traitable.

Livraison au-moins-une-fois: sans SettlementLedger, une redélivrance décrémente deux fois.
"""
import logging
import threading
from typing import Any, Dict, List, Optional, Set, Tuple, Union

from storefront.catalog.store import ProductStore
from storefront.errors import StorefrontError

from .gateway import CHECKOUT_COMPLETED, PaymentGateway
from .metadata import decode_metadata

logger = logging.getLogger(__name__)


class SettlementLedger:
    """
    Registre en mémoire des sessions déjà réglées (idempotence des redélivrances).
    Désactivé par défaut (SETTLEMENT_LEDGER=1 pour l'activer).
    Le claim précède les décréments; il est relâché si aucune ligne n'a pu être
    appliquée à cause du store: un renvoi manuel de l'événement sera alors appliqué.
    Un échec partiel garde le claim: rejouer redécrémenterait les lignes appliquées.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._settled: Set[str] = set()

    def claim(self, session_id: str) -> bool:
        """True si la session n'a jamais été réglée (et la marque comme réglée)."""
        with self._lock:
            if session_id in self._settled:
                return False
            self._settled.add(session_id)
            return True

    def release(self, session_id: str) -> None:
        """Annule un claim: la redélivrance suivante sera de nouveau appliquée."""
        with self._lock:
            self._settled.discard(session_id)

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._settled


def _ack(event_type: str, applied: Optional[List[Tuple[str, int]]] = None, duplicate: bool = False) -> Dict[str, Any]:
    return {
        "received": True,
        "event_type": event_type,
        "applied": applied or [],
        "duplicate": duplicate,
    }


def handle_notification(
    raw_payload: Union[bytes, str],
    signature: Optional[str],
    gateway: PaymentGateway,
    store: ProductStore,
    ledger: Optional[SettlementLedger] = None,
) -> Dict[str, Any]:
    """
    Vérifie, décode et applique une notification de paiement.
    Erreurs: InvalidSignature / GatewayMisconfigured (levées par la passerelle), rien d'autre.
    Retour: {"received": True, "event_type", "applied": [(product_id, qty)], "duplicate"}
    """
    event = gateway.verify_notification(raw_payload, signature)

    if event.type != CHECKOUT_COMPLETED:
        logger.info("payments.webhook ignored type=%s event=%s", event.type, event.id)
        return _ack(event.type)

    claimed = ledger is not None and bool(event.session_id)
    if claimed and not ledger.claim(event.session_id):
        logger.info("payments.webhook duplicate session=%s event=%s", event.session_id, event.id)
        return _ack(event.type, duplicate=True)

    reservations = decode_metadata(event.metadata)
    if not reservations:
        logger.warning("payments.webhook no reservation metadata session=%s", event.session_id)

    applied: List[Tuple[str, int]] = []
    failed = 0
    for product_id, qty in reservations:
        try:
            remaining = store.decrement_stock(product_id, qty)
        except StorefrontError:
            # Déjà journalisé par le store; on acquitte quand même
            failed += 1
            continue
        if remaining is None:
            continue
        applied.append((product_id, qty))
        logger.info("payments.webhook stock product_id=%s qty=-%s remaining=%s", product_id, qty, remaining)

    if claimed and failed and not applied:
        ledger.release(event.session_id)
        logger.warning("payments.webhook store failed session=%s released for redelivery", event.session_id)

    logger.info(
        "payments.webhook settled session=%s lines=%s applied=%s",
        event.session_id, len(reservations), len(applied),
    )
    return _ack(event.type, applied)
