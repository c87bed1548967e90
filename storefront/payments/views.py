import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from storefront.catalog.store import ProductStore
from storefront.config import Settings
from storefront.errors import InvalidCart, StorefrontError
from storefront.utils.deps import get_app_settings, get_gateway, get_ledger, get_store
from storefront.utils.rate_limit import optional_rate_limit
from storefront.utils.security import require_user

from .gateway import PaymentGateway
from .service import process_checkout
from .settlement import SettlementLedger, handle_notification

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/payments", tags=["Payments API"])

# module storefront.payments.views
@router.post("/checkout", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def create_checkout_session(
    request: Request,
    user: Dict[str, Any] = Depends(require_user),
    store: ProductStore = Depends(get_store),
    gateway: PaymentGateway = Depends(get_gateway),
    settings: Settings = Depends(get_app_settings),
):
    """
    Crée une session Checkout Stripe pour le panier de l'utilisateur connecté.
    - Entrée JSON: { "items": [ { "id": "<product_id>", "quantity": <int> }, ... ] }
    - Sécurité: require_user + rate limit (10 req / 60s)
    - Étapes: valider le panier contre le stock, encoder la réservation en metadata,
      créer la session Stripe, renvoyer {id, url}
    - Erreurs: 400 panier refusé (raison lisible), 500 configuration/Stripe, 503 catalogue
    - Aucun stock n'est touché ici
    """
    try:
        body = await request.json()
    except ValueError:
        raise InvalidCart("Corps JSON invalide")
    items = body.get("items") if isinstance(body, dict) else None

    base_url = str(request.base_url).rstrip("/")
    try:
        session = await run_in_threadpool(
            process_checkout,
            items,
            store=store,
            gateway=gateway,
            settings=settings,
            base_url=base_url,
            user_id=user.get("id"),
        )
    except StorefrontError:
        raise
    except Exception:
        logger.exception("Erreur create_checkout_session")
        raise HTTPException(status_code=500, detail="Erreur lors du paiement")
    return JSONResponse({"id": session.id, "url": session.url})

@router.post("/webhook", include_in_schema=False)
async def payment_webhook(
    request: Request,
    store: ProductStore = Depends(get_store),
    gateway: PaymentGateway = Depends(get_gateway),
    ledger: Optional[SettlementLedger] = Depends(get_ledger),
):
    """
    Webhook Stripe: consomme checkout.session.completed pour décrémenter le stock.
    - Signature: vérifiée sur le body brut (Stripe-Signature + STRIPE_WEBHOOK_SECRET)
    - Réponse: {"received": true} pour tout événement acquitté
    - Erreurs: 400 uniquement si la signature est invalide, 500 si le secret manque
    """
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature")
    ack = await run_in_threadpool(handle_notification, payload, sig_header, gateway, store, ledger)
    return JSONResponse({"received": True, "duplicate": ack["duplicate"]})
