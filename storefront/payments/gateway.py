"""
Adaptateur Stripe: centralise les appels et la configuration Stripe.

Capacités exposées au cœur:
- create_session(line_items, metadata, success_url, cancel_url) -> CheckoutSession
- verify_notification(raw_payload, signature) -> PaymentEvent
Les exceptions du SDK sont traduites (GatewayError, InvalidSignature); l'absence
de clés est détectée avant tout appel (GatewayMisconfigured).
"""
import json
import logging
from typing import Any, Dict, List, NamedTuple, Optional, Protocol, Union

import stripe

from storefront.config import Settings
from storefront.errors import GatewayError, GatewayMisconfigured, InvalidSignature

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"


class CheckoutSession(NamedTuple):
    id: str
    url: str


class PaymentEvent(NamedTuple):
    id: str
    type: str
    session_id: str
    metadata: Dict[str, str]


class PaymentGateway(Protocol):
    def ensure_configured(self) -> None: ...

    def create_session(
        self,
        *,
        line_items: List[Dict[str, Any]],
        metadata: Dict[str, str],
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSession: ...

    def verify_notification(self, raw_payload: Union[bytes, str], signature: Optional[str]) -> PaymentEvent: ...


def event_from_payload(data: Dict[str, Any]) -> PaymentEvent:
    """
    Décode un événement Stripe (dict JSON) en PaymentEvent.
    Attend data.object.{id, metadata} pour les événements de session.
    """
    obj = ((data or {}).get("data") or {}).get("object") or {}
    metadata = obj.get("metadata") or {}
    return PaymentEvent(
        id=str(data.get("id") or ""),
        type=str(data.get("type") or ""),
        session_id=str(obj.get("id") or ""),
        metadata={str(k): str(v) for k, v in metadata.items() if v is not None},
    )


class StripeGateway:
    def __init__(self, settings: Settings, tolerance: int = stripe.Webhook.DEFAULT_TOLERANCE):
        self.settings = settings
        self.tolerance = tolerance

    def ensure_configured(self) -> None:
        if not self.settings.stripe_secret_key:
            raise GatewayMisconfigured("Clé Stripe manquante")

    def create_session(
        self,
        *,
        line_items: List[Dict[str, Any]],
        metadata: Dict[str, str],
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSession:
        """
        Crée une session Stripe Checkout (mode "payment", carte).
        Retour: CheckoutSession(id, url) avec l'URL de redirection telle que renvoyée par Stripe.
        """
        self.ensure_configured()
        try:
            session = stripe.checkout.Session.create(
                api_key=self.settings.stripe_secret_key,
                mode="payment",
                payment_method_types=["card"],
                line_items=line_items,
                metadata=metadata,
                success_url=success_url,
                cancel_url=cancel_url,
            )
        except stripe.StripeError as e:
            logger.exception("payments.gateway.create_session rejected by Stripe")
            raise GatewayError(e) from e
        except Exception as e:
            logger.exception("payments.gateway.create_session failed")
            raise GatewayError(e) from e
        url = getattr(session, "url", None)
        if not url:
            raise GatewayError(message="Session Stripe invalide")
        return CheckoutSession(id=str(getattr(session, "id", "") or ""), url=url)

    def verify_notification(self, raw_payload: Union[bytes, str], signature: Optional[str]) -> PaymentEvent:
        """
        Valide la signature Stripe sur le body BRUT puis décode l'événement.
        - Lire le JSON avant de vérifier invaliderait la signature: on vérifie d'abord.
        - InvalidSignature si l'en-tête manque, ne correspond pas, ou si le payload n'est pas du JSON.
        """
        secret = self.settings.stripe_webhook_secret
        if not secret:
            raise GatewayMisconfigured("Secret webhook Stripe manquant")
        if not signature:
            raise InvalidSignature("En-tête Stripe-Signature manquant")
        try:
            payload = raw_payload.decode("utf-8") if isinstance(raw_payload, (bytes, bytearray)) else str(raw_payload)
            stripe.WebhookSignature.verify_header(payload, signature, secret, self.tolerance)
            data = json.loads(payload)
        except stripe.SignatureVerificationError as e:
            raise InvalidSignature() from e
        except ValueError as e:
            # UnicodeDecodeError et JSONDecodeError héritent de ValueError
            raise InvalidSignature("Payload webhook invalide") from e
        if not isinstance(data, dict):
            raise InvalidSignature("Payload webhook invalide")
        return event_from_payload(data)
