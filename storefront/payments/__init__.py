"""
Module 'payments' (feature-first): point d'entrée public.
Réunit validation du panier, métadonnées de réservation, passerelle Stripe,
checkout et règlement.
"""

from .cart import CartLine, aggregate_quantities, validate_cart, to_line_items
from .metadata import encode_metadata, decode_metadata, extract_user_id
from .gateway import CheckoutSession, PaymentEvent, PaymentGateway, StripeGateway, CHECKOUT_COMPLETED
from .service import start_checkout, process_checkout
from .settlement import SettlementLedger, handle_notification

__all__ = [
    # cart
    "CartLine",
    "aggregate_quantities",
    "validate_cart",
    "to_line_items",
    # metadata
    "encode_metadata",
    "decode_metadata",
    "extract_user_id",
    # stripe
    "CheckoutSession",
    "PaymentEvent",
    "PaymentGateway",
    "StripeGateway",
    "CHECKOUT_COMPLETED",
    # services
    "start_checkout",
    "process_checkout",
    "SettlementLedger",
    "handle_notification",
]
