"""
Dépendances FastAPI vers les composants construits une fois par create_app()
et rangés dans app.state (configuration, catalogue, passerelle, registre).
"""
from typing import Optional
from fastapi import Request

from storefront.catalog.store import ProductStore
from storefront.config import Settings
from storefront.payments.gateway import PaymentGateway
from storefront.payments.settlement import SettlementLedger

def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings

def get_store(request: Request) -> ProductStore:
    return request.app.state.product_store

def get_gateway(request: Request) -> PaymentGateway:
    return request.app.state.payment_gateway

def get_ledger(request: Request) -> Optional[SettlementLedger]:
    return getattr(request.app.state, "settlement_ledger", None)
