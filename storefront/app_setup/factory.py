"""
Factory d'application pour les entrypoints (storefront.asgi) et les tests.
Construit une fois la configuration et les collaborateurs (catalogue, passerelle,
registre de règlement), les range dans app.state, puis enregistre middlewares,
handlers et routers.
"""
from typing import Optional
from fastapi import FastAPI

from storefront.catalog.store import ProductStore, build_store
from storefront.config import Settings, get_settings
from storefront.payments.gateway import PaymentGateway, StripeGateway
from storefront.payments.settlement import SettlementLedger

from .exceptions import register_exception_handlers
from .lifespan import lifespan
from .middlewares import register_basic_middlewares, register_security_middleware
from .routers import register_routers

def create_app(
    settings: Optional[Settings] = None,
    *,
    store: Optional[ProductStore] = None,
    gateway: Optional[PaymentGateway] = None,
    ledger: Optional[SettlementLedger] = None,
) -> FastAPI:
    """
    Construit l'app FastAPI.
    - settings: Settings.from_env() par défaut
    - store / gateway / ledger: injectables (tests, autre backend); sinon dérivés des settings
    """
    settings = settings or get_settings()
    app = FastAPI(title="Storefront", lifespan=lifespan)

    app.state.settings = settings
    app.state.product_store = store if store is not None else build_store(settings)
    app.state.payment_gateway = gateway if gateway is not None else StripeGateway(settings)
    if ledger is None and settings.settlement_ledger:
        ledger = SettlementLedger()
    app.state.settlement_ledger = ledger

    register_basic_middlewares(app, settings)
    register_security_middleware(app, settings)
    register_exception_handlers(app)
    register_routers(app)
    return app
