import hashlib
import hmac
import json
import os
import time
from typing import Any, Dict, Generator, List, Optional

import pytest
from fastapi.testclient import TestClient

# Pas de Redis pendant les tests
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

from storefront.app_setup.factory import create_app
from storefront.catalog.models import Product
from storefront.catalog.store import InMemoryProductStore
from storefront.config import Settings
from storefront.errors import GatewayError, GatewayMisconfigured
from storefront.payments.gateway import CheckoutSession, StripeGateway
from storefront.utils.security import require_user

WEBHOOK_SECRET = "whsec_test_secret"

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)


class FakeGateway:
    """
    Passerelle de test: sessions en mémoire, vérification de signature déléguée
    au vrai StripeGateway (SDK stripe) pour garder le comportement réel.
    """

    def __init__(self, configured: bool = True, fail: Optional[Exception] = None, webhook_secret: str = WEBHOOK_SECRET):
        self.configured = configured
        self.fail = fail
        self.sessions: List[Dict[str, Any]] = []
        self._verifier = StripeGateway(Settings(stripe_secret_key="sk_test_dummy", stripe_webhook_secret=webhook_secret))

    def ensure_configured(self) -> None:
        if not self.configured:
            raise GatewayMisconfigured("Clé Stripe manquante")

    def create_session(self, *, line_items, metadata, success_url, cancel_url) -> CheckoutSession:
        if self.fail is not None:
            raise GatewayError(self.fail)
        session_id = f"cs_test_{len(self.sessions) + 1}"
        self.sessions.append({
            "id": session_id,
            "line_items": line_items,
            "metadata": dict(metadata),
            "success_url": success_url,
            "cancel_url": cancel_url,
        })
        return CheckoutSession(id=session_id, url=f"https://checkout.stripe.test/c/pay/{session_id}")

    def verify_notification(self, raw_payload, signature):
        return self._verifier.verify_notification(raw_payload, signature)


def sign_payload(payload: str, secret: str = WEBHOOK_SECRET, timestamp: Optional[int] = None) -> str:
    """En-tête Stripe-Signature: t=<ts>,v1=HMAC-SHA256(secret, "<ts>.<payload>")."""
    ts = int(timestamp if timestamp is not None else time.time())
    digest = hmac.new(secret.encode("utf-8"), f"{ts}.{payload}".encode("utf-8"), hashlib.sha256).hexdigest()
    return f"t={ts},v1={digest}"


def make_event(metadata: Dict[str, str], event_type: str = "checkout.session.completed", session_id: str = "cs_test_1") -> str:
    return json.dumps({
        "id": "evt_test_1",
        "object": "event",
        "type": event_type,
        "data": {"object": {"id": session_id, "object": "checkout.session", "metadata": metadata}},
    })


def make_products() -> List[Product]:
    return [
        Product(id="p1", name="Veste", description="Veste en jean", unit_price=4500, stock=3),
        Product(id="p2", name="Sneakers", description="Baskets", unit_price=8900, stock=1),
        Product(id="p3", name="Cahier", description="", unit_price=1800, stock=10),
    ]


@pytest.fixture
def settings() -> Settings:
    return Settings(stripe_secret_key="sk_test_dummy", stripe_webhook_secret=WEBHOOK_SECRET)

@pytest.fixture
def store() -> InMemoryProductStore:
    return InMemoryProductStore(make_products())

@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()

@pytest.fixture
def sign():
    return sign_payload

@pytest.fixture
def event_payload():
    return make_event

@pytest.fixture
def fake_gateway_factory():
    return FakeGateway

@pytest.fixture
def app(settings, store, gateway):
    return create_app(settings, store=store, gateway=gateway)

@pytest.fixture
def test_user() -> Dict[str, Any]:
    return {"id": "test-user", "email": "test@example.com", "role": "customer"}

# Simuler un utilisateur authentifié pour les endpoints protégés
@pytest.fixture
def client(app, test_user) -> Generator[TestClient, None, None]:
    app.dependency_overrides[require_user] = lambda: test_user
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

@pytest.fixture
def anonymous_client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c
