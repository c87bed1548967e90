# storefront.config
from functools import lru_cache
from pathlib import Path
from typing import List
import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH)

"""
Configuration centrale de la boutique.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Construit un objet Settings unique au démarrage (create_app) puis l'injecte
  dans les composants: plus aucune lecture d'os.environ au milieu d'un handler.
- Les secrets Stripe absents ne font pas planter le démarrage: ils sont signalés
  explicitement (GatewayMisconfigured) au moment d'un checkout ou d'un webhook.
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _flag(name: str, default: str = "false") -> bool:
    return _clean_env(os.getenv(name, default)).lower() in ("1", "true", "yes")

def _csv(name: str, default: str) -> List[str]:
    return [x.strip() for x in os.getenv(name, default).split(",") if x.strip()]


class Settings(BaseModel):
    # Stripe: clé secrète API et secret de signature des webhooks
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""

    # URLs de redirection du checkout (base_url + chemin)
    base_url: str = "http://localhost:8000"
    checkout_success_path: str = "/success.html?session_id={CHECKOUT_SESSION_ID}"
    checkout_cancel_path: str = "/cancel.html"

    # Catalogue: "memory" (démo, liste en dur) ou "supabase" (Postgres)
    catalog_backend: str = "memory"
    supabase_url: str = ""
    supabase_service_key: str = ""

    # Politiques métier
    strict_unknown_products: bool = False
    settlement_ledger: bool = False

    # Sécurité / HTTP
    session_secret_key: str = "dev-session-secret"
    cookie_secure: bool = False
    rate_limit_redis_url: str = "redis://127.0.0.1:6379/0"
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    allowed_hosts: List[str] = Field(default_factory=lambda: ["localhost", "127.0.0.1", "testserver"])

    @property
    def stripe_configured(self) -> bool:
        return bool(self.stripe_secret_key)

    @property
    def webhook_configured(self) -> bool:
        return bool(self.stripe_webhook_secret)

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Lit l'environnement une seule fois.
        - SUPABASE_URL peut être sans schéma: on préfixe en https:// si nécessaire
        - BASE_URL est normalisé sans slash final
        """
        supabase_url = _clean_env(os.getenv("SUPABASE_URL") or "")
        if supabase_url and not supabase_url.startswith("http"):
            supabase_url = "https://" + supabase_url
        return cls(
            stripe_secret_key=_clean_env(os.getenv("STRIPE_SECRET_KEY") or ""),
            stripe_webhook_secret=_clean_env(os.getenv("STRIPE_WEBHOOK_SECRET") or ""),
            base_url=_clean_env(os.getenv("BASE_URL") or "http://localhost:8000").rstrip("/"),
            checkout_success_path=os.getenv("CHECKOUT_SUCCESS_PATH", "/success.html?session_id={CHECKOUT_SESSION_ID}"),
            checkout_cancel_path=os.getenv("CHECKOUT_CANCEL_PATH", "/cancel.html"),
            catalog_backend=_clean_env(os.getenv("CATALOG_BACKEND") or "memory").lower(),
            supabase_url=supabase_url.rstrip("/"),
            supabase_service_key=_clean_env(os.getenv("SUPABASE_SERVICE_KEY") or ""),
            strict_unknown_products=_flag("STRICT_UNKNOWN_PRODUCTS"),
            settlement_ledger=_flag("SETTLEMENT_LEDGER"),
            session_secret_key=_clean_env(os.getenv("SESSION_SECRET") or "dev-session-secret"),
            cookie_secure=_flag("COOKIE_SECURE"),
            rate_limit_redis_url=_clean_env(os.getenv("RATE_LIMIT_REDIS_URL") or "redis://127.0.0.1:6379/0"),
            cors_origins=_csv("CORS_ORIGINS", "*"),
            allowed_hosts=_csv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver"),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Settings du processus, construits au premier appel."""
    return Settings.from_env()
