from typing import Dict, Optional, Tuple
from supabase import create_client, Client

from storefront.config import Settings

_clients: Dict[Tuple[str, str], Client] = {}

def get_service_supabase(settings: Settings) -> Client:
    """
    Client Supabase service-role (bypass RLS), mis en cache par (url, clé).
    Utilisé par le catalogue pour les lectures et la décrémentation du stock.
    """
    if not settings.supabase_url or not settings.supabase_service_key:
        raise RuntimeError("SUPABASE_URL / SUPABASE_SERVICE_KEY manquants pour get_service_supabase()")
    key = (settings.supabase_url, settings.supabase_service_key)
    client: Optional[Client] = _clients.get(key)
    if client is None:
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        _clients[key] = client
    return client
