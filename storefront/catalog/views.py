from typing import Any, Dict, List

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from storefront.utils.deps import get_store
from storefront.utils.security import require_user

from .store import ProductStore

router = APIRouter(prefix="/api/v1/products", tags=["Catalog API"])

# module storefront.catalog.views
@router.get("")
async def list_products(
    user: Dict[str, Any] = Depends(require_user),
    store: ProductStore = Depends(get_store),
) -> List[Dict[str, Any]]:
    """
    Liste le catalogue (prix en centimes, stock courant) pour hydrater le panier.
    Authentification requise.
    """
    products = await run_in_threadpool(store.list_products)
    return [p.model_dump() for p in products]
