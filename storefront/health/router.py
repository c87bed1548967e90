from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from storefront.catalog.store import ProductStore
from storefront.config import Settings
from storefront.errors import StorefrontError
from storefront.utils.deps import get_app_settings, get_store
from storefront.utils.rate_limit import rate_limit_health_info

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
def health_root():
    return {"ok": True}

@router.get("/catalog")
def health_catalog(store: ProductStore = Depends(get_store), settings: Settings = Depends(get_app_settings)):
    info = {
        "backend": settings.catalog_backend,
        "connect_ok": False,
        "products": None,
        "stripe_configured": settings.stripe_configured,
        "webhook_configured": settings.webhook_configured,
        "error": None,
    }
    try:
        info["products"] = len(store.list_products())
        info["connect_ok"] = True
    except StorefrontError as e:
        info["error"] = e.message
    return JSONResponse(info)

@router.get("/rate-limit")
def health_rate_limit(request: Request):
    return rate_limit_health_info(request)
