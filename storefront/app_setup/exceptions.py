"""
Gestionnaires d'exceptions.
- StorefrontError (panier, configuration, Stripe, catalogue, signature) -> JSON {"error", "code", ...}
  avec le code HTTP porté par l'erreur.
- HTTPException -> JSON {"error", "detail"} pour rester lisible par le même client.
"""
import logging
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from storefront.errors import StorefrontError

logger = logging.getLogger(__name__)

def register_exception_handlers(app: FastAPI) -> None:
    """
    Enregistre les handlers.
    - 4xx: journalisés en warning (décision métier attendue).
    - 5xx: journalisés en error (déploiement ou passerelle à vérifier).
    """
    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError):
        if exc.status_code >= 500:
            logger.error("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.code)
        else:
            logger.warning("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.code)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail, "detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )
