"""
Taxonomie d'erreurs de la boutique (panier, checkout, règlement, catalogue).

Chaque erreur porte son code HTTP et un message lisible, rendus en JSON
{"error": ..., "code": ...} par storefront.app_setup.exceptions.
Aucune exception brute du SDK Stripe ou du client Supabase ne doit sortir
de l'adaptateur qui l'a reçue: elle est traduite ici.
"""
from typing import Any, Dict, Optional


class StorefrontError(Exception):
    status_code: int = 500
    code: str = "storefront_error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "code": self.code}


# --- Erreurs de validation (400, jamais rejouées automatiquement) ---

class CartValidationError(StorefrontError):
    status_code = 400
    code = "invalid_cart"


class EmptyCart(CartValidationError):
    code = "empty_cart"

    def __init__(self, message: str = "Panier vide"):
        super().__init__(message)


class InvalidCart(CartValidationError):
    code = "invalid_cart"

    def __init__(self, message: str = "Panier invalide"):
        super().__init__(message)


class UnknownProduct(CartValidationError):
    code = "unknown_product"

    def __init__(self, product_id: str):
        super().__init__(f"Produit inconnu: {product_id}")
        self.product_id = product_id

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "product_id": self.product_id}


class InsufficientStock(CartValidationError):
    code = "insufficient_stock"

    def __init__(self, product_id: str, available_stock: int, product_name: Optional[str] = None):
        label = product_name or product_id
        super().__init__(f"Stock insuffisant pour {label} (Restant: {available_stock})")
        self.product_id = product_id
        self.available_stock = available_stock

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "product_id": self.product_id, "available_stock": self.available_stock}


class MetadataLimitExceeded(CartValidationError):
    code = "metadata_limit_exceeded"


# --- Configuration (500, indique un déploiement sans secrets) ---

class GatewayMisconfigured(StorefrontError):
    status_code = 500
    code = "gateway_misconfigured"

    def __init__(self, message: str = "Configuration Stripe manquante"):
        super().__init__(message)


# --- Passerelle de paiement (500, le client peut relancer le checkout) ---

class GatewayError(StorefrontError):
    status_code = 500
    code = "gateway_error"

    def __init__(self, cause: Optional[BaseException] = None, message: str = "Erreur lors du paiement"):
        super().__init__(message)
        self.cause = cause


# --- Catalogue injoignable (503) ---

class CatalogUnavailable(StorefrontError):
    status_code = 503
    code = "catalog_unavailable"

    def __init__(self, message: str = "Catalogue indisponible"):
        super().__init__(message)


# --- Notifications (400: le processeur ne doit pas considérer le payload accepté) ---

class InvalidSignature(StorefrontError):
    status_code = 400
    code = "invalid_signature"

    def __init__(self, message: str = "Signature du webhook invalide"):
        super().__init__(message)
