#klient sklepu: storage, lokalny koszyk, sesja i uzgadnianie koszyka z serwerem

from storefront.client.api_client import ApiError, AuthError, NotFoundError, StorefrontClient
from storefront.client.local_cart import CartLine, CartSnapshot, CartStatus, LocalCart
from storefront.client.reconciler import CartReconciler
from storefront.client.session import AuthSession
from storefront.client.storage import LocalStorage

__all__ = [
    "ApiError",
    "AuthError",
    "NotFoundError",
    "StorefrontClient",
    "CartLine",
    "CartSnapshot",
    "CartStatus",
    "LocalCart",
    "CartReconciler",
    "AuthSession",
    "LocalStorage",
]
