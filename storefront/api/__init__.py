# storefront/api/__init__.py
from fastapi import APIRouter
from storefront.api.routers import auth, products, cart, favorites, orders

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(products.router)
api_router.include_router(cart.router)
api_router.include_router(favorites.router)
api_router.include_router(orders.router)
