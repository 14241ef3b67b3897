"""
Основной роутер API.

Подключает все endpoint'ы приложения.
"""

from fastapi import APIRouter

from app.api.endpoints import admin_wishlists, cart, categories, products, wishlist

api_router = APIRouter()

api_router.include_router(categories.router, prefix="/categories", tags=["categories"])
api_router.include_router(products.router, prefix="/products", tags=["products"])
api_router.include_router(wishlist.router, prefix="/wishlist", tags=["wishlist"])
api_router.include_router(admin_wishlists.router, prefix="/admin/wishlists", tags=["admin"])
api_router.include_router(cart.router, prefix="/cart", tags=["cart"])
