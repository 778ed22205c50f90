"""Storefront package - tenant product catalog."""

from packages.storefront.routes import router as storefront_router

__all__ = ["storefront_router"]
