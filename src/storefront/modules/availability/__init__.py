"""Availability module: opening hours and open-window computation."""

from storefront.modules.availability.routes import router


__all__ = ["router"]
