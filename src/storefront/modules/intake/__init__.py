"""Intake module: public reservation, appointment, order and cancellation endpoints."""

from storefront.modules.intake.routes import router


__all__ = ["router"]
