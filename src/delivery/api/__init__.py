"""Delivery domain API package."""

from delivery.api.routes import order_router, register_delivery_exception_handlers, supplier_router

__all__ = ["supplier_router", "order_router", "register_delivery_exception_handlers"]
