"""Tests for per-request structlog context binding."""

import asyncio

import structlog
from delivery.api.routes import fresh_log_context
from delivery.utils.logging import add_context, clear_context


def test_add_context_binds_values():
    clear_context()
    add_context(supplier_id="sup-001", order_id="ord-1")
    try:
        assert structlog.contextvars.get_contextvars() == {"supplier_id": "sup-001", "order_id": "ord-1"}
    finally:
        clear_context()
    assert structlog.contextvars.get_contextvars() == {}


def test_request_starts_without_leftover_context():
    async def request():
        add_context(order_id="ord-previous")
        await fresh_log_context()
        add_context(supplier_id="sup-001")
        return structlog.contextvars.get_contextvars()

    assert asyncio.run(request()) == {"supplier_id": "sup-001"}
