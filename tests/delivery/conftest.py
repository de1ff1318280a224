import os
from datetime import date

import pytest


@pytest.fixture(scope="session")
def _delivery_domain(request):
    """Initialize the delivery domain once per session."""
    os.environ["PROTEAN_ENV"] = request.config.option.env
    os.environ.setdefault("DELIVERY_TIMEZONE", "UTC")

    from delivery.domain import delivery

    delivery.init()
    return delivery


@pytest.fixture(scope="session", autouse=True)
def setup_db(_delivery_domain):
    from delivery.utils.db import drop_db, setup_db

    setup_db(_delivery_domain)

    yield

    drop_db(_delivery_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_delivery_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _delivery_domain.domain_context()
    ctx.push()

    yield

    from delivery.admission.ledger import reset_ledger
    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    for _, broker in current_domain.brokers.items():
        broker._data_reset()

    current_domain.event_store.store._data_reset()
    reset_ledger()
    ctx.pop()


@pytest.fixture()
def delivery_domain(_delivery_domain):
    """The initialized domain, for tests that push their own contexts."""
    return _delivery_domain


@pytest.fixture()
def booking_day():
    return date(2026, 3, 2)
