"""Application tests for the management CLI helpers."""

from delivery.slots.catalog import SlotCatalog
from manage import seed_default_slots, setup_database


def test_seed_default_slots(delivery_domain, capsys):
    seed_default_slots(delivery_domain, ["sup-cli-1", "sup-cli-2"])

    assert len(SlotCatalog().list_slots("sup-cli-1")) == 3
    assert len(SlotCatalog().list_slots("sup-cli-2")) == 3
    assert "sup-cli-1: 8–11 AM (5)" in capsys.readouterr().out


def test_setup_database_is_noop_for_memory_provider(delivery_domain, capsys):
    setup_database(delivery_domain)
    assert "delivery schema ready" in capsys.readouterr().out
