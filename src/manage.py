"""SlotBook management CLI.

Creates or drops the delivery database schema and seeds the standard slot set
for new suppliers.

Usage:
    python src/manage.py setup-db                      # Create all tables
    python src/manage.py drop-db                       # Drop all tables
    python src/manage.py seed-slots sup-001 sup-002    # Default slots for suppliers
"""

import argparse
import sys


def _init_domain():
    from delivery.domain import delivery

    print("Initializing delivery domain...")
    delivery.init()
    return delivery


def setup_database(domain):
    from delivery.utils.db import setup_db

    print("Creating delivery database schema...")
    setup_db(domain)
    print("  delivery schema ready.")


def drop_database(domain):
    from delivery.utils.db import drop_db

    print("Dropping delivery database schema...")
    drop_db(domain)
    print("  delivery schema dropped.")


def seed_default_slots(domain, supplier_ids):
    """Give each supplier the standard slots unless it already has some."""
    from delivery.slots.catalog import SlotCatalog

    with domain.domain_context():
        catalog = SlotCatalog()
        for supplier_id in supplier_ids:
            slots = catalog.ensure_default_slots(supplier_id)
            labels = ", ".join(f"{s.label} ({s.max_orders_per_day})" for s in slots)
            print(f"  {supplier_id}: {labels}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="SlotBook database and slot management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    seed_parser = subparsers.add_parser("seed-slots", help="Seed default delivery slots")
    seed_parser.add_argument("supplier_ids", nargs="+", help="Supplier ids to seed")

    args = parser.parse_args(argv)
    domain = _init_domain()

    if args.command == "setup-db":
        setup_database(domain)
    elif args.command == "drop-db":
        drop_database(domain)
    elif args.command == "seed-slots":
        seed_default_slots(domain, args.supplier_ids)
    else:
        parser.print_help()
        sys.exit(1)

    print("Done.")


if __name__ == "__main__":
    main()
