"""DigiGoods Checkout database management CLI.

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
    python src/manage.py seed       # Load demo products and discount codes
"""

import argparse
import sys


def setup_databases():
    """Create database schemas for the checkout domain."""
    from checkout.domain import checkout
    from checkout.utils.db import setup_db

    print("Initializing checkout domain...")
    checkout.init()
    print("Creating checkout database schema...")
    setup_db(checkout)
    print("Done.")


def drop_databases():
    """Drop database schemas for the checkout domain."""
    from checkout.domain import checkout
    from checkout.utils.db import drop_db

    print("Initializing checkout domain...")
    checkout.init()
    print("Dropping checkout database schema...")
    drop_db(checkout)
    print("Done.")


def seed_database():
    """Load demo products and discount codes."""
    from checkout.domain import checkout
    from checkout.utils.seed import seed_demo_data

    checkout.init()
    with checkout.domain_context():
        created = seed_demo_data()
    for name, identifier in created.items():
        print(f"  {name}: {identifier}")
    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="DigiGoods Checkout database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("seed", help="Load demo products and discount codes")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_databases()
    elif args.command == "drop-db":
        drop_databases()
    elif args.command == "seed":
        seed_database()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
