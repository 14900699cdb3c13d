#!/usr/bin/env python3
"""Seed product catalog script.

Loads product payloads from a JSON file and creates them one by one,
resolving each product's category path on the way.

Usage:
    python scripts/seed_catalog.py --file scripts/sample_products.json
    python scripts/seed_catalog.py --file products.json --create-tables
"""

import argparse
import asyncio
import json
from pathlib import Path
from typing import Any

from shopcatalog.catalog.service import CatalogService
from shopcatalog.infrastructure.config import settings
from shopcatalog.infrastructure.database import async_session_factory, create_tables
from shopcatalog.infrastructure.logging_config import configure_logging


def load_products(path: Path) -> list[dict[str, Any]]:
    """Read product payloads from a JSON file.

    Args:
        path: File holding a JSON list of product objects.

    Returns:
        Product payloads.
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON list of products")
    return data


async def seed(products: list[dict[str, Any]]) -> dict[str, Any]:
    """Create all products.

    Args:
        products: Product payloads.

    Returns:
        Seeding result with counts.
    """
    async with async_session_factory() as session:
        service = CatalogService(session)
        created = await service.create_multiple_products(products)
        return {
            "products_created": len(created),
            "categories_used": len({p.category_id for p in created}),
            "brands_used": len({p.brand for p in created}),
        }


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed the product catalog from a JSON file",
    )
    parser.add_argument(
        "--file",
        type=Path,
        default=Path(__file__).parent / "sample_products.json",
        help="JSON file with a list of products (default: sample_products.json)",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create database tables before seeding",
    )

    args = parser.parse_args()
    configure_logging(settings.log_level, json_output=settings.log_json)

    print("=" * 60)
    print("Catalog Seeder")
    print("=" * 60)
    print(f"File: {args.file}")
    print()

    if args.create_tables:
        print("Creating database tables...")
        await create_tables()
        print("Tables ready.")
        print()

    products = load_products(args.file)
    print(f"Seeding {len(products)} products...")

    try:
        result = await seed(products)
    except Exception as e:
        print(f"  ✗ Error: {e}")
        raise

    print(f"  ✓ Created: {result['products_created']} products")
    print(f"  ✓ Categories: {result['categories_used']}")
    print(f"  ✓ Brands: {result['brands_used']}")
    print()
    print("=" * 60)
    print("Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
