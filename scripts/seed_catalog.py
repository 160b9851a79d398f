#!/usr/bin/env python3
"""Seed the catalog from a CSV export.

Creates platforms and categories from the distinct ids found in the file,
then inserts products in batches. Existing rows are left untouched.

Usage:
    python scripts/seed_catalog.py products.csv
    python scripts/seed_catalog.py products.csv --create-tables
"""

import argparse
import asyncio
import csv
import json
import sys
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any
from uuid import uuid4

from sqlalchemy.dialects.postgresql import insert

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from market_api.catalog.models import Category, Platform, Product
from market_api.infrastructure.config import settings
from market_api.infrastructure.database import Base, create_engine, create_session_factory

BATCH_SIZE = 200


def parse_bool(value: str | None) -> bool:
    """Parse a CSV boolean; anything unrecognized is False."""
    if not value:
        return False
    return value.strip().lower() in {"true", "t", "1"}


def none_if_empty(value: str | None) -> str | None:
    """Trim a CSV cell, mapping blanks to None."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def parse_timestamp(value: str | None) -> datetime:
    """Parse an ISO timestamp, defaulting to now."""
    value = none_if_empty(value)
    if value is None:
        return datetime.now(timezone.utc)
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def parse_tags(value: str | None) -> list[str] | None:
    """Parse a JSON array of tags."""
    value = none_if_empty(value)
    if value is None:
        return None
    tags = json.loads(value)
    if not isinstance(tags, list):
        raise ValueError(f"tags must be a JSON array, got {value!r}")
    return [str(tag) for tag in tags]


def row_to_product(row: dict[str, str]) -> dict[str, Any]:
    """Convert a CSV row to product column values."""
    return {
        "id": none_if_empty(row.get("id")) or str(uuid4()),
        "slug": row["slug"],
        "name": row["name"],
        "description": row.get("description") or "",
        "content": row.get("content") or "",
        "price": Decimal(none_if_empty(row.get("price")) or "0"),
        "original_price": Decimal(none_if_empty(row.get("original_price")) or "0"),
        "discount": int(none_if_empty(row.get("discount")) or 0),
        "platform_id": row["platform_id"],
        "category_id": row["category_id"],
        "rating": float(none_if_empty(row.get("rating")) or 0),
        "review_count": int(none_if_empty(row.get("review_count")) or 0),
        "sold": int(none_if_empty(row.get("sold")) or 0),
        "image": none_if_empty(row.get("image")),
        "author": row["author"],
        "author_id": none_if_empty(row.get("author_id")),
        "is_featured": parse_bool(row.get("is_featured")),
        "is_new": parse_bool(row.get("is_new")),
        "tags": parse_tags(row.get("tags")),
        "created_at": parse_timestamp(row.get("created_at")),
        "updated_at": parse_timestamp(row.get("updated_at")),
    }


def read_rows(path: Path) -> list[dict[str, str]]:
    """Read CSV rows, skipping blank lines."""
    with path.open(newline="", encoding="utf-8") as f:
        return [
            {key: (value or "").strip() for key, value in row.items()}
            for row in csv.DictReader(f)
            if any((value or "").strip() for value in row.values())
        ]


async def seed(path: Path, create_tables: bool) -> dict[str, int]:
    """Seed platforms, categories and products from a CSV file.

    Args:
        path: CSV export to read.
        create_tables: Whether to create tables first.

    Returns:
        Number of distinct platforms, categories and product rows read.
    """
    rows = read_rows(path)

    platform_ids = sorted({r["platform_id"] for r in rows if r.get("platform_id")})
    category_keys = sorted(
        {
            (r["platform_id"], r["category_id"])
            for r in rows
            if r.get("platform_id") and r.get("category_id")
        }
    )
    products = [row_to_product(r) for r in rows]

    engine = create_engine(settings.database_url)
    try:
        if create_tables:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

        session_factory = create_session_factory(engine)
        async with session_factory() as session:
            async with session.begin():
                if platform_ids:
                    await session.execute(
                        insert(Platform)
                        .values(
                            [
                                {"id": pid, "name": pid.capitalize(), "description": None}
                                for pid in platform_ids
                            ]
                        )
                        .on_conflict_do_nothing()
                    )
                if category_keys:
                    await session.execute(
                        insert(Category)
                        .values(
                            [
                                {"platform_id": pid, "id": cid, "name": cid.capitalize()}
                                for pid, cid in category_keys
                            ]
                        )
                        .on_conflict_do_nothing()
                    )
                for start in range(0, len(products), BATCH_SIZE):
                    await session.execute(
                        insert(Product)
                        .values(products[start : start + BATCH_SIZE])
                        .on_conflict_do_nothing()
                    )
    finally:
        await engine.dispose()

    return {
        "platforms": len(platform_ids),
        "categories": len(category_keys),
        "products": len(products),
    }


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed the marketplace catalog from a CSV export",
    )
    parser.add_argument("csv_path", type=Path, help="Path to the products CSV")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create tables before seeding (use Alembic in deployed environments)",
    )

    args = parser.parse_args()

    print("=" * 60)
    print("Marketplace Catalog Seeder")
    print("=" * 60)
    print(f"Source: {args.csv_path}")
    print()

    result = await seed(args.csv_path, args.create_tables)

    print(f"  ✓ Platforms: {result['platforms']}")
    print(f"  ✓ Categories: {result['categories']}")
    print(f"  ✓ Products: {result['products']}")
    print()
    print("=" * 60)
    print("Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
