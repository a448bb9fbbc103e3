#!/usr/bin/env python3
"""List series grouped by batch.

Useful for finding series IDs to trigger a generation run with.

Usage:
    python scripts/list_series.py
"""

import asyncio
import logging
import sys
from itertools import groupby

from dotenv import load_dotenv
from sqlalchemy import select

# Load environment variables
load_dotenv()

from app.core.container import close_container_resources, container  # noqa: E402
from app.models.series import Series  # noqa: E402

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def list_series() -> None:
    """Print every series, grouped by batch number."""
    session_factory = container.infrastructure.db_session_factory()
    try:
        async with session_factory() as session:
            result = await session.execute(
                select(Series).order_by(Series.batch_number, Series.name)
            )
            series_list = list(result.scalars().all())
    finally:
        await close_container_resources()

    if not series_list:
        print("No series found in database.")
        return

    print(f"Found {len(series_list)} series:")

    for batch, members in groupby(series_list, key=lambda s: s.batch_number or 0):
        members = list(members)
        print(f"\nBatch {batch} ({len(members)} series):")
        print("-" * 80)
        for series in members:
            print(f"  Name:       {series.name}")
            print(f"  ID:         {series.id}")
            print(f"  Status:     {series.status}")
            print(f"  Difficulty: {series.difficulty_level}")
            print(f"  Lines:      {series.line_count}")
            print()

    print("-" * 80)
    print("\nTrigger commands:")
    print("  python scripts/trigger_generation.py --local 1  # Batch 1 locally")
    print(f"  python scripts/trigger_generation.py {series_list[0].id}  # One series")


def main() -> None:
    """CLI entry point."""
    try:
        asyncio.run(list_series())
    except Exception as e:
        logger.error(f"Failed to list series: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
