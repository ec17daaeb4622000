"""Seed reference tables (states, per-diem statuses, absence/shift/weapon/document types).
Run after `alembic upgrade head`; safe to run repeatedly."""
import asyncio
import sys
from pathlib import Path

# backend/ on sys.path
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from sigep.database import AsyncSessionLocal  # noqa: E402
from sigep.services.reference_data import seed_reference_data  # noqa: E402


async def run():
    async with AsyncSessionLocal() as db:
        inserted = await seed_reference_data(db)
        await db.commit()
    for table, count in inserted.items():
        print(f"{table}: {count} inserted")


if __name__ == "__main__":
    asyncio.run(run())
