#!/usr/bin/env python3
"""Create the SQL tables (ranks, users).

There are no migrations: this creates missing tables and leaves existing
ones untouched. Pass --drop to start from an empty schema (destroys data).

Usage:
    cd services/api
    python -m scripts.init_db
    python -m scripts.init_db --drop
"""

import asyncio
import os
import sys

# Add parent to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.settings import get_settings  # noqa: E402
from app.stores.postgres import create_engine, create_tables, drop_tables, ping_db  # noqa: E402


async def init_database(drop: bool = False) -> None:
    settings = get_settings()
    engine = create_engine(settings)
    try:
        await ping_db(engine)
        if drop:
            await drop_tables(engine)
            print("  🗑️  Tables dropped")
        await create_tables(engine)
        print("  ✅ Tables ready: ranks, users")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(init_database(drop="--drop" in sys.argv[1:]))
