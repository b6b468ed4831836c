#!/usr/bin/env python3
"""Create the audit log tables.

Usage:
    python scripts/init_db.py
"""

import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from shoptagger.infrastructure import models  # noqa: F401  registers tables
from shoptagger.infrastructure.database import create_tables, engine


async def main() -> None:
    """Main entry point."""
    print("Creating database tables...")
    await create_tables()
    await engine.dispose()
    print("Tables ready.")


if __name__ == "__main__":
    asyncio.run(main())
