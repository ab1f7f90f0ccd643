"""Script to import tuition debts from a tab separated CSV file."""

import asyncio
import sys
from pathlib import Path

from components.core.init_db import get_db, init_models
from components.student.repository import StudentRepository


async def import_data(path: Path):
    """Import tuition debts from ``path`` into the database."""
    await init_models()
    async for db in get_db():
        with open(path, "rb") as f:
            success, message, imported, errors = await StudentRepository(db).import_debts_from_csv(f)

        print(message)
        for error in errors:
            print(f"  row {error['row']}: {error['message']}")
        return success

if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("Usage: python -m scripts.import_csv_data <tuition.csv>")
        sys.exit(2)
    ok = asyncio.run(import_data(Path(sys.argv[1])))
    sys.exit(0 if ok else 1)
