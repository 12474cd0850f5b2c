"""Create a dashboard admin from the command line (alternative to POST /api/admin/create)."""
from __future__ import annotations

import argparse
import asyncio
import getpass
import sys
from pathlib import Path

# Ensure the project root is on sys.path so ``app`` can be imported when the script is executed directly.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.core.db import async_session_maker  # noqa: E402
from app.core.errors import ConflictError  # noqa: E402
from app.services.auth_service import create_admin  # noqa: E402


async def _create(username: str, password: str) -> int:
    async with async_session_maker() as session:
        try:
            admin = await create_admin(session, username, password)
            await session.commit()
        except ConflictError as e:
            await session.rollback()
            print(f"Error: {e.message}")
            return 1
    print(f"Admin '{admin.username}' created with id {admin.id}.")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("username")
    parser.add_argument("--password", help="Prompted for when omitted")
    args = parser.parse_args()

    if len(args.username) < 3:
        print("Error: username must have at least 3 characters")
        return 1
    password = args.password or getpass.getpass("Password: ")
    if len(password) < 6:
        print("Error: password must have at least 6 characters")
        return 1
    return asyncio.run(_create(args.username, password))


if __name__ == "__main__":
    sys.exit(main())
