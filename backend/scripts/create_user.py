"""Create a user so its id can be sent as the acting-user header.

Usage:
    python scripts/create_user.py "Ada Lovelace" ada@example.com
"""

import asyncio
import sys

from taskboard.core.config import get_settings
from taskboard.core.logging import configure_structlog
from taskboard.db.base import close_db, get_session_factory, init_db
from taskboard.store.base import StorageError
from taskboard.store.sql import SqlAlchemyStore


async def main(name: str, email: str) -> int:
    configure_structlog(get_settings())
    await init_db()
    try:
        store = SqlAlchemyStore(get_session_factory())
        try:
            user = await store.create_user(name, email)
        except StorageError as exc:
            print(f"Could not create user: {exc}")
            return 1
        print(f"Created user {user.id} ({user.email})")
        return 0
    finally:
        await close_db()


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(2)
    sys.exit(asyncio.run(main(sys.argv[1], sys.argv[2])))
