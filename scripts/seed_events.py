import asyncio
import logging

import app.database as database
from app.repositories.event_repository import EventRepository
from app.seeds.events import create_events
from app.utils.logger import configure_logging


async def main() -> None:
    """Create the tables and insert the sample events."""

    await database.init_models()
    created = await create_events(
        database.TransactionManager(database.new_session),
        EventRepository(database.new_session),
    )
    await database.engine.dispose()
    print(f"Seeded {created} events.")


if __name__ == "__main__":
    configure_logging()
    try:
        asyncio.run(main())
    except Exception:
        logging.getLogger("seed_events").exception("Seeding failed")
        raise SystemExit(1)
