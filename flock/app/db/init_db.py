# flock/app/db/init_db.py
"""
Create the tables. Runs at application start-up, or by hand:

    python -m flock.app.db.init_db
"""
import asyncio
import logging
import sys

from sqlalchemy.ext.asyncio import AsyncEngine

from flock.app.db.base import Base
from flock.app import models  # noqa: F401  registers every table on Base.metadata

logger = logging.getLogger(__name__)


async def init_models(bind: AsyncEngine, drop: bool = False) -> None:
    async with bind.begin() as conn:
        if drop:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Tables ready on %s", bind.url.render_as_string(hide_password=True))


if __name__ == "__main__":
    from flock.app.db.session import engine

    logging.basicConfig(level=logging.INFO)
    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    asyncio.run(init_models(engine, drop="--drop" in sys.argv))
