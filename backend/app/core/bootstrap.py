# app/core/bootstrap.py
"""
Bootstrap module for application background upkeep.
Starts the periodic purge of unconfirmed accounts whose confirmation window
has passed (the expiry the database does not enforce on its own).
"""
import asyncio
import logging
from app.config import settings
from app.services.users import purge_expired_users

logger = logging.getLogger("uvicorn.error")

async def _purge_loop(interval: int) -> None:
    """
    Run purge_expired_users every `interval` seconds until cancelled.
    A failed run is logged and retried on the next tick.
    """
    while True:
        try:
            await purge_expired_users()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("[bootstrap] expired user purge failed")
        await asyncio.sleep(interval)

def start_expired_user_purge() -> asyncio.Task | None:
    """
    Schedule the purge loop on the running event loop.

    Returns None (nothing scheduled) when USER_PURGE_INTERVAL_SECONDS is 0.
    """
    interval = settings.user_purge_interval
    if interval <= 0:
        logger.warning("[bootstrap] USER_PURGE_INTERVAL_SECONDS=0 -> expired users are not purged")
        return None
    logger.info("[bootstrap] purging expired unconfirmed users every %ss", interval)
    return asyncio.create_task(_purge_loop(interval))

async def stop_expired_user_purge(task: asyncio.Task | None) -> None:
    if task is None:
        return
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
