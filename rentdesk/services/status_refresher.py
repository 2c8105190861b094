"""
Periodic payment status refresh

Started with the application: first run shortly after startup, then once
per interval for every user. A failed run is logged and the loop keeps going.
"""
import asyncio
import logging
from typing import Optional

from rentdesk.core.config import settings
from rentdesk.database import SessionLocal
from rentdesk.services.payment_service import apply_status_refresh

logger = logging.getLogger(__name__)


def refresh_once() -> int:
    db = SessionLocal()
    try:
        return apply_status_refresh(db)
    finally:
        db.close()


async def run_status_refresher(
    interval_seconds: Optional[float] = None,
    initial_delay_seconds: Optional[float] = None,
) -> None:
    interval = settings.status_refresh_interval_seconds if interval_seconds is None else interval_seconds
    delay = settings.STATUS_REFRESH_INITIAL_DELAY_SECONDS if initial_delay_seconds is None else initial_delay_seconds

    logger.info(f"[status] Refresher scheduled: first run in {delay}s, then every {interval}s")
    await asyncio.sleep(delay)
    while True:
        try:
            updated = await asyncio.to_thread(refresh_once)
            logger.info(f"[status] Refresh run complete, {updated} payment(s) changed")
        except Exception as e:
            logger.error(f"[status] Refresh run failed: {e}", exc_info=True)
        await asyncio.sleep(interval)


def start_status_refresher() -> asyncio.Task:
    return asyncio.create_task(run_status_refresher(), name="payment-status-refresher")


async def stop_status_refresher(task: Optional[asyncio.Task]) -> None:
    if task is None or task.done():
        return
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
    logger.info("[status] Refresher stopped")
