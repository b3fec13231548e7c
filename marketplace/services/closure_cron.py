"""
Closure cron - runs the cash closure cycle on a fixed interval inside the API process
First run is delayed 30 seconds after startup
"""

import asyncio
import logging
from typing import Optional

from ..config import (
    CLOSURE_ACTIVATE_OFFSET_MIN,
    CLOSURE_CRON_INTERVAL_MS,
    CLOSURE_FIRST_RUN_DELAY_SECONDS,
)
from ..database import SessionLocal
from ..domain.closure.service import run_closure_cycle

logger = logging.getLogger(__name__)

_closure_task: Optional[asyncio.Task] = None


def run_closure_cycle_job(offset_minutes: int = CLOSURE_ACTIVATE_OFFSET_MIN) -> dict:
    """Run one closure cycle with its own database session"""
    db = SessionLocal()
    try:
        return run_closure_cycle(db, offset_minutes)
    finally:
        db.close()


async def closure_loop(offset_minutes: int, interval_seconds: float, first_delay_seconds: float):
    """
    Main closure loop. A slow run delays the next one; a failed run is logged
    and the loop keeps going.
    """
    await asyncio.sleep(first_delay_seconds)

    while True:
        try:
            await asyncio.to_thread(run_closure_cycle_job, offset_minutes)
        except Exception as e:
            logger.error(f"❌ Closure cycle failed: {e}")

        await asyncio.sleep(interval_seconds)


def setup_closure_cron(
    offset_minutes: int = CLOSURE_ACTIVATE_OFFSET_MIN,
    interval_ms: int = CLOSURE_CRON_INTERVAL_MS,
    first_delay_seconds: float = CLOSURE_FIRST_RUN_DELAY_SECONDS,
) -> asyncio.Task:
    """Start the closure loop once per process. Must be called from a running event loop."""
    global _closure_task
    if _closure_task and not _closure_task.done():
        logger.warning("Closure cron is already running.")
        return _closure_task

    _closure_task = asyncio.get_running_loop().create_task(
        closure_loop(offset_minutes, interval_ms / 1000, first_delay_seconds)
    )
    logger.info(
        f"⏰ Closure cron started (activate +{offset_minutes}m, interval {round(interval_ms / 1000)}s)"
    )
    return _closure_task


async def stop_closure_cron():
    global _closure_task
    if _closure_task is None:
        return

    _closure_task.cancel()
    try:
        await _closure_task
    except asyncio.CancelledError:
        pass
    _closure_task = None
    logger.info("Closure cron stopped")
