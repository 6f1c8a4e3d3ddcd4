"""
Periodic cleanup of expired state.

Runs inside the application lifespan: stale free-usage records and
expired pending registrations are deleted on a fixed interval.
"""

import asyncio
import logging

from .dependencies import ServiceContainer

logger = logging.getLogger(__name__)


async def run_maintenance_pass(container: ServiceContainer) -> dict[str, int]:
    """Run one cleanup pass and return how many records each step removed."""
    return {
        "free_usage": await container.free_tracker.purge_stale(),
        "pending_registrations": await container.provisioning.purge_expired(),
    }


async def maintenance_loop(container: ServiceContainer, interval_seconds: float) -> None:
    """Run cleanup passes forever; a failed pass is logged and retried next interval."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            removed = await run_maintenance_pass(container)
            logger.debug("Maintenance pass removed %s", removed)
        except Exception:
            logger.exception("Maintenance pass failed")
