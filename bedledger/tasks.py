"""Celery background tasks."""

import asyncio
import logging
from dataclasses import asdict

from celery import shared_task

from bedledger.config import settings
from bedledger.database import build_engine, build_session_factory
from bedledger.services.inventory_health_service import HealthStatus, inventory_health_service
from bedledger.services.rollup_service import rollup_service

logger = logging.getLogger(__name__)


def run_async(coro):
    """Run async function in sync context."""
    return asyncio.run(coro)


@shared_task(bind=True, max_retries=3)
def reconcile_inventory(self):
    """Recompute every room and property counter, then run the health check.

    Runs every ``reconcile_interval_minutes`` from the beat schedule.
    """
    try:
        return run_async(_reconcile_inventory())
    except Exception as exc:
        logger.exception("Inventory reconciliation failed")
        raise self.retry(exc=exc, countdown=60)


async def _reconcile_inventory() -> dict:
    # Each task run gets its own event loop, so it gets its own engine too
    engine = build_engine(settings.database_url)
    session_factory = build_session_factory(engine)
    try:
        async with session_factory() as db:
            try:
                result = await rollup_service.reconcile_all(db)
                await db.commit()
            except Exception:
                await db.rollback()
                raise

            health = await inventory_health_service.run_all_checks(db)
    finally:
        await engine.dispose()

    logger.info(
        f"Inventory reconciled: rooms {result.rooms_corrected}/{result.rooms_checked} corrected, "
        f"properties {result.properties_corrected}/{result.properties_checked} corrected, "
        f"health={health['status'].value}"
    )
    for check in health["checks"]:
        if check["status"] != HealthStatus.OK:
            logger.warning(
                f"Inventory check '{check['name']}': {check['status'].value} - {check['message']}"
            )

    return {
        "status": "success",
        "reconcile": asdict(result),
        "health": health["status"].value,
    }
