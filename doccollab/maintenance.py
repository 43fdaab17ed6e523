import asyncio
import logging
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from doccollab.core.config import settings
from doccollab.core.db import SessionLocal
from doccollab.domains.collaboration.services import PresenceService
from doccollab.domains.versions.services import VersionService

logger = logging.getLogger(__name__)


async def run_maintenance_pass(session_factory: Callable[[], AsyncSession] = SessionLocal) -> dict:
    """Один проход обслуживания: обрезка истории версий и очистка присутствия"""
    result = {"versions_evicted": 0, "presence_removed": 0}

    async with session_factory() as session:
        try:
            result["versions_evicted"] = await VersionService(session).cleanup_old_versions()
        except Exception:
            logger.exception("Version cleanup failed")
            await session.rollback()

        try:
            result["presence_removed"] = await PresenceService(session).cleanup_stale_presence()
        except Exception:
            logger.exception("Presence cleanup failed")
            await session.rollback()

    return result


async def maintenance_loop(
    interval_seconds: int = settings.maintenance_interval_seconds,
    session_factory: Callable[[], AsyncSession] = SessionLocal
) -> None:
    """Периодическое обслуживание до отмены задачи"""
    logger.info("Maintenance loop started, interval %ss", interval_seconds)
    while True:
        await asyncio.sleep(interval_seconds)
        result = await run_maintenance_pass(session_factory)
        logger.debug("Maintenance pass finished: %s", result)
