import logging
from datetime import timedelta
from typing import Optional, List, Dict, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from doccollab.core.auth import Identity, require_identity
from doccollab.core.clock import Clock, utcnow
from doccollab.core.config import settings
from doccollab.db.repositories.collaboration_repository import PresenceRepository
from doccollab.domains.access.entities import Role
from doccollab.domains.access.services import AccessControlService
from doccollab.domains.collaboration.entities import UserPresence

logger = logging.getLogger(__name__)


class PresenceService:
    """Сервис присутствия: отметки активности, курсоры, выделения"""

    def __init__(self, session: AsyncSession, clock: Clock = utcnow, stale_after: Optional[timedelta] = None):
        self.session = session
        self.clock = clock
        self.stale_after = stale_after or timedelta(seconds=settings.presence_stale_seconds)
        self.presence_repository = PresenceRepository(session)
        self.access = AccessControlService(session, clock)

    async def update_presence(
        self,
        document_id: uuid.UUID,
        identity: Optional[Identity],
        cursor_position: Optional[int] = None,
        selection: Optional[Tuple[int, int]] = None
    ) -> UserPresence:
        """Создание или обновление отметки присутствия"""
        await self.access.require_role(document_id, identity, Role.VIEWER)
        now = self.clock()

        presence = await self.presence_repository.get(document_id, identity.user_id)
        if presence is None:
            presence = UserPresence(
                document_id=document_id,
                user_id=identity.user_id,
                user_name=identity.display_name,
                cursor_position=cursor_position,
                selection=selection,
                last_seen=now
            )
        else:
            presence.user_name = identity.display_name
            presence.update_cursor(cursor_position, selection, now)

        presence = await self.presence_repository.save(presence)
        await self.session.commit()
        return presence

    async def heartbeat(self, document_id: uuid.UUID, identity: Optional[Identity]) -> None:
        """Продление отметки, если она есть"""
        await self._touch(document_id, identity, lambda p, now: p.update_activity(now))

    async def update_cursor_position(
        self,
        document_id: uuid.UUID,
        identity: Optional[Identity],
        cursor_position: int
    ) -> None:
        await self._touch(
            document_id, identity, lambda p, now: p.update_cursor(cursor_position, p.selection, now)
        )

    async def update_selection(
        self,
        document_id: uuid.UUID,
        identity: Optional[Identity],
        selection: Tuple[int, int]
    ) -> None:
        await self._touch(document_id, identity, lambda p, now: p.update_selection(selection, now))

    async def remove_presence(self, document_id: uuid.UUID, identity: Optional[Identity]) -> None:
        """Удаление своей отметки"""
        identity = require_identity(identity)
        await self.presence_repository.delete(document_id, identity.user_id)
        await self.session.commit()

    async def get_active_users(self, document_id: uuid.UUID, identity: Optional[Identity]) -> List[UserPresence]:
        """Активные пользователи документа, кроме вызывающего"""
        if await self.access.find_accessible(document_id, identity) is None:
            return []
        return await self.presence_repository.get_active(
            document_id, since=self.clock() - self.stale_after, exclude_user_id=identity.user_id
        )

    async def get_active_user_count(self, document_id: uuid.UUID, identity: Optional[Identity]) -> int:
        counts = await self.get_presence_for_documents([document_id], identity)
        return counts.get(document_id, 0)

    async def get_presence_for_documents(
        self,
        document_ids: List[uuid.UUID],
        identity: Optional[Identity]
    ) -> Dict[uuid.UUID, int]:
        """Число активных пользователей по каждому доступному документу"""
        accessible = []
        for document_id in document_ids:
            if await self.access.find_accessible(document_id, identity) is not None:
                accessible.append(document_id)

        counts = await self.presence_repository.count_active_by_documents(
            accessible, since=self.clock() - self.stale_after
        )
        return {document_id: counts.get(document_id, 0) for document_id in accessible}

    async def cleanup_stale_presence(self) -> int:
        """Удаление отметок старше удвоенного порога активности"""
        deleted = await self.presence_repository.delete_stale(self.clock() - self.stale_after * 2)
        await self.session.commit()

        if deleted:
            logger.info("Removed %d stale presence records", deleted)
        return deleted

    async def _touch(self, document_id: uuid.UUID, identity: Optional[Identity], change) -> None:
        identity = require_identity(identity)

        presence = await self.presence_repository.get(document_id, identity.user_id)
        if presence is None:
            return

        change(presence, self.clock())
        await self.presence_repository.save(presence)
        await self.session.commit()
