import difflib
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, List
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from doccollab.core.auth import Identity, require_identity
from doccollab.core.clock import Clock, utcnow
from doccollab.core.config import settings
from doccollab.core.errors import NotFound, ValidationError
from doccollab.db.repositories.document_repository import DocumentRepository
from doccollab.db.repositories.version_repository import DocumentVersionRepository
from doccollab.domains.access.entities import Role
from doccollab.domains.access.services import AccessControlService
from doccollab.domains.documents.entities import Document
from doccollab.domains.export.serializers import to_text
from doccollab.domains.versions.entities import DocumentVersion, surplus_versions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VersionComparison:
    first: DocumentVersion
    second: DocumentVersion
    diff: str


def _comparable_text(version: DocumentVersion) -> str:
    try:
        return to_text(version.content)
    except ValidationError:
        return version.content


def diff_versions(first: DocumentVersion, second: DocumentVersion) -> str:
    """Unified diff текстового представления двух снимков"""
    lines = difflib.unified_diff(
        _comparable_text(first).splitlines(),
        _comparable_text(second).splitlines(),
        fromfile=f"{first.title} ({first.created_at.isoformat()})",
        tofile=f"{second.title} ({second.created_at.isoformat()})",
        lineterm=""
    )
    return "\n".join(lines)


class VersionService:
    """Сервис истории версий: снимки, ограничение числа, восстановление"""

    def __init__(
        self,
        session: AsyncSession,
        clock: Clock = utcnow,
        max_versions: Optional[int] = None,
        min_interval: Optional[timedelta] = None
    ):
        self.session = session
        self.clock = clock
        self.max_versions = max_versions if max_versions is not None else settings.max_versions
        self.min_interval = (
            min_interval if min_interval is not None
            else timedelta(seconds=settings.min_version_interval_seconds)
        )
        self.document_repository = DocumentRepository(session)
        self.version_repository = DocumentVersionRepository(session)
        self.access = AccessControlService(session, clock)

    async def create_version(self, document_id: uuid.UUID, identity: Optional[Identity]) -> DocumentVersion:
        """Снимок текущего состояния документа"""
        document, _ = await self.access.require_role(document_id, identity, Role.VIEWER)

        version = await self._snapshot(document, identity.user_id)
        await self.session.commit()

        await self._evict_surplus(document_id)
        return version

    async def auto_create_version(self, document_id: uuid.UUID, identity: Optional[Identity]) -> bool:
        """Снимок, только если предыдущий сделан не менее интервала назад"""
        document, _ = await self.access.require_role(document_id, identity, Role.VIEWER)

        now = self.clock()
        claimed = await self.document_repository.claim_snapshot_slot(
            document_id, now=now, not_after=now - self.min_interval
        )
        if not claimed:
            await self.session.rollback()
            return False

        await self.version_repository.create(
            DocumentVersion.snapshot_of(document, identity.user_id, now)
        )
        await self.session.commit()

        await self._evict_surplus(document_id)
        return True

    async def list_versions(
        self,
        document_id: uuid.UUID,
        identity: Optional[Identity],
        limit: int = 20
    ) -> List[DocumentVersion]:
        """Снимки документа, новые первыми (пусто, если доступа нет)"""
        if await self.access.find_accessible(document_id, identity) is None:
            return []
        return await self.version_repository.get_by_document(document_id, limit=limit)

    async def get_version(self, version_id: uuid.UUID, identity: Optional[Identity]) -> Optional[DocumentVersion]:
        """Снимок по UUID (None, если доступа нет)"""
        version = await self.version_repository.get_by_uuid(version_id)
        if version is None:
            return None
        if await self.access.find_accessible(version.document_id, identity) is None:
            return None
        return version

    async def get_version_count(self, document_id: uuid.UUID, identity: Optional[Identity]) -> int:
        if await self.access.find_accessible(document_id, identity) is None:
            return 0
        return await self.version_repository.count_by_document(document_id)

    async def compare_versions(
        self,
        first_id: uuid.UUID,
        second_id: uuid.UUID,
        identity: Optional[Identity]
    ) -> Optional[VersionComparison]:
        """Сравнение двух снимков одного документа"""
        first = await self.version_repository.get_by_uuid(first_id)
        second = await self.version_repository.get_by_uuid(second_id)

        if first is None or second is None:
            return None
        if first.document_id != second.document_id:
            return None
        if await self.access.find_accessible(first.document_id, identity) is None:
            return None

        return VersionComparison(first=first, second=second, diff=diff_versions(first, second))

    async def restore_version(self, version_id: uuid.UUID, identity: Optional[Identity]) -> Document:
        """Восстановление документа из снимка с резервной копией текущего состояния"""
        identity = require_identity(identity)

        version = await self.version_repository.get_by_uuid(version_id)
        if version is None:
            raise NotFound("Version not found")

        document, _ = await self.access.require_role(version.document_id, identity, Role.EDITOR)

        now = self.clock()
        await self._snapshot(document, identity.user_id, now)
        await self.document_repository.restore_snapshot(
            document.uuid, title=version.title, content=version.content, updated_at=now
        )
        await self.session.commit()

        logger.info("Document %s restored from version %s by %s", document.uuid, version_id, identity.user_id)

        await self._evict_surplus(document.uuid)
        return await self.document_repository.get_by_uuid(document.uuid)

    async def delete_version(self, version_id: uuid.UUID, identity: Optional[Identity]) -> None:
        """Удаление снимка владельцем документа"""
        identity = require_identity(identity)

        version = await self.version_repository.get_by_uuid(version_id)
        if version is None:
            raise NotFound("Version not found")

        await self.access.require_owner(version.document_id, identity)
        await self.version_repository.delete(version_id)
        latest = await self.version_repository.get_latest_created_at(version.document_id)
        await self.document_repository.mark_snapshot(version.document_id, latest)
        await self.session.commit()

    async def cleanup_old_versions(self) -> int:
        """Обрезка истории всех документов до лимита; возвращает число удаленных снимков"""
        document_ids = await self.version_repository.get_documents_over_limit(self.max_versions)

        evicted = 0
        for document_id in document_ids:
            evicted += await self._evict_surplus(document_id)

        if evicted:
            logger.info("Version cleanup evicted %d snapshots across %d documents", evicted, len(document_ids))
        return evicted

    async def _snapshot(self, document: Document, user_id: str, now=None) -> DocumentVersion:
        now = now or self.clock()
        version = await self.version_repository.create(
            DocumentVersion.snapshot_of(document, user_id, now)
        )
        await self.document_repository.mark_snapshot(document.uuid, now)
        return version

    async def _evict_surplus(self, document_id: uuid.UUID) -> int:
        """Удаление самых старых снимков сверх лимита; ошибки только логируются"""
        try:
            versions = await self.version_repository.get_oldest_first(document_id)
            surplus = surplus_versions(versions, self.max_versions)
            if not surplus:
                return 0

            deleted = await self.version_repository.delete_many([v.uuid for v in surplus])
            await self.session.commit()
        except SQLAlchemyError:
            logger.exception("Failed to evict old versions of document %s", document_id)
            await self.session.rollback()
            return 0

        logger.debug("Evicted %d versions of document %s", deleted, document_id)
        return deleted
