import logging
from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from doccollab.core.auth import Identity, require_identity
from doccollab.core.clock import Clock, utcnow
from doccollab.core.config import settings
from doccollab.core.errors import ValidationError
from doccollab.db.repositories.document_repository import DocumentRepository
from doccollab.db.repositories.version_repository import DocumentVersionRepository
from doccollab.db.repositories.collaboration_repository import (
    CollaboratorRepository, PresenceRepository
)
from doccollab.domains.access.entities import Role
from doccollab.domains.access.services import AccessControlService
from doccollab.domains.documents.entities import Document, DocumentPatch, default_title
from doccollab.domains.folders.services import FolderService

logger = logging.getLogger(__name__)


class DocumentService:
    """Сервис для работы с документами"""

    def __init__(self, session: AsyncSession, clock: Clock = utcnow):
        self.session = session
        self.clock = clock
        self.document_repository = DocumentRepository(session)
        self.version_repository = DocumentVersionRepository(session)
        self.collaborator_repository = CollaboratorRepository(session)
        self.presence_repository = PresenceRepository(session)
        self.access = AccessControlService(session, clock)
        self.folders = FolderService(session, clock)

    async def create_document(
        self,
        identity: Optional[Identity],
        title: Optional[str] = None,
        content: Optional[str] = None,
        parent_folder_id: Optional[uuid.UUID] = None
    ) -> Document:
        """Создание нового документа"""
        identity = require_identity(identity)
        now = self.clock()

        if parent_folder_id is not None:
            await self.folders.require_owned_folder(parent_folder_id, identity.user_id)

        title = (title or "").strip()
        if not title:
            start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
            created_today = await self.document_repository.count_created_since(identity.user_id, start_of_day)
            title = default_title(now, created_today)

        document = await self.document_repository.create(
            Document.create_document(
                title=title,
                owner_id=identity.user_id,
                content=content,
                parent_folder_id=parent_folder_id,
                now=now
            )
        )
        await self.session.commit()

        logger.info("Document %s created by %s", document.uuid, identity.user_id)
        return document

    async def get_document(self, document_id: uuid.UUID, identity: Optional[Identity]) -> Optional[Document]:
        """Получение документа (None, если доступа нет)"""
        found = await self.access.find_accessible(document_id, identity)
        return found[0] if found else None

    async def list_documents(
        self,
        identity: Optional[Identity],
        folder_id: Optional[uuid.UUID] = None,
        include_deleted: bool = False
    ) -> List[Document]:
        """Свои и доступные документы, по убыванию времени изменения"""
        if identity is None:
            return []

        owned = await self.document_repository.get_by_owner(
            identity.user_id, folder_id=folder_id, include_deleted=include_deleted
        )
        shared = await self.document_repository.get_shared_with(identity.user_id, folder_id=folder_id)

        documents = owned + [document for document, _ in shared]
        documents.sort(key=lambda d: d.updated_at, reverse=True)
        return documents

    async def search_documents(
        self,
        identity: Optional[Identity],
        query: str,
        limit: Optional[int] = None
    ) -> List[Document]:
        """Поиск по заголовку без учета регистра"""
        query = (query or "").strip()
        if identity is None or not query:
            return []
        return await self.document_repository.search_by_title(
            query, identity.user_id, limit=limit or settings.search_limit
        )

    async def list_recent_documents(self, identity: Optional[Identity], limit: int = 10) -> List[Document]:
        """Недавно измененные собственные документы"""
        if identity is None:
            return []
        return await self.document_repository.get_recent_by_owner(identity.user_id, limit=limit)

    async def list_trash(self, identity: Optional[Identity]) -> List[Document]:
        """Собственные документы в корзине"""
        if identity is None:
            return []
        return await self.document_repository.get_deleted_by_owner(identity.user_id)

    async def update_document(
        self,
        document_id: uuid.UUID,
        identity: Optional[Identity],
        patch: DocumentPatch
    ) -> Document:
        """Обновление заголовка, содержимого или папки"""
        document, _ = await self.access.require_role(document_id, identity, Role.EDITOR)

        if patch.title is not None:
            patch.title = patch.title.strip()
            if not patch.title:
                raise ValidationError("Title cannot be empty")

        if patch.moves_document and patch.parent_folder_id is not None:
            await self.folders.require_owned_folder(patch.parent_folder_id, identity.user_id)

        if patch.is_empty():
            return document

        await self.document_repository.apply_patch(document_id, patch, updated_at=self.clock())
        await self.session.commit()
        return await self.document_repository.get_by_uuid(document_id)

    async def rename_document(
        self,
        document_id: uuid.UUID,
        identity: Optional[Identity],
        title: str
    ) -> Document:
        """Переименование документа"""
        return await self.update_document(document_id, identity, DocumentPatch(title=title or ""))

    async def move_document(
        self,
        document_id: uuid.UUID,
        identity: Optional[Identity],
        target_folder_id: Optional[uuid.UUID]
    ) -> Document:
        """Перенос документа в папку (None - в корень)"""
        return await self.update_document(
            document_id, identity, DocumentPatch(parent_folder_id=target_folder_id)
        )

    async def delete_document(self, document_id: uuid.UUID, identity: Optional[Identity]) -> None:
        """Перемещение в корзину; повторный вызов ничего не делает"""
        document = await self.access.require_owner(document_id, identity)
        if document.is_deleted:
            return

        await self.document_repository.set_deleted(document_id, True, updated_at=self.clock())
        await self.session.commit()

    async def restore_document(self, document_id: uuid.UUID, identity: Optional[Identity]) -> Document:
        """Восстановление из корзины"""
        document = await self.access.require_owner(document_id, identity)
        if not document.is_deleted:
            return document

        await self.document_repository.set_deleted(document_id, False, updated_at=self.clock())
        await self.session.commit()
        return await self.document_repository.get_by_uuid(document_id)

    async def permanently_delete_document(self, document_id: uuid.UUID, identity: Optional[Identity]) -> None:
        """Окончательное удаление вместе с версиями, правами и присутствием"""
        await self.access.require_owner(document_id, identity)
        await self._purge(document_id)
        await self.session.commit()

        logger.info("Document %s permanently deleted", document_id)

    async def empty_trash(self, identity: Optional[Identity]) -> int:
        """Окончательное удаление всех документов из корзины"""
        identity = require_identity(identity)

        deleted = await self.document_repository.get_deleted_by_owner(identity.user_id)
        for document in deleted:
            await self._purge(document.uuid)
        await self.session.commit()

        if deleted:
            logger.info("Emptied trash of %s: %d documents", identity.user_id, len(deleted))
        return len(deleted)

    async def duplicate_document(self, document_id: uuid.UUID, identity: Optional[Identity]) -> Document:
        """Копия документа во владении вызывающего"""
        source, _ = await self.access.require_role(document_id, identity, Role.OWNER)

        duplicate = await self.document_repository.create(
            source.duplicate_for(identity.user_id, now=self.clock())
        )
        await self.session.commit()
        return duplicate

    async def _purge(self, document_id: uuid.UUID) -> None:
        await self.version_repository.delete_by_document(document_id)
        await self.collaborator_repository.delete_by_document(document_id)
        await self.presence_repository.delete_by_document(document_id)
        await self.document_repository.delete(document_id)
