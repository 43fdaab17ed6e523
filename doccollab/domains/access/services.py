import logging
from typing import Optional, List, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from doccollab.core.auth import Identity, require_identity
from doccollab.core.clock import Clock, utcnow
from doccollab.core.errors import NotFound, Forbidden, ValidationError, Conflict
from doccollab.db.repositories.document_repository import DocumentRepository
from doccollab.db.repositories.collaboration_repository import (
    CollaboratorRepository, PresenceRepository
)
from doccollab.domains.access.entities import (
    Role, CollaboratorGrant, ResolvedAccess, resolve_access
)
from doccollab.domains.documents.entities import Document

logger = logging.getLogger(__name__)


class AccessControlService:
    """Сервис проверки прав и управления соавторами"""

    def __init__(self, session: AsyncSession, clock: Clock = utcnow):
        self.session = session
        self.clock = clock
        self.document_repository = DocumentRepository(session)
        self.collaborator_repository = CollaboratorRepository(session)
        self.presence_repository = PresenceRepository(session)

    async def resolve_access(self, document: Document, user_id: str) -> Optional[ResolvedAccess]:
        """Эффективная роль пользователя в документе"""
        if document.is_deleted:
            return None
        if document.is_owned_by(user_id):
            return resolve_access(document, user_id)

        grant = await self.collaborator_repository.get(document.uuid, user_id)
        return resolve_access(document, user_id, grant)

    async def find_accessible(
        self,
        document_id: uuid.UUID,
        identity: Optional[Identity]
    ) -> Optional[Tuple[Document, ResolvedAccess]]:
        """Документ и роль, если у пользователя есть хоть какой-то доступ"""
        if identity is None:
            return None

        document = await self.document_repository.get_by_uuid(document_id)
        if document is None:
            return None

        access = await self.resolve_access(document, identity.user_id)
        if access is None:
            return None
        return document, access

    async def require_role(
        self,
        document_id: uuid.UUID,
        identity: Optional[Identity],
        min_role: Role
    ) -> Tuple[Document, ResolvedAccess]:
        """Документ и роль пользователя, не ниже min_role"""
        identity = require_identity(identity)

        document = await self.document_repository.get_by_uuid(document_id)
        if document is None or document.is_deleted:
            raise NotFound("Document not found")

        access = await self.resolve_access(document, identity.user_id)
        if access is None:
            raise Forbidden("You do not have access to this document")
        if access.role < min_role:
            raise Forbidden(f"This action requires the {min_role.value} role")

        return document, access

    async def require_owner(self, document_id: uuid.UUID, identity: Optional[Identity]) -> Document:
        """Прямая проверка владения, в том числе для документов в корзине"""
        identity = require_identity(identity)

        document = await self.document_repository.get_by_uuid(document_id)
        if document is None:
            raise NotFound("Document not found")
        if not document.is_owned_by(identity.user_id):
            raise Forbidden("Only the owner can perform this action")

        return document

    async def add_collaborator(
        self,
        document_id: uuid.UUID,
        identity: Optional[Identity],
        user_id: str,
        role: Role
    ) -> CollaboratorGrant:
        """Выдача права на документ"""
        document = await self.require_owner(document_id, identity)

        if document.is_owned_by(user_id):
            raise ValidationError("Cannot add the owner as a collaborator")

        existing = await self.collaborator_repository.get(document_id, user_id)
        if existing is not None:
            raise Conflict("User is already a collaborator")

        grant = await self.collaborator_repository.create(
            CollaboratorGrant(document_id=document_id, user_id=user_id, role=role, added_at=self.clock())
        )
        await self.session.commit()

        logger.info("Granted %s on document %s to %s", role.value, document_id, user_id)
        return grant

    async def remove_collaborator(
        self,
        document_id: uuid.UUID,
        identity: Optional[Identity],
        user_id: str
    ) -> None:
        """Отзыв права и удаление отметки присутствия"""
        await self.require_owner(document_id, identity)

        removed = await self.collaborator_repository.delete(document_id, user_id)
        if not removed:
            raise NotFound("Collaborator not found")

        await self.presence_repository.delete(document_id, user_id)
        await self.session.commit()

        logger.info("Revoked access to document %s from %s", document_id, user_id)

    async def update_collaborator_role(
        self,
        document_id: uuid.UUID,
        identity: Optional[Identity],
        user_id: str,
        role: Role
    ) -> CollaboratorGrant:
        """Смена роли соавтора"""
        await self.require_owner(document_id, identity)

        updated = await self.collaborator_repository.update_role(document_id, user_id, role)
        if not updated:
            raise NotFound("Collaborator not found")

        await self.session.commit()
        return await self.collaborator_repository.get(document_id, user_id)

    async def list_collaborators(
        self,
        document_id: uuid.UUID,
        identity: Optional[Identity]
    ) -> List[CollaboratorGrant]:
        """Соавторы документа (пусто, если доступа нет)"""
        if await self.find_accessible(document_id, identity) is None:
            return []
        return await self.collaborator_repository.get_by_document(document_id)

    async def check_access(self, document_id: uuid.UUID, identity: Optional[Identity]) -> dict:
        """Информация о доступе, без исключений"""
        found = await self.find_accessible(document_id, identity)
        if found is None:
            return {"has_access": False, "role": None, "is_owner": False}

        _, access = found
        return {"has_access": True, "role": access.role, "is_owner": access.is_owner}

    async def leave_document(self, document_id: uuid.UUID, identity: Optional[Identity]) -> None:
        """Соавтор отказывается от своего права"""
        identity = require_identity(identity)

        removed = await self.collaborator_repository.delete(document_id, identity.user_id)
        if not removed:
            raise NotFound("You are not a collaborator on this document")

        await self.presence_repository.delete(document_id, identity.user_id)
        await self.session.commit()

    async def list_shared_documents(self, identity: Optional[Identity]) -> List[Tuple[Document, Role]]:
        """Документы, доступные пользователю по праву соавтора"""
        if identity is None:
            return []

        shared = await self.document_repository.get_shared_with(identity.user_id)
        return [(document, Role(role)) for document, role in shared]

    async def transfer_ownership(
        self,
        document_id: uuid.UUID,
        identity: Optional[Identity],
        new_owner_id: str
    ) -> Document:
        """Передача владения; прежний владелец становится редактором"""
        document, _ = await self.require_role(document_id, identity, Role.OWNER)
        previous_owner_id = document.owner_id

        if new_owner_id == previous_owner_id:
            raise ValidationError("Cannot transfer ownership to yourself")

        now = self.clock()
        await self.collaborator_repository.delete(document_id, new_owner_id)
        await self.document_repository.set_owner(document_id, new_owner_id, updated_at=now)
        await self.collaborator_repository.create(
            CollaboratorGrant(
                document_id=document_id,
                user_id=previous_owner_id,
                role=Role.EDITOR,
                added_at=now
            )
        )
        await self.session.commit()

        logger.info(
            "Transferred ownership of document %s from %s to %s",
            document_id, previous_owner_id, new_owner_id
        )
        return await self.document_repository.get_by_uuid(document_id)
