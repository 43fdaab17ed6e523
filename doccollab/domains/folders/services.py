from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from doccollab.core.auth import Identity, require_identity
from doccollab.core.clock import Clock, utcnow
from doccollab.core.errors import NotFound, Forbidden, ValidationError
from doccollab.db.repositories.folder_repository import FolderRepository
from doccollab.domains.folders.entities import Folder


class FolderService:
    """Сервис размещения: создание и перенос папок, проверка целевой папки"""

    def __init__(self, session: AsyncSession, clock: Clock = utcnow):
        self.session = session
        self.clock = clock
        self.folder_repository = FolderRepository(session)

    async def require_owned_folder(self, folder_id: uuid.UUID, user_id: str) -> Folder:
        """Папка существует и принадлежит пользователю"""
        folder = await self.folder_repository.get_by_uuid(folder_id)
        if folder is None or not folder.is_owned_by(user_id):
            raise NotFound("Folder not found")
        return folder

    async def create_folder(
        self,
        identity: Optional[Identity],
        name: str,
        parent_id: Optional[uuid.UUID] = None
    ) -> Folder:
        """Создание папки"""
        identity = require_identity(identity)

        name = (name or "").strip()
        if not name:
            raise ValidationError("Folder name cannot be empty")

        if parent_id is not None:
            await self.require_owned_folder(parent_id, identity.user_id)

        folder = await self.folder_repository.create(
            Folder(name=name, owner_id=identity.user_id, parent_id=parent_id, created_at=self.clock())
        )
        await self.session.commit()
        return folder

    async def move_folder(
        self,
        folder_id: uuid.UUID,
        identity: Optional[Identity],
        new_parent_id: Optional[uuid.UUID]
    ) -> Folder:
        """Перенос папки с проверкой циклов"""
        identity = require_identity(identity)

        folder = await self.folder_repository.get_by_uuid(folder_id)
        if folder is None:
            raise NotFound("Folder not found")
        if not folder.is_owned_by(identity.user_id):
            raise Forbidden("Only the owner can move this folder")

        if new_parent_id == folder_id:
            raise ValidationError("Cannot move a folder into itself")

        if new_parent_id is not None:
            await self.require_owned_folder(new_parent_id, identity.user_id)

            current = new_parent_id
            while current is not None:
                if current == folder_id:
                    raise ValidationError("Cannot move a folder into one of its subfolders")
                parent = await self.folder_repository.get_by_uuid(current)
                current = parent.parent_id if parent else None

        await self.folder_repository.set_parent(folder_id, new_parent_id)
        await self.session.commit()
        return await self.folder_repository.get_by_uuid(folder_id)
