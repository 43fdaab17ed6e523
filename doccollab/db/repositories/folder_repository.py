from typing import Optional, TYPE_CHECKING
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
import uuid

from doccollab.db.models.document import Folder as FolderModel

if TYPE_CHECKING:
    from doccollab.domains.folders.entities import Folder


class FolderRepository:
    """Репозиторий для работы с папками"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, folder: "Folder") -> "Folder":
        """Создание папки"""
        db_folder = FolderModel(
            uuid=folder.uuid,
            name=folder.name,
            owner_id=folder.owner_id,
            parent_id=folder.parent_id,
            created_at=folder.created_at,
            updated_at=folder.created_at
        )

        self.session.add(db_folder)
        await self.session.flush()
        return self._to_domain(db_folder)

    async def get_by_uuid(self, folder_uuid: uuid.UUID) -> Optional["Folder"]:
        """Получение папки по UUID"""
        result = await self.session.execute(
            select(FolderModel).where(FolderModel.uuid == folder_uuid)
        )
        db_folder = result.scalar_one_or_none()
        return self._to_domain(db_folder) if db_folder else None

    async def set_parent(self, folder_uuid: uuid.UUID, parent_id: Optional[uuid.UUID]) -> bool:
        """Перенос папки"""
        stmt = (
            update(FolderModel)
            .where(FolderModel.uuid == folder_uuid)
            .values(parent_id=parent_id)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    def _to_domain(self, db_folder: FolderModel) -> "Folder":
        """Преобразование модели БД в доменную сущность"""
        from doccollab.domains.folders.entities import Folder

        return Folder(
            uuid=db_folder.uuid,
            name=db_folder.name,
            owner_id=db_folder.owner_id,
            parent_id=db_folder.parent_id,
            created_at=db_folder.created_at
        )
