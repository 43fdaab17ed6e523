from typing import Optional, List, TYPE_CHECKING
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func
import uuid

from doccollab.db.models.document import DocumentVersion as DocumentVersionModel

if TYPE_CHECKING:
    from doccollab.domains.versions.entities import DocumentVersion


class DocumentVersionRepository:
    """Репозиторий для работы со снимками документов"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, version: "DocumentVersion") -> "DocumentVersion":
        """Сохранение нового снимка"""
        db_version = DocumentVersionModel(
            uuid=version.uuid,
            document_id=version.document_id,
            content=version.content,
            title=version.title,
            created_by=version.created_by,
            created_at=version.created_at,
            updated_at=version.created_at
        )

        self.session.add(db_version)
        await self.session.flush()
        return self._to_domain(db_version)

    async def get_by_uuid(self, version_uuid: uuid.UUID) -> Optional["DocumentVersion"]:
        """Получение снимка по UUID"""
        result = await self.session.execute(
            select(DocumentVersionModel).where(DocumentVersionModel.uuid == version_uuid)
        )
        db_version = result.scalar_one_or_none()
        return self._to_domain(db_version) if db_version else None

    async def get_by_document(self, document_id: uuid.UUID, limit: int = 20) -> List["DocumentVersion"]:
        """Снимки документа, новые первыми"""
        result = await self.session.execute(
            select(DocumentVersionModel)
            .where(DocumentVersionModel.document_id == document_id)
            .order_by(DocumentVersionModel.created_at.desc(), DocumentVersionModel.id.desc())
            .limit(limit)
        )
        return [self._to_domain(v) for v in result.scalars().all()]

    async def get_oldest_first(self, document_id: uuid.UUID) -> List["DocumentVersion"]:
        """Все снимки документа по возрастанию времени создания"""
        result = await self.session.execute(
            select(DocumentVersionModel)
            .where(DocumentVersionModel.document_id == document_id)
            .order_by(DocumentVersionModel.created_at.asc(), DocumentVersionModel.id.asc())
        )
        return [self._to_domain(v) for v in result.scalars().all()]

    async def count_by_document(self, document_id: uuid.UUID) -> int:
        """Подсчет снимков документа"""
        result = await self.session.execute(
            select(func.count(DocumentVersionModel.id))
            .where(DocumentVersionModel.document_id == document_id)
        )
        return result.scalar()

    async def get_latest_created_at(self, document_id: uuid.UUID) -> Optional[datetime]:
        """Время самого свежего снимка документа"""
        result = await self.session.execute(
            select(func.max(DocumentVersionModel.created_at))
            .where(DocumentVersionModel.document_id == document_id)
        )
        return result.scalar()

    async def get_documents_over_limit(self, limit: int) -> List[uuid.UUID]:
        """Документы, у которых снимков больше лимита"""
        result = await self.session.execute(
            select(DocumentVersionModel.document_id)
            .group_by(DocumentVersionModel.document_id)
            .having(func.count(DocumentVersionModel.id) > limit)
        )
        return list(result.scalars().all())

    async def delete_many(self, version_uuids: List[uuid.UUID]) -> int:
        """Удаление набора снимков"""
        if not version_uuids:
            return 0
        stmt = delete(DocumentVersionModel).where(DocumentVersionModel.uuid.in_(version_uuids))
        result = await self.session.execute(stmt)
        return result.rowcount

    async def delete(self, version_uuid: uuid.UUID) -> bool:
        """Удаление снимка"""
        return await self.delete_many([version_uuid]) > 0

    async def delete_by_document(self, document_id: uuid.UUID) -> int:
        """Удаление всех снимков документа"""
        stmt = delete(DocumentVersionModel).where(DocumentVersionModel.document_id == document_id)
        result = await self.session.execute(stmt)
        return result.rowcount

    def _to_domain(self, db_version: DocumentVersionModel) -> "DocumentVersion":
        """Преобразование модели БД в доменную сущность"""
        from doccollab.domains.versions.entities import DocumentVersion

        return DocumentVersion(
            uuid=db_version.uuid,
            document_id=db_version.document_id,
            content=db_version.content,
            title=db_version.title,
            created_by=db_version.created_by,
            created_at=db_version.created_at
        )
