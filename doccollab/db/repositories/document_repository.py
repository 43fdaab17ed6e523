from datetime import datetime
from typing import Optional, List, Tuple, TYPE_CHECKING
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func, and_, or_
import uuid

from doccollab.db.models.document import Document as DocumentModel
from doccollab.db.models.collaboration import DocumentCollaborator as CollaboratorModel

if TYPE_CHECKING:
    from doccollab.domains.documents.entities import Document, DocumentPatch


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class DocumentRepository:
    """Репозиторий для работы с документами"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, document: "Document") -> "Document":
        """Создание нового документа"""
        db_document = DocumentModel(
            uuid=document.uuid,
            title=document.title,
            content=document.content,
            owner_id=document.owner_id,
            is_deleted=document.is_deleted,
            parent_folder_id=document.parent_folder_id,
            created_at=document.created_at,
            updated_at=document.updated_at,
            last_snapshot_at=document.last_snapshot_at
        )

        self.session.add(db_document)
        await self.session.flush()
        return self._to_domain(db_document)

    async def get_by_uuid(self, document_uuid: uuid.UUID) -> Optional["Document"]:
        """Получение документа по UUID"""
        result = await self.session.execute(
            select(DocumentModel).where(DocumentModel.uuid == document_uuid)
            .execution_options(populate_existing=True)
        )
        db_document = result.scalar_one_or_none()
        return self._to_domain(db_document) if db_document else None

    async def get_by_owner(
        self,
        owner_id: str,
        folder_id: Optional[uuid.UUID] = None,
        include_deleted: bool = False
    ) -> List["Document"]:
        """Получение документов владельца"""
        query = select(DocumentModel).where(DocumentModel.owner_id == owner_id)

        if folder_id is not None:
            query = query.where(DocumentModel.parent_folder_id == folder_id)

        if not include_deleted:
            query = query.where(DocumentModel.is_deleted == False)  # noqa: E712

        result = await self.session.execute(
            query.order_by(DocumentModel.updated_at.desc(), DocumentModel.id.desc())
            .execution_options(populate_existing=True)
        )
        return [self._to_domain(doc) for doc in result.scalars().all()]

    async def get_shared_with(
        self,
        user_id: str,
        folder_id: Optional[uuid.UUID] = None
    ) -> List[Tuple["Document", str]]:
        """Документы, к которым у пользователя есть право (без удаленных), с ролью"""
        query = (
            select(DocumentModel, CollaboratorModel.role)
            .join(CollaboratorModel, CollaboratorModel.document_id == DocumentModel.uuid)
            .where(
                and_(
                    CollaboratorModel.user_id == user_id,
                    DocumentModel.is_deleted == False  # noqa: E712
                )
            )
        )

        if folder_id is not None:
            query = query.where(DocumentModel.parent_folder_id == folder_id)

        result = await self.session.execute(
            query.order_by(DocumentModel.updated_at.desc(), DocumentModel.id.desc())
            .execution_options(populate_existing=True)
        )
        return [(self._to_domain(doc), role) for doc, role in result.all()]

    async def get_recent_by_owner(self, owner_id: str, limit: int = 10) -> List["Document"]:
        """Недавно измененные документы владельца"""
        result = await self.session.execute(
            select(DocumentModel)
            .where(
                and_(
                    DocumentModel.owner_id == owner_id,
                    DocumentModel.is_deleted == False  # noqa: E712
                )
            )
            .order_by(DocumentModel.updated_at.desc(), DocumentModel.id.desc())
            .execution_options(populate_existing=True)
            .limit(limit)
        )
        return [self._to_domain(doc) for doc in result.scalars().all()]

    async def get_deleted_by_owner(self, owner_id: str) -> List["Document"]:
        """Документы владельца в корзине"""
        result = await self.session.execute(
            select(DocumentModel)
            .where(
                and_(
                    DocumentModel.owner_id == owner_id,
                    DocumentModel.is_deleted == True  # noqa: E712
                )
            )
            .order_by(DocumentModel.updated_at.desc(), DocumentModel.id.desc())
            .execution_options(populate_existing=True)
        )
        return [self._to_domain(doc) for doc in result.scalars().all()]

    async def count_created_since(self, owner_id: str, since: datetime) -> int:
        """Подсчет документов владельца, созданных после указанного момента"""
        result = await self.session.execute(
            select(func.count(DocumentModel.id)).where(
                and_(
                    DocumentModel.owner_id == owner_id,
                    DocumentModel.created_at >= since
                )
            )
        )
        return result.scalar()

    async def search_by_title(self, query: str, user_id: str, limit: int = 20) -> List["Document"]:
        """Поиск по заголовку среди своих и доступных документов"""
        shared_ids = select(CollaboratorModel.document_id).where(CollaboratorModel.user_id == user_id)

        result = await self.session.execute(
            select(DocumentModel)
            .where(
                and_(
                    DocumentModel.title.ilike(f"%{_escape_like(query)}%", escape="\\"),
                    DocumentModel.is_deleted == False,  # noqa: E712
                    or_(
                        DocumentModel.owner_id == user_id,
                        DocumentModel.uuid.in_(shared_ids)
                    )
                )
            )
            .order_by(DocumentModel.updated_at.desc(), DocumentModel.id.desc())
            .execution_options(populate_existing=True)
            .limit(limit)
        )
        return [self._to_domain(doc) for doc in result.scalars().all()]

    async def apply_patch(
        self,
        document_uuid: uuid.UUID,
        patch: "DocumentPatch",
        updated_at: datetime
    ) -> bool:
        """Обновление только перечисленных в патче полей"""
        values = patch.to_values()
        values["updated_at"] = updated_at
        return await self._update(document_uuid, **values)

    async def set_deleted(self, document_uuid: uuid.UUID, is_deleted: bool, updated_at: datetime) -> bool:
        """Пометка удаления / восстановление"""
        return await self._update(document_uuid, is_deleted=is_deleted, updated_at=updated_at)

    async def set_owner(self, document_uuid: uuid.UUID, owner_id: str, updated_at: datetime) -> bool:
        """Смена владельца"""
        return await self._update(document_uuid, owner_id=owner_id, updated_at=updated_at)

    async def restore_snapshot(
        self,
        document_uuid: uuid.UUID,
        title: str,
        content: str,
        updated_at: datetime
    ) -> bool:
        """Перезапись содержимого и заголовка из снимка"""
        return await self._update(document_uuid, title=title, content=content, updated_at=updated_at)

    async def mark_snapshot(self, document_uuid: uuid.UUID, snapshot_at: Optional[datetime]) -> None:
        """Запоминание времени последнего снимка"""
        await self._update(
            document_uuid,
            last_snapshot_at=snapshot_at,
            updated_at=DocumentModel.updated_at
        )

    async def claim_snapshot_slot(
        self,
        document_uuid: uuid.UUID,
        now: datetime,
        not_after: datetime
    ) -> bool:
        """Условный захват права на автоснимок.

        Строка обновляется только если предыдущего снимка не было или он сделан
        не позже not_after; конкурентные вызовы внутри интервала получают False.
        """
        stmt = (
            update(DocumentModel)
            .where(
                and_(
                    DocumentModel.uuid == document_uuid,
                    or_(
                        DocumentModel.last_snapshot_at.is_(None),
                        DocumentModel.last_snapshot_at <= not_after
                    )
                )
            )
            .values(last_snapshot_at=now, updated_at=DocumentModel.updated_at)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def delete(self, document_uuid: uuid.UUID) -> bool:
        """Удаление документа"""
        stmt = delete(DocumentModel).where(DocumentModel.uuid == document_uuid)
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def _update(self, document_uuid: uuid.UUID, **values) -> bool:
        stmt = (
            update(DocumentModel)
            .where(DocumentModel.uuid == document_uuid)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    def _to_domain(self, db_document: DocumentModel) -> "Document":
        """Преобразование модели БД в доменную сущность"""
        from doccollab.domains.documents.entities import Document

        return Document(
            uuid=db_document.uuid,
            title=db_document.title,
            content=db_document.content,
            owner_id=db_document.owner_id,
            is_deleted=db_document.is_deleted,
            parent_folder_id=db_document.parent_folder_id,
            created_at=db_document.created_at,
            updated_at=db_document.updated_at,
            last_snapshot_at=db_document.last_snapshot_at
        )
