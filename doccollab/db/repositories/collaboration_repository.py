from typing import Optional, List, Dict, TYPE_CHECKING
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func, and_
import uuid
from datetime import datetime

from doccollab.db.models.collaboration import (
    DocumentCollaborator as CollaboratorModel,
    UserPresence as UserPresenceModel
)

if TYPE_CHECKING:
    from doccollab.domains.access.entities import CollaboratorGrant, Role
    from doccollab.domains.collaboration.entities import UserPresence


class CollaboratorRepository:
    """Репозиторий для работы с правами соавторов"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, grant: "CollaboratorGrant") -> "CollaboratorGrant":
        """Выдача права"""
        db_grant = CollaboratorModel(
            uuid=grant.uuid,
            document_id=grant.document_id,
            user_id=grant.user_id,
            role=grant.role.value,
            created_at=grant.added_at,
            updated_at=grant.added_at
        )

        self.session.add(db_grant)
        await self.session.flush()
        return self._to_domain(db_grant)

    async def get(self, document_id: uuid.UUID, user_id: str) -> Optional["CollaboratorGrant"]:
        """Право пользователя на документ"""
        result = await self.session.execute(
            select(CollaboratorModel).where(
                and_(
                    CollaboratorModel.document_id == document_id,
                    CollaboratorModel.user_id == user_id
                )
            )
        )
        db_grant = result.scalar_one_or_none()
        return self._to_domain(db_grant) if db_grant else None

    async def get_by_document(self, document_id: uuid.UUID) -> List["CollaboratorGrant"]:
        """Все права на документ в порядке выдачи"""
        result = await self.session.execute(
            select(CollaboratorModel)
            .where(CollaboratorModel.document_id == document_id)
            .order_by(CollaboratorModel.created_at.asc(), CollaboratorModel.id.asc())
        )
        return [self._to_domain(g) for g in result.scalars().all()]

    async def update_role(self, document_id: uuid.UUID, user_id: str, role: "Role") -> bool:
        """Смена роли"""
        stmt = (
            update(CollaboratorModel)
            .where(
                and_(
                    CollaboratorModel.document_id == document_id,
                    CollaboratorModel.user_id == user_id
                )
            )
            .values(role=role.value)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def delete(self, document_id: uuid.UUID, user_id: str) -> bool:
        """Отзыв права"""
        stmt = delete(CollaboratorModel).where(
            and_(
                CollaboratorModel.document_id == document_id,
                CollaboratorModel.user_id == user_id
            )
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def delete_by_document(self, document_id: uuid.UUID) -> int:
        """Отзыв всех прав на документ"""
        stmt = delete(CollaboratorModel).where(CollaboratorModel.document_id == document_id)
        result = await self.session.execute(stmt)
        return result.rowcount

    def _to_domain(self, db_grant: CollaboratorModel) -> "CollaboratorGrant":
        """Преобразование модели БД в доменную сущность"""
        from doccollab.domains.access.entities import CollaboratorGrant, Role

        return CollaboratorGrant(
            uuid=db_grant.uuid,
            document_id=db_grant.document_id,
            user_id=db_grant.user_id,
            role=Role(db_grant.role),
            added_at=db_grant.created_at
        )


class PresenceRepository:
    """Репозиторий для работы с присутствием пользователей"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, document_id: uuid.UUID, user_id: str) -> Optional["UserPresence"]:
        """Отметка присутствия пользователя в документе"""
        db_presence = await self._get_model(document_id, user_id)
        return self._to_domain(db_presence) if db_presence else None

    async def save(self, presence: "UserPresence") -> "UserPresence":
        """Создание или обновление отметки присутствия"""
        selection_from, selection_to = presence.selection if presence.selection else (None, None)
        db_presence = await self._get_model(presence.document_id, presence.user_id)

        if db_presence is None:
            db_presence = UserPresenceModel(
                uuid=presence.uuid,
                document_id=presence.document_id,
                user_id=presence.user_id,
                user_color=presence.user_color
            )
            self.session.add(db_presence)

        db_presence.user_name = presence.user_name
        db_presence.cursor_position = presence.cursor_position
        db_presence.selection_from = selection_from
        db_presence.selection_to = selection_to
        db_presence.last_seen = presence.last_seen

        await self.session.flush()
        return self._to_domain(db_presence)

    async def get_active(
        self,
        document_id: uuid.UUID,
        since: datetime,
        exclude_user_id: Optional[str] = None
    ) -> List["UserPresence"]:
        """Отметки, обновленные после since"""
        query = select(UserPresenceModel).where(
            and_(
                UserPresenceModel.document_id == document_id,
                UserPresenceModel.last_seen > since
            )
        )
        if exclude_user_id is not None:
            query = query.where(UserPresenceModel.user_id != exclude_user_id)

        result = await self.session.execute(query.order_by(UserPresenceModel.last_seen.desc()))
        return [self._to_domain(p) for p in result.scalars().all()]

    async def count_active_by_documents(
        self,
        document_ids: List[uuid.UUID],
        since: datetime
    ) -> Dict[uuid.UUID, int]:
        """Число активных пользователей по каждому документу"""
        if not document_ids:
            return {}
        result = await self.session.execute(
            select(UserPresenceModel.document_id, func.count(UserPresenceModel.id))
            .where(
                and_(
                    UserPresenceModel.document_id.in_(document_ids),
                    UserPresenceModel.last_seen > since
                )
            )
            .group_by(UserPresenceModel.document_id)
        )
        return {document_id: count for document_id, count in result.all()}

    async def delete(self, document_id: uuid.UUID, user_id: str) -> bool:
        """Удаление отметки присутствия"""
        stmt = delete(UserPresenceModel).where(
            and_(
                UserPresenceModel.document_id == document_id,
                UserPresenceModel.user_id == user_id
            )
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def delete_by_document(self, document_id: uuid.UUID) -> int:
        """Удаление всех отметок документа"""
        stmt = delete(UserPresenceModel).where(UserPresenceModel.document_id == document_id)
        result = await self.session.execute(stmt)
        return result.rowcount

    async def delete_stale(self, cutoff: datetime) -> int:
        """Удаление отметок старше cutoff"""
        stmt = delete(UserPresenceModel).where(UserPresenceModel.last_seen < cutoff)
        result = await self.session.execute(stmt)
        return result.rowcount

    async def _get_model(self, document_id: uuid.UUID, user_id: str) -> Optional[UserPresenceModel]:
        result = await self.session.execute(
            select(UserPresenceModel).where(
                and_(
                    UserPresenceModel.document_id == document_id,
                    UserPresenceModel.user_id == user_id
                )
            )
        )
        return result.scalar_one_or_none()

    def _to_domain(self, db_presence: UserPresenceModel) -> "UserPresence":
        """Преобразование модели БД в доменную сущность"""
        from doccollab.domains.collaboration.entities import UserPresence

        selection = None
        if db_presence.selection_from is not None and db_presence.selection_to is not None:
            selection = (db_presence.selection_from, db_presence.selection_to)

        presence = UserPresence(
            document_id=db_presence.document_id,
            user_id=db_presence.user_id,
            user_name=db_presence.user_name,
            cursor_position=db_presence.cursor_position,
            selection=selection,
            user_color=db_presence.user_color,
            last_seen=db_presence.last_seen
        )
        presence.uuid = db_presence.uuid
        return presence
