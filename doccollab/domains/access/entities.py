import enum
from uuid import UUID, uuid4
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, TYPE_CHECKING

from doccollab.core.clock import utcnow

if TYPE_CHECKING:
    from doccollab.domains.documents.entities import Document


class Role(enum.Enum):
    """Уровень доступа к документу: viewer < editor < owner"""
    VIEWER = ("viewer", 0)
    EDITOR = ("editor", 1)
    OWNER = ("owner", 2)

    def __new__(cls, value: str, level: int):
        member = object.__new__(cls)
        member._value_ = value
        member.level = level
        return member

    def __ge__(self, other):
        if self.__class__ is other.__class__:
            return self.level >= other.level
        return NotImplemented

    def __gt__(self, other):
        if self.__class__ is other.__class__:
            return self.level > other.level
        return NotImplemented

    def __le__(self, other):
        if self.__class__ is other.__class__:
            return self.level <= other.level
        return NotImplemented

    def __lt__(self, other):
        if self.__class__ is other.__class__:
            return self.level < other.level
        return NotImplemented


@dataclass
class CollaboratorGrant:
    """Право пользователя на чужой документ"""
    document_id: UUID
    user_id: str
    role: Role
    uuid: UUID = field(default_factory=uuid4)
    added_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class ResolvedAccess:
    role: Role
    is_owner: bool


def resolve_access(
    document: "Document",
    user_id: str,
    grant: Optional[CollaboratorGrant] = None
) -> Optional[ResolvedAccess]:
    """Эффективная роль пользователя; None - доступа нет.

    Документ в корзине недоступен никому: владелец восстанавливает и удаляет
    его через отдельные проверки владения.
    """
    if document.is_deleted:
        return None

    if document.owner_id == user_id:
        return ResolvedAccess(role=Role.OWNER, is_owner=True)

    if grant is not None and grant.document_id == document.uuid and grant.user_id == user_id:
        return ResolvedAccess(role=grant.role, is_owner=False)

    return None
