from uuid import UUID, uuid4
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, TYPE_CHECKING

from doccollab.core.clock import utcnow

if TYPE_CHECKING:
    from doccollab.domains.documents.entities import Document

MAX_VERSIONS = 50
MIN_VERSION_INTERVAL = timedelta(minutes=5)


@dataclass(frozen=True)
class DocumentVersion:
    """Неизменяемый снимок содержимого и заголовка документа"""
    document_id: UUID
    content: str
    title: str
    created_by: str
    uuid: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utcnow)

    @classmethod
    def snapshot_of(cls, document: "Document", created_by: str, now: datetime) -> "DocumentVersion":
        """Снимок текущего состояния документа"""
        return cls(
            document_id=document.uuid,
            content=document.content,
            title=document.title,
            created_by=created_by,
            created_at=now
        )


def surplus_versions(versions: List[DocumentVersion], keep: int) -> List[DocumentVersion]:
    """Самые старые версии сверх лимита (список упорядочен по возрастанию времени)"""
    if keep < 0 or len(versions) <= keep:
        return []
    return versions[:len(versions) - keep]
