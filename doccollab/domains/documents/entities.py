import json
from uuid import UUID, uuid4
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union

from doccollab.core.clock import utcnow

EMPTY_CONTENT = json.dumps({"type": "doc", "content": []})


class _Unset:
    """Маркер "поле не передано" (None означает перенос в корень)"""

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET = _Unset()


@dataclass
class Document:
    """Сущность документа"""
    title: str
    owner_id: str
    content: str = EMPTY_CONTENT
    uuid: UUID = field(default_factory=uuid4)
    is_deleted: bool = False
    parent_folder_id: Optional[UUID] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    last_snapshot_at: Optional[datetime] = None

    def is_owned_by(self, user_id: str) -> bool:
        return self.owner_id == user_id

    @classmethod
    def create_document(
        cls,
        title: str,
        owner_id: str,
        content: Optional[str] = None,
        parent_folder_id: Optional[UUID] = None,
        now: Optional[datetime] = None
    ) -> "Document":
        """Создание нового документа"""
        now = now or utcnow()
        return cls(
            title=title,
            owner_id=owner_id,
            content=content if content is not None else EMPTY_CONTENT,
            parent_folder_id=parent_folder_id,
            created_at=now,
            updated_at=now
        )

    def duplicate_for(self, owner_id: str, now: Optional[datetime] = None) -> "Document":
        """Копия документа во владении другого пользователя"""
        return Document.create_document(
            title=f"{self.title} (Copy)",
            owner_id=owner_id,
            content=self.content,
            parent_folder_id=self.parent_folder_id,
            now=now
        )

    def __repr__(self) -> str:
        return f"Document(uuid={self.uuid}, title={self.title!r}, owner_id={self.owner_id})"


@dataclass
class DocumentPatch:
    """Явный набор изменяемых полей документа"""
    title: Optional[str] = None
    content: Optional[str] = None
    parent_folder_id: Union[Optional[UUID], _Unset] = UNSET

    @property
    def moves_document(self) -> bool:
        return not isinstance(self.parent_folder_id, _Unset)

    def is_empty(self) -> bool:
        return self.title is None and self.content is None and not self.moves_document

    def to_values(self) -> dict:
        """Колонки для UPDATE, только переданные поля"""
        values = {}
        if self.title is not None:
            values["title"] = self.title
        if self.content is not None:
            values["content"] = self.content
        if self.moves_document:
            values["parent_folder_id"] = self.parent_folder_id
        return values


def default_title(now: datetime, created_today: int) -> str:
    """Заголовок по умолчанию: "Oct 16, 2026", затем "Oct 16, 2026 (2)" и т.д."""
    base = f"{now.strftime('%b')} {now.day}, {now.year}"
    count = created_today + 1
    return base if count == 1 else f"{base} ({count})"
