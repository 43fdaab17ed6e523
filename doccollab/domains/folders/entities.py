from uuid import UUID, uuid4
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from doccollab.core.clock import utcnow


@dataclass
class Folder:
    """Папка для размещения документов"""
    name: str
    owner_id: str
    parent_id: Optional[UUID] = None
    uuid: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utcnow)

    def is_owned_by(self, user_id: str) -> bool:
        return self.owner_id == user_id
