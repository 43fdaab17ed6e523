from pydantic import BaseModel, Field, ConfigDict, model_validator
from typing import Optional, Tuple
import uuid
from datetime import datetime


class Selection(BaseModel):
    """Выделение в документе"""
    start: int = Field(..., ge=0, alias="from")
    end: int = Field(..., ge=0, alias="to")

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def check_order(self):
        if self.end < self.start:
            raise ValueError("Selection end must not precede its start")
        return self

    def as_tuple(self) -> Tuple[int, int]:
        return self.start, self.end


class PresenceUpdate(BaseModel):
    """Отметка присутствия: позиция курсора и выделение"""
    cursor_position: Optional[int] = Field(None, ge=0)
    selection: Optional[Selection] = None


class CursorUpdate(BaseModel):
    cursor_position: int = Field(..., ge=0)


class PresenceResponse(BaseModel):
    """Схема для ответа с данными присутствия"""
    document_id: uuid.UUID
    user_id: str
    user_name: str
    user_color: str
    cursor_position: Optional[int] = None
    selection: Optional[Selection] = None
    last_seen: datetime

    @classmethod
    def from_presence(cls, presence) -> "PresenceResponse":
        selection = None
        if presence.selection is not None:
            selection = Selection(start=presence.selection[0], end=presence.selection[1])
        return cls(
            document_id=presence.document_id,
            user_id=presence.user_id,
            user_name=presence.user_name,
            user_color=presence.user_color,
            cursor_position=presence.cursor_position,
            selection=selection,
            last_seen=presence.last_seen
        )


class ActiveUserCountResponse(BaseModel):
    count: int
