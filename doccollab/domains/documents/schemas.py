from pydantic import BaseModel, Field, field_validator, ConfigDict
from typing import Optional
import uuid
from datetime import datetime

from doccollab.domains.documents.entities import DocumentPatch


class DocumentCreate(BaseModel):
    """Схема для создания документа (пустой заголовок - заголовок по дате)"""
    title: Optional[str] = Field(None, max_length=255)
    content: Optional[str] = Field(None, max_length=1000000)
    parent_folder_id: Optional[uuid.UUID] = None


class DocumentUpdate(BaseModel):
    """Схема для обновления документа; parent_folder_id: null переносит в корень"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, max_length=1000000)
    parent_folder_id: Optional[uuid.UUID] = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Title cannot be empty')
        return v.strip() if v else v

    def to_patch(self) -> DocumentPatch:
        patch = DocumentPatch(title=self.title, content=self.content)
        if "parent_folder_id" in self.model_fields_set:
            patch.parent_folder_id = self.parent_folder_id
        return patch


class DocumentRename(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)


class DocumentMove(BaseModel):
    """Целевая папка; null - корень"""
    folder_id: Optional[uuid.UUID] = None


class DocumentResponse(BaseModel):
    """Схема для ответа с данными документа"""
    uuid: uuid.UUID
    title: str
    content: str
    owner_id: str
    is_deleted: bool
    parent_folder_id: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class EmptyTrashResponse(BaseModel):
    deleted: int
