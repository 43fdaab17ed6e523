from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
import uuid
from datetime import datetime

from doccollab.domains.access.entities import Role
from doccollab.domains.documents.schemas import DocumentResponse


class CollaboratorCreate(BaseModel):
    """Схема для выдачи права на документ"""
    user_id: str = Field(..., min_length=1, max_length=255)
    role: Role = Role.VIEWER


class CollaboratorUpdate(BaseModel):
    role: Role


class CollaboratorResponse(BaseModel):
    uuid: uuid.UUID
    document_id: uuid.UUID
    user_id: str
    role: Role
    added_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AccessResponse(BaseModel):
    """Информация о доступе текущего пользователя"""
    has_access: bool
    role: Optional[Role] = None
    is_owner: bool


class OwnershipTransfer(BaseModel):
    new_owner_id: str = Field(..., min_length=1, max_length=255)


class SharedDocumentResponse(BaseModel):
    """Документ, доступный по праву соавтора, и роль в нем"""
    document: DocumentResponse
    role: Role
