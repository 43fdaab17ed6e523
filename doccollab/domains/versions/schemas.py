from pydantic import BaseModel, ConfigDict
import uuid
from datetime import datetime


class VersionResponse(BaseModel):
    """Схема для ответа с данными снимка"""
    uuid: uuid.UUID
    document_id: uuid.UUID
    title: str
    content: str
    created_by: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AutoVersionResponse(BaseModel):
    created: bool


class VersionCountResponse(BaseModel):
    count: int


class VersionComparisonResponse(BaseModel):
    """Два снимка одного документа и diff их текста"""
    first: VersionResponse
    second: VersionResponse
    diff: str

    model_config = ConfigDict(from_attributes=True)
