from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
import uuid
from datetime import datetime


class FolderCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    parent_id: Optional[uuid.UUID] = None


class FolderMove(BaseModel):
    """Новая родительская папка; null - корень"""
    parent_id: Optional[uuid.UUID] = None


class FolderResponse(BaseModel):
    uuid: uuid.UUID
    name: str
    owner_id: str
    parent_id: Optional[uuid.UUID] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
