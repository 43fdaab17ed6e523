from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import uuid

from doccollab.core.auth import Identity, get_current_identity
from doccollab.core.db import get_db
from doccollab.domains.folders.schemas import FolderCreate, FolderMove, FolderResponse
from doccollab.domains.folders.services import FolderService

router = APIRouter(prefix="/folders", tags=["folders"])


@router.post("", response_model=FolderResponse, status_code=status.HTTP_201_CREATED)
async def create_folder(
    folder_data: FolderCreate,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    """Создание папки"""
    folder = await FolderService(db).create_folder(identity, folder_data.name, folder_data.parent_id)
    return FolderResponse.model_validate(folder)


@router.post("/{folder_id}/move", response_model=FolderResponse)
async def move_folder(
    folder_id: uuid.UUID,
    move_data: FolderMove,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    """Перенос папки"""
    folder = await FolderService(db).move_folder(folder_id, identity, move_data.parent_id)
    return FolderResponse.model_validate(folder)
