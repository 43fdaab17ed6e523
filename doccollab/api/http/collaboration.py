from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, List
import uuid

from doccollab.core.auth import Identity, get_current_identity
from doccollab.core.db import get_db
from doccollab.domains.collaboration.schemas import (
    PresenceUpdate, CursorUpdate, Selection, PresenceResponse, ActiveUserCountResponse
)
from doccollab.domains.collaboration.services import PresenceService

router = APIRouter(prefix="/documents/{document_id}/presence", tags=["presence"])


@router.put("", response_model=PresenceResponse)
async def update_presence(
    document_id: uuid.UUID,
    presence_data: PresenceUpdate,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    """Отметка присутствия в документе"""
    selection = presence_data.selection.as_tuple() if presence_data.selection else None
    presence = await PresenceService(db).update_presence(
        document_id, identity, cursor_position=presence_data.cursor_position, selection=selection
    )
    return PresenceResponse.from_presence(presence)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def remove_presence(
    document_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    await PresenceService(db).remove_presence(document_id, identity)


@router.post("/heartbeat", status_code=status.HTTP_204_NO_CONTENT)
async def heartbeat(
    document_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    await PresenceService(db).heartbeat(document_id, identity)


@router.put("/cursor", status_code=status.HTTP_204_NO_CONTENT)
async def update_cursor_position(
    document_id: uuid.UUID,
    cursor_data: CursorUpdate,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    await PresenceService(db).update_cursor_position(document_id, identity, cursor_data.cursor_position)


@router.put("/selection", status_code=status.HTTP_204_NO_CONTENT)
async def update_selection(
    document_id: uuid.UUID,
    selection: Selection,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    await PresenceService(db).update_selection(document_id, identity, selection.as_tuple())


@router.get("/active", response_model=List[PresenceResponse])
async def get_active_users(
    document_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    """Другие пользователи, активные в документе"""
    users = await PresenceService(db).get_active_users(document_id, identity)
    return [PresenceResponse.from_presence(p) for p in users]


@router.get("/count", response_model=ActiveUserCountResponse)
async def get_active_user_count(
    document_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    count = await PresenceService(db).get_active_user_count(document_id, identity)
    return ActiveUserCountResponse(count=count)
