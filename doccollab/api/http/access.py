from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, List
import uuid

from doccollab.core.auth import Identity, get_current_identity
from doccollab.core.db import get_db
from doccollab.domains.access.schemas import (
    CollaboratorCreate, CollaboratorUpdate, CollaboratorResponse,
    AccessResponse, OwnershipTransfer
)
from doccollab.domains.access.services import AccessControlService
from doccollab.domains.documents.schemas import DocumentResponse

router = APIRouter(prefix="/documents/{document_id}", tags=["access"])


@router.get("/collaborators", response_model=List[CollaboratorResponse])
async def list_collaborators(
    document_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    """Соавторы документа"""
    grants = await AccessControlService(db).list_collaborators(document_id, identity)
    return [CollaboratorResponse.model_validate(grant) for grant in grants]


@router.post("/collaborators", response_model=CollaboratorResponse, status_code=status.HTTP_201_CREATED)
async def add_collaborator(
    document_id: uuid.UUID,
    collaborator_data: CollaboratorCreate,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    """Выдача права на документ"""
    grant = await AccessControlService(db).add_collaborator(
        document_id, identity, collaborator_data.user_id, collaborator_data.role
    )
    return CollaboratorResponse.model_validate(grant)


@router.patch("/collaborators/{user_id}", response_model=CollaboratorResponse)
async def update_collaborator_role(
    document_id: uuid.UUID,
    user_id: str,
    update_data: CollaboratorUpdate,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    grant = await AccessControlService(db).update_collaborator_role(
        document_id, identity, user_id, update_data.role
    )
    return CollaboratorResponse.model_validate(grant)


@router.delete("/collaborators/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_collaborator(
    document_id: uuid.UUID,
    user_id: str,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    await AccessControlService(db).remove_collaborator(document_id, identity, user_id)


@router.get("/access", response_model=AccessResponse)
async def check_access(
    document_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    """Доступ текущего пользователя к документу"""
    return AccessResponse(**await AccessControlService(db).check_access(document_id, identity))


@router.post("/transfer", response_model=DocumentResponse)
async def transfer_ownership(
    document_id: uuid.UUID,
    transfer_data: OwnershipTransfer,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    """Передача владения документом"""
    document = await AccessControlService(db).transfer_ownership(
        document_id, identity, transfer_data.new_owner_id
    )
    return DocumentResponse.model_validate(document)


@router.post("/leave", status_code=status.HTTP_204_NO_CONTENT)
async def leave_document(
    document_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    identity: Optional[Identity] = Depends(get_current_identity)
):
    await AccessControlService(db).leave_document(document_id, identity)
